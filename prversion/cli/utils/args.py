import click

from prversion.versioning import (
    OpenPullRequest,
    VersionValidationError,
    parse_version,
)


class VersionParamType(click.ParamType):
    """Click parameter type for x.y.z versions."""

    name = "version"

    def convert(self, value, param, ctx):
        try:
            return parse_version(value)
        except VersionValidationError as e:
            self.fail(str(e), param, ctx)


class OpenPullRequestParamType(click.ParamType):
    """Click parameter type for NUMBER:BRANCH pairs."""

    name = "number:branch"

    def convert(self, value, param, ctx):
        if isinstance(value, OpenPullRequest):
            return value
        number, sep, branch = str(value).partition(":")
        if not sep or not branch or not number.isdigit():
            self.fail(f"Expected NUMBER:BRANCH, got '{value}'", param, ctx)
        return OpenPullRequest(int(number), branch)


VERSION = VersionParamType()
OPEN_PR = OpenPullRequestParamType()
