"""CLI commands run at build time."""

import click

from prversion.config import ConfigError
from prversion.versioning import VersioningError, VersionRecord, decode, encode

from .error_formatting import format_versioning_error
from .utils.args import VERSION
from .utils.context import get_repo_path, get_settings
from .utils.logging import logger


@click.command(name="code")
@click.option(
    "--pr",
    "pr_id",
    required=True,
    type=int,
    envvar="PRVERSION_PR",
    help="Identifier of the PR being built (0-99).",
)
@click.option(
    "--version",
    "version",
    type=VERSION,
    default=None,
    help="Version to encode. Defaults to the version file in the working tree.",
)
@click.pass_context
def code(ctx, pr_id, version):
    """Print the version code of a build.

    The output is the bare integer, for the packaging step to consume.
    """
    try:
        if version is None:
            settings = get_settings(ctx)
            path = get_repo_path(ctx) / settings.version_file
            logger.debug(f"Reading version from {path}")
            version = VersionRecord.from_yaml(path).version
        version_code = encode(version, pr_id)
    except FileNotFoundError as e:
        logger.error(f"Error: version file not found: {e.filename}")
        ctx.exit(1)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
    except VersioningError as e:
        logger.error(format_versioning_error(e))
        ctx.exit(1)

    click.echo(str(version_code))


@click.command(name="decode")
@click.argument("version_code", type=int)
@click.pass_context
def decode_command(ctx, version_code):
    """Show the version and PR identifier packed in a version code."""
    try:
        version, pr_id = decode(version_code)
    except VersioningError as e:
        logger.error(format_versioning_error(e))
        ctx.exit(1)

    click.echo(f"version: {version}")
    click.echo(f"pr: {pr_id}")
