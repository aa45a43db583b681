"""
Version utility module for bounded semantic versions.

Every field of a version must fit the two decimal digits the version code
reserves for it, so versions are validated at construction and parsed from
text through the standard packaging.version library.
"""

import re
from dataclasses import dataclass
from packaging.version import Version as PackagingVersion, InvalidVersion

from .exceptions import VersionFormatError, VersionOverflowError, VersionRangeError

FIELD_MIN = 0
FIELD_MAX = 99

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


def check_field(name: str, value) -> int:
    """
    Validate one bounded version field.

    Args:
        name: Field name used in the error message
        value: Candidate value

    Returns:
        The value, unchanged

    Raises:
        VersionRangeError: If value is not an int in 0..99
    """
    # bool is an int subclass but never a meaningful version field
    if isinstance(value, bool) or not isinstance(value, int):
        raise VersionRangeError(name, value, FIELD_MIN, FIELD_MAX)
    if value < FIELD_MIN or value > FIELD_MAX:
        raise VersionRangeError(name, value, FIELD_MIN, FIELD_MAX)
    return value


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """
    A bounded semantic version.

    Ordering is lexicographic on (major, minor, patch). Instances are
    immutable: bumping returns a new version.
    """

    major: int
    minor: int
    patch: int

    def __post_init__(self):
        check_field("major", self.major)
        check_field("minor", self.minor)
        check_field("patch", self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __repr__(self) -> str:
        return f"SemanticVersion('{self}')"

    def as_dict(self) -> dict:
        return {"major": self.major, "minor": self.minor, "patch": self.patch}

    def bump_patch(self) -> "SemanticVersion":
        """
        Return the next version, carrying patch into minor and minor into major.

        Raises:
            VersionOverflowError: If the carry would push major past 99
        """
        major, minor, patch = self.major, self.minor, self.patch + 1
        if patch > FIELD_MAX:
            patch = 0
            minor += 1
        if minor > FIELD_MAX:
            minor = 0
            major += 1
        if major > FIELD_MAX:
            raise VersionOverflowError(str(self))
        return SemanticVersion(major, minor, patch)


def parse_version(version_string) -> SemanticVersion:
    """
    Parse a version string into a SemanticVersion.

    Only plain release versions in the form x.y.z are accepted; prefixes,
    pre-releases and two-part versions are rejected.

    Args:
        version_string: Version string to parse

    Returns:
        SemanticVersion object

    Raises:
        VersionFormatError: If the string is not in x.y.z form
        VersionRangeError: If a field is larger than 99
    """
    if isinstance(version_string, SemanticVersion):
        return version_string

    text = str(version_string).strip()
    if not _VERSION_PATTERN.match(text):
        raise VersionFormatError(text)

    try:
        parsed = PackagingVersion(text)
    except InvalidVersion as e:
        raise VersionFormatError(text) from e

    major, minor, patch = parsed.release
    return SemanticVersion(major, minor, patch)


def increment_version(version: str) -> str:
    """
    Increment a version string by one patch, with carry.

    Args:
        version: Current version string

    Returns:
        Incremented version string
    """
    return str(parse_version(version).bump_patch())


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two version strings.

    Returns:
        -1 if version1 < version2
         0 if version1 == version2
         1 if version1 > version2
    """
    v1 = parse_version(version1)
    v2 = parse_version(version2)

    if v1 < v2:
        return -1
    elif v1 > v2:
        return 1
    else:
        return 0
