"""
Version codes: the integer build identifier handed to the packaging step.

A code packs a version and a PR identifier into fixed two-digit decimal
slots, MMmmppPP, so the fields can be read back from the code by eye:

    encode(SemanticVersion(1, 0, 2), 3) == 1_00_02_03 == 1000203

Two builds of the same version from different PRs always get different
codes, which is what makes colliding semantic versions installable side by
side.
"""

from typing import Tuple

from .exceptions import VersionRangeError
from .version import SemanticVersion, check_field

MAJOR_FACTOR = 1_000_000
MINOR_FACTOR = 10_000
PATCH_FACTOR = 100

MAX_CODE = 99_999_999


def validate_pr_id(pr_id) -> int:
    """
    Validate a PR identifier for encoding.

    Raises:
        VersionRangeError: If pr_id is not an int in 0..99
    """
    return check_field("pr_id", pr_id)


def encode(version: SemanticVersion, pr_id: int) -> int:
    """
    Encode a version and PR identifier into a version code.

    Args:
        version: Bounded semantic version
        pr_id: PR identifier in 0..99

    Returns:
        major*1_000_000 + minor*10_000 + patch*100 + pr_id

    Raises:
        VersionRangeError: If any field is outside 0..99
    """
    # duck-typed versions never went through __post_init__
    major = check_field("major", version.major)
    minor = check_field("minor", version.minor)
    patch = check_field("patch", version.patch)
    pr_id = validate_pr_id(pr_id)

    return major * MAJOR_FACTOR + minor * MINOR_FACTOR + patch * PATCH_FACTOR + pr_id


def decode(code: int) -> Tuple[SemanticVersion, int]:
    """
    Recover the version and PR identifier from a version code.

    Raises:
        VersionRangeError: If code is not an int in 0..99999999
    """
    if isinstance(code, bool) or not isinstance(code, int):
        raise VersionRangeError("code", code, 0, MAX_CODE)
    if code < 0 or code > MAX_CODE:
        raise VersionRangeError("code", code, 0, MAX_CODE)

    major, rest = divmod(code, MAJOR_FACTOR)
    minor, rest = divmod(rest, MINOR_FACTOR)
    patch, pr_id = divmod(rest, PATCH_FACTOR)
    return SemanticVersion(major, minor, patch), pr_id
