"""
Exception classes for the versioning module.
"""

from typing import Optional


class VersioningError(Exception):
    """Base exception for all versioning-related errors."""

    pass


class VersionValidationError(VersioningError, ValueError):
    """Raised when a version, version field or PR identifier is invalid.

    Invalid input is never clamped or truncated.
    """

    pass


class VersionFormatError(VersionValidationError):
    """Raised when a version string or version record has an invalid format."""

    def __init__(self, version_string: str, expected_format: str = "x.y.z"):
        self.version_string = version_string
        self.expected_format = expected_format
        super().__init__(
            f"Invalid version format: '{version_string}'. "
            f"Expected format: {expected_format}"
        )


class VersionRangeError(VersionValidationError):
    """Raised when a field falls outside the range the version code can encode."""

    def __init__(self, field: str, value, low: int = 0, high: int = 99):
        self.field = field
        self.value = value
        self.low = low
        self.high = high
        super().__init__(
            f"Version field '{field}' out of range: {value!r}. "
            f"Expected an integer in {low}..{high}"
        )


class VersionOverflowError(VersioningError):
    """Raised when a bump would carry past the major-version ceiling."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Cannot increment version {version}: the major version would exceed "
            "the encoding ceiling of 99. The version code scheme must be widened."
        )


class DegradedReadError(VersioningError):
    """Raised when PR metadata or a branch version cannot be read.

    Distinct from an empty result: an empty set of open PRs is a valid answer,
    this error means the answer is unknown.
    """

    def __init__(self, source: str, message: str = ""):
        self.source = source
        if message:
            super().__init__(f"Could not read from {source}: {message}")
        else:
            super().__init__(f"Could not read from {source}")


class VersionWriteError(VersioningError):
    """Raised when a computed version cannot be committed or pushed."""

    def __init__(
        self, branch_ref: str, version: Optional[str] = None, message: str = ""
    ):
        self.branch_ref = branch_ref
        self.version = version
        text = f"Failed to write version {version} to {branch_ref}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
