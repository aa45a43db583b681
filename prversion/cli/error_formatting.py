"""Error formatting for CLI output."""

from prversion.versioning import (
    DegradedReadError,
    VersionOverflowError,
    VersionValidationError,
    VersioningError,
    VersionWriteError,
)


def format_versioning_error(error: VersioningError) -> str:
    """Format a versioning error with a hint on what the failed step needs.

    Example output:
        Error: Failed to write version 1.0.2 to main: rejected
          The version was not recorded. Re-run the step once the branch
          accepts pushes, or commit the version by hand.
    """
    if isinstance(error, VersionWriteError):
        hint = (
            "The version was not recorded. Re-run the step once the branch "
            "accepts pushes, or commit the version by hand."
        )
    elif isinstance(error, VersionOverflowError):
        hint = "The version code encoding is exhausted and must be widened."
    elif isinstance(error, VersionValidationError):
        hint = "Versions and PR identifiers must be integers in 0..99."
    elif isinstance(error, DegradedReadError):
        hint = "Check repository access and that the branch exists."
    else:
        hint = ""

    message = f"Error: {error}"
    if hint:
        message += f"\n  {hint}"
    return message
