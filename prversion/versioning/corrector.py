"""
Merge-time correction of the trunk version.

PRs merge in any order, so the version a PR carries into trunk is not
necessarily the next sequential one. After every merge the corrector compares
the merged version with the version trunk had before the merge and, when they
are not one patch apart, commits the expected version to trunk.

The expected version is always derived from the live trunk history, never
from a cached value.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import VersionWriteError
from .history import MarkerTag
from .store import VersionStore
from .version import SemanticVersion

logger = logging.getLogger(__name__)

# enough first-parent commits to see past one correction commit at head
HISTORY_WINDOW = 3


def expected_next(previous_trunk_version: SemanticVersion) -> SemanticVersion:
    return previous_trunk_version.bump_patch()


def correct(
    previous_trunk_version: SemanticVersion, merged_version: SemanticVersion
) -> Optional[SemanticVersion]:
    """
    Return the corrected trunk version, or None if the merge is sequential.

    Args:
        previous_trunk_version: Trunk version before the merge
        merged_version: Trunk version the merge produced

    Raises:
        VersionOverflowError: If previous_trunk_version is 99.99.99
    """
    expected = expected_next(previous_trunk_version)
    if merged_version == expected:
        return None
    return expected


@dataclass
class CorrectionResult:
    previous: SemanticVersion
    merged: SemanticVersion
    corrected: Optional[SemanticVersion] = None
    commit: Optional[str] = None

    @property
    def effective_version(self) -> SemanticVersion:
        """The version deployment must use."""
        return self.corrected if self.corrected is not None else self.merged


class MergeCorrector:
    """Restores sequential ordering on trunk after a merge."""

    def __init__(self, store: VersionStore, history_window: int = HISTORY_WINDOW):
        self.store = store
        self.history_window = history_window

    def _last_merge(self) -> Optional[tuple]:
        history = self.store.trunk_history(limit=self.history_window)
        pair = history.last_merge()
        if pair is None:
            return None
        previous, merged = pair
        logger.debug(
            f"Trunk head {merged.short_commit} ({merged.marker.value}) records "
            f"{merged.version}; previous {previous.short_commit} records "
            f"{previous.version}"
        )
        return previous, merged

    def correct_trunk(
        self,
        previous: Optional[SemanticVersion] = None,
        merged: Optional[SemanticVersion] = None,
        dry_run: bool = False,
    ) -> Optional[CorrectionResult]:
        """
        Check the last merge into trunk and commit a correction if needed.

        Args:
            previous: Trunk version before the merge. Read from trunk
                history when omitted.
            merged: Trunk version after the merge. Read from trunk history
                when omitted.
            dry_run: Compute only, do not write

        Returns:
            The correction result, or None if trunk history holds fewer than
            two versions and previous/merged were not given.

        Raises:
            VersionWriteError: If the correction cannot be committed. Trunk
                stays out of order until someone intervenes.
        """
        if previous is None or merged is None:
            pair = self._last_merge()
            if pair is None:
                logger.info("Trunk history holds fewer than two versions")
                return None
            entry_previous, entry_merged = pair
            if previous is None:
                previous = entry_previous.version
            if merged is None:
                merged = entry_merged.version

        result = CorrectionResult(previous=previous, merged=merged)
        result.corrected = correct(previous, merged)

        if result.corrected is None:
            logger.info(f"Trunk is sequential: {previous} -> {merged}")
            return result

        logger.info(
            f"Merged version {merged} is not sequential after {previous}; "
            f"correcting trunk to {result.corrected}"
        )
        if dry_run:
            logger.info("Dry run: correction not written")
            return result

        branch = self.store.trunk_branch
        try:
            result.commit = self.store.write_version(
                branch, result.corrected, MarkerTag.AUTO_CORRECT
            )
        except VersionWriteError as e:
            logger.error(
                f"ALERT: trunk correction to {result.corrected} failed ({e}). "
                f"{branch} is out of sequential order and needs manual repair."
            )
            raise

        logger.info(f"Committed correction {result.corrected} to {branch}")
        return result
