"""
Version storage interface.

A store reads and writes the version record of a branch and exposes trunk's
version history. GitVersionStore (git.py) is the production implementation;
MemoryVersionStore keeps everything in process.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from .exceptions import DegradedReadError, VersionWriteError
from .history import HistoryEntry, MarkerTag, TrunkVersionHistory
from .version import SemanticVersion


class VersionStore(ABC):
    """Read/write access to per-branch version records."""

    trunk_branch: str = "main"

    @abstractmethod
    def read_version_at(self, branch_ref: str) -> SemanticVersion:
        """
        Read the version recorded on a branch.

        Raises:
            DegradedReadError: If the branch or its record cannot be read
            VersionValidationError: If the record is malformed
        """

    @abstractmethod
    def write_version(
        self, branch_ref: str, version: SemanticVersion, marker: MarkerTag
    ) -> str:
        """
        Commit a new version to a branch.

        Returns:
            The commit reference of the new commit

        Raises:
            VersionWriteError: If the commit or push fails
        """

    @abstractmethod
    def trunk_history(self, limit: Optional[int] = None) -> TrunkVersionHistory:
        """Return trunk's version history, oldest first."""

    def read_version_or_none(self, branch_ref: str) -> Optional[SemanticVersion]:
        """Like read_version_at, but None when the branch has no readable record."""
        try:
            return self.read_version_at(branch_ref)
        except DegradedReadError:
            return None


class MemoryVersionStore(VersionStore):
    """
    In-process store.

    Each branch holds a list of (commit, version, marker) tuples; commit ids
    are sequential strings.
    """

    def __init__(self, trunk_branch: str = "main", fail_writes: bool = False):
        self.trunk_branch = trunk_branch
        self.fail_writes = fail_writes
        self._branches: Dict[str, List[Tuple[str, SemanticVersion, MarkerTag]]] = {}
        self._counter = 0

    def _next_commit(self) -> str:
        self._counter += 1
        return f"{self._counter:040x}"

    def seed(
        self,
        branch_ref: str,
        version: SemanticVersion,
        marker: MarkerTag = MarkerTag.MANUAL,
    ) -> str:
        """Record a version without going through write_version."""
        commit = self._next_commit()
        self._branches.setdefault(branch_ref, []).append((commit, version, marker))
        return commit

    def read_version_at(self, branch_ref: str) -> SemanticVersion:
        commits = self._branches.get(branch_ref)
        if not commits:
            raise DegradedReadError(branch_ref, "no version record")
        return commits[-1][1]

    def write_version(
        self, branch_ref: str, version: SemanticVersion, marker: MarkerTag
    ) -> str:
        if self.fail_writes:
            raise VersionWriteError(branch_ref, str(version), "writes disabled")
        return self.seed(branch_ref, version, marker)

    def trunk_history(self, limit: Optional[int] = None) -> TrunkVersionHistory:
        commits = self._branches.get(self.trunk_branch, [])
        if limit is not None:
            commits = commits[-limit:]
        return TrunkVersionHistory(
            [HistoryEntry(c, v, m) for c, v, m in commits]
        )
