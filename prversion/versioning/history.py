"""
Trunk version history and commit markers.

Automated version commits carry a marker in their message so tooling and
humans can tell automatic bumps, merge corrections and manual edits apart.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .version import SemanticVersion


class MarkerTag(str, Enum):
    """Origin of a version commit."""

    AUTO_BUMP = "auto-bump"
    AUTO_CORRECT = "auto-correct"
    MANUAL = "manual"

    @property
    def token(self) -> str:
        """Text embedded in commit messages; manual edits carry none."""
        if self is MarkerTag.MANUAL:
            return ""
        return f"[prversion:{self.value}]"

    @classmethod
    def from_message(cls, message: str) -> "MarkerTag":
        for tag in (cls.AUTO_BUMP, cls.AUTO_CORRECT):
            if tag.token in message:
                return tag
        return cls.MANUAL


def commit_message(version: SemanticVersion, marker: MarkerTag) -> str:
    """Build the commit message for an automated version write."""
    if marker is MarkerTag.AUTO_CORRECT:
        summary = f"Correct trunk version to {version}"
    else:
        summary = f"Set version to {version}"
    if marker.token:
        return f"{summary} {marker.token}"
    return summary


@dataclass(frozen=True)
class HistoryEntry:
    commit: str
    version: SemanticVersion
    marker: MarkerTag = MarkerTag.MANUAL

    @property
    def short_commit(self) -> str:
        return self.commit[:8]


@dataclass
class TrunkVersionHistory:
    """
    Append-only sequence of (commit, version) entries on trunk, oldest first.

    Superseded entries stay in the sequence as the audit trail;
    effective() gives the view the merge corrector reasons about.
    """

    entries: List[HistoryEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def append(self, entry: HistoryEntry) -> None:
        self.entries.append(entry)

    @property
    def head(self) -> Optional[HistoryEntry]:
        return self.entries[-1] if self.entries else None

    def effective(self) -> List[HistoryEntry]:
        """
        Collapse corrections into the entries they replace.

        An auto-correct entry supersedes the entry immediately before it, so
        a merged version that was corrected never counts as trunk's version.
        """
        result: List[HistoryEntry] = []
        for entry in self.entries:
            if entry.marker is MarkerTag.AUTO_CORRECT and result:
                result[-1] = entry
            else:
                result.append(entry)
        return result

    def last_merge(self) -> Optional[Tuple[HistoryEntry, HistoryEntry]]:
        """Return (previous, merged) from the effective history, if there are two."""
        effective = self.effective()
        if len(effective) < 2:
            return None
        return effective[-2], effective[-1]

    def corrections(self) -> List[HistoryEntry]:
        return [e for e in self.entries if e.marker is MarkerTag.AUTO_CORRECT]
