"""
Versioning module for prversion.

All version logic lives in this package: parsing and bumping bounded
semantic versions, resolving the version of a pull request, encoding version
codes and correcting trunk after out-of-order merges. The CLI only wires
these pieces to configuration and to the pipeline events that invoke them.

COORDINATION MODEL:
===================

Pull requests are versioned without any lock or shared state. Each pipeline
step reads an explicit snapshot, computes, writes and exits:

- Two PRs resolving against the same snapshot get the same semantic version.
  This is tolerated: the version code adds the PR identifier, so their build
  artifacts never collide.
- Trunk is sequential only after correction. When a merge lands a version
  that is not exactly one patch past the previous trunk version, the merge
  corrector commits the expected version on top of it. Corrections are
  idempotent and never re-trigger on an already sequential trunk.

A distributed lock around "read open PRs, pick the next version" was
considered and rejected: it blocks unrelated PRs on each other and brings
deadlock and lease-expiry failure modes for little gain over correction.

ARCHITECTURAL LAYERS:
====================

1. **Core Version Logic** (version.py):
   - SemanticVersion: bounded (0..99 per field), immutable, ordered
   - parse_version: validated parse of "x.y.z" text at the boundary
   - bump_patch: patch increment with carry into minor and major

2. **Version Codes** (code.py):
   - encode / decode between (version, PR id) and the integer build code

3. **Resolution** (resolver.py):
   - resolve / re_resolve: pure functions over a snapshot
   - VersionResolver: gathers the snapshot with a bounded time budget,
     degrades to trunk-only on listing failure, writes the result

4. **Merge Correction** (corrector.py, history.py):
   - correct: pure comparison against the expected next version
   - MergeCorrector: reads live trunk history, commits corrections
   - TrunkVersionHistory, MarkerTag: audit trail and commit markers

5. **Collaborators** (store.py, git.py, sources.py, record.py):
   - VersionStore / GitVersionStore: branch version records via GitPython
   - PullRequestSource / GitHubPullRequestSource: open PR listing
   - VersionRecord: the YAML record format

6. **Exception Hierarchy** (exceptions.py)
"""

from .code import decode, encode, validate_pr_id
from .corrector import CorrectionResult, MergeCorrector, correct, expected_next
from .exceptions import (
    DegradedReadError,
    VersionFormatError,
    VersionOverflowError,
    VersionRangeError,
    VersionValidationError,
    VersioningError,
    VersionWriteError,
)
from .git import GitVersionStore
from .history import HistoryEntry, MarkerTag, TrunkVersionHistory
from .record import VersionRecord
from .resolver import (
    ResolutionResult,
    VersionAssignment,
    VersionResolver,
    re_resolve,
    resolve,
)
from .sources import (
    GitHubPullRequestSource,
    OpenPullRequest,
    PullRequestSource,
    StaticPullRequestSource,
    UnavailablePullRequestSource,
    github_repository_from_url,
)
from .store import MemoryVersionStore, VersionStore
from .version import SemanticVersion, increment_version, parse_version

__all__ = [
    # Core version utilities
    "SemanticVersion",
    "parse_version",
    "increment_version",
    # Version codes
    "encode",
    "decode",
    "validate_pr_id",
    # Resolution
    "VersionAssignment",
    "ResolutionResult",
    "VersionResolver",
    "resolve",
    "re_resolve",
    # Merge correction
    "CorrectionResult",
    "MergeCorrector",
    "correct",
    "expected_next",
    "HistoryEntry",
    "MarkerTag",
    "TrunkVersionHistory",
    # Collaborators
    "VersionRecord",
    "VersionStore",
    "MemoryVersionStore",
    "GitVersionStore",
    "OpenPullRequest",
    "PullRequestSource",
    "StaticPullRequestSource",
    "GitHubPullRequestSource",
    "UnavailablePullRequestSource",
    "github_repository_from_url",
    # Exception hierarchy
    "VersioningError",
    "VersionValidationError",
    "VersionFormatError",
    "VersionRangeError",
    "VersionOverflowError",
    "DegradedReadError",
    "VersionWriteError",
]
