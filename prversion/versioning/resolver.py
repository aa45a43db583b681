"""
Version resolution for pull requests.

resolve() and re_resolve() are pure functions over an explicit snapshot of
the version universe (trunk plus the versions recorded on other open PR
branches). VersionResolver gathers that snapshot from a store and a PR
source, computes the version and writes it back to the PR branch.

Two resolutions that read the same snapshot compute the same version. That
is accepted: the version code keeps their build artifacts distinct.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Set, Tuple

from .code import encode, validate_pr_id
from .exceptions import DegradedReadError, VersionValidationError
from .history import MarkerTag
from .sources import OpenPullRequest, PullRequestSource
from .store import VersionStore
from .version import SemanticVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionAssignment:
    """The version currently recorded on one open PR branch."""

    pr_id: int
    version: SemanticVersion


def resolve(
    trunk_version: SemanticVersion,
    open_assignments: Iterable[VersionAssignment],
    pr_id: Optional[int] = None,
) -> SemanticVersion:
    """
    Compute the next candidate version for a PR.

    The result is one patch past the greatest of the trunk version and every
    open assignment, so it is greater than every version in the snapshot.

    Args:
        trunk_version: Current trunk version
        open_assignments: Versions on the other open PR branches; may be empty
            and may repeat versions
        pr_id: The PR being resolved. If given, it must not appear in
            open_assignments

    Raises:
        VersionValidationError: If open_assignments contains pr_id
        VersionOverflowError: If the bump would push major past 99
    """
    assignments = list(open_assignments)
    if pr_id is not None and any(a.pr_id == pr_id for a in assignments):
        raise VersionValidationError(
            f"Open assignments already contain PR {pr_id}; "
            "use re_resolve() to re-resolve a PR's own version"
        )

    candidate_base = max([trunk_version] + [a.version for a in assignments])
    return candidate_base.bump_patch()


def re_resolve(
    trunk_version: SemanticVersion,
    open_assignments: Iterable[VersionAssignment],
    current: SemanticVersion,
    pr_id: Optional[int] = None,
) -> SemanticVersion:
    """
    Re-resolve a PR that already has a recorded version.

    Keeps `current` when it is still ahead of trunk and every other open PR,
    otherwise resolves again with `current` included. The result is never
    lower than `current`.
    """
    assignments = list(open_assignments)
    others = [trunk_version] + [a.version for a in assignments]
    if current > max(others):
        return current
    # current <= max(others), so the fresh resolution is already past it
    return resolve(trunk_version, assignments, pr_id=pr_id)


@dataclass
class ResolutionResult:
    pr_id: int
    version: SemanticVersion
    trunk_version: SemanticVersion
    previous: Optional[SemanticVersion] = None
    assignments: FrozenSet[VersionAssignment] = field(default_factory=frozenset)
    degraded: bool = False
    commit: Optional[str] = None

    @property
    def code(self) -> int:
        return encode(self.version, self.pr_id)

    @property
    def changed(self) -> bool:
        return self.version != self.previous


class VersionResolver:
    """
    Resolves and records the version of one PR.

    Listing open PRs and reading their versions is bounded by
    `list_timeout` seconds. If the listing fails or times out, the version is
    resolved against trunk (and the PR's own record) only and the result is
    flagged as degraded. There is no retry.
    """

    def __init__(
        self,
        store: VersionStore,
        source: PullRequestSource,
        list_timeout: float = 10.0,
    ):
        self.store = store
        self.source = source
        self.list_timeout = list_timeout

    def _list_open_prs(self, deadline: float) -> Optional[Set[OpenPullRequest]]:
        """
        List open PRs on a daemon thread, waiting no later than `deadline`.

        Returns None on timeout. The abandoned thread only talks to the PR
        source, never to the store, and does not keep the process alive.
        """
        outcome: dict = {}

        def run():
            try:
                outcome["prs"] = self.source.list_open_prs(deadline=deadline)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(target=run, name="prversion-list-prs", daemon=True)
        worker.start()
        worker.join(max(0.0, deadline - time.monotonic()))

        if worker.is_alive():
            return None
        if "error" in outcome:
            raise outcome["error"]
        return outcome["prs"]

    def snapshot(
        self, pr_id: int, branch_ref: str
    ) -> Tuple[Set[VersionAssignment], bool]:
        """
        Gather the versions of the other open PRs within `list_timeout`.

        Returns:
            (assignments, degraded). A failed or timed-out listing yields an
            empty set with degraded=True. PRs not read before the deadline
            are left out, also with degraded=True.
        """
        deadline = time.monotonic() + self.list_timeout
        try:
            open_prs = self._list_open_prs(deadline)
        except DegradedReadError as e:
            logger.warning(f"{e}; resolving against trunk only")
            return set(), True
        if open_prs is None:
            logger.warning(
                f"Listing open PRs exceeded {self.list_timeout}s; "
                "resolving against trunk only"
            )
            return set(), True

        assignments: Set[VersionAssignment] = set()
        degraded = False
        for pr in sorted(open_prs, key=lambda p: p.number):
            if pr.number == pr_id or pr.branch_ref == branch_ref:
                continue
            if time.monotonic() >= deadline:
                logger.warning(
                    f"Reading open PR versions exceeded {self.list_timeout}s; "
                    f"skipping PR {pr.number} and later"
                )
                degraded = True
                break
            try:
                version = self.store.read_version_at(pr.branch_ref)
            except (DegradedReadError, VersionValidationError) as e:
                logger.warning(f"Skipping PR {pr.number} ({pr.branch_ref}): {e}")
                degraded = True
                continue
            assignments.add(VersionAssignment(pr.number, version))

        return assignments, degraded

    def resolve_pr(
        self, pr_id: int, branch_ref: str, dry_run: bool = False
    ) -> ResolutionResult:
        """
        Resolve the version of a PR and write it to the PR branch.

        Args:
            pr_id: PR identifier (0..99)
            branch_ref: The PR's branch
            dry_run: Compute only, do not write

        Raises:
            VersionRangeError: If pr_id is outside 0..99
            DegradedReadError: If the trunk version cannot be read
            VersionOverflowError: If the version would exceed 99.99.99
            VersionWriteError: If the write fails
        """
        validate_pr_id(pr_id)

        trunk_version = self.store.read_version_at(self.store.trunk_branch)
        previous = self.store.read_version_or_none(branch_ref)
        assignments, degraded = self.snapshot(pr_id, branch_ref)

        if previous is None:
            version = resolve(trunk_version, assignments, pr_id=pr_id)
        else:
            version = re_resolve(trunk_version, assignments, previous, pr_id=pr_id)

        result = ResolutionResult(
            pr_id=pr_id,
            version=version,
            trunk_version=trunk_version,
            previous=previous,
            assignments=frozenset(assignments),
            degraded=degraded,
        )

        if degraded:
            logger.warning(
                f"Degraded resolution for PR {pr_id}: {version} was computed "
                "without full visibility of other open PRs"
            )
        logger.info(
            f"Resolved PR {pr_id} to {version} "
            f"(trunk {trunk_version}, {len(assignments)} other open PRs)"
        )

        if dry_run:
            logger.info("Dry run: version not written")
        elif not result.changed:
            logger.info(f"{branch_ref} already records {version}")
        else:
            result.commit = self.store.write_version(
                branch_ref, version, MarkerTag.AUTO_BUMP
            )
            logger.info(f"Wrote {version} to {branch_ref} ({result.commit[:8]})")

        return result
