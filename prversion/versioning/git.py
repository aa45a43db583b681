"""
Git-backed version store.

Version records are read straight from commit trees, so sibling PR branches
never need to be checked out. Writes check out the target branch, bring it
up to date with the remote, rewrite the record, commit with a marker in the
message and push to the configured remote.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from git import Head, PushInfo, RemoteReference, Repo
from git.exc import (
    BadName,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from .exceptions import (
    DegradedReadError,
    VersionValidationError,
    VersioningError,
    VersionWriteError,
)
from .history import HistoryEntry, MarkerTag, TrunkVersionHistory, commit_message
from .record import VersionRecord
from .store import VersionStore
from .version import SemanticVersion

logger = logging.getLogger(__name__)


class GitVersionStore(VersionStore):
    """
    Version store backed by a local git clone.

    A branch name resolves to the remote-tracking branch of `remote`, so
    reads see what the last fetch brought in. The local branch is used
    instead only when it is ahead of the remote one (unpushed commits) or
    has no remote counterpart. Anything else is tried as a revision git
    understands (tags, commit hashes).

    Before a write the local branch is fast-forwarded to the remote-tracking
    branch; a local branch that has diverged from it is not written to.
    """

    def __init__(
        self,
        repo_path: Optional[Union[str, Path]] = None,
        version_file: str = "version.yaml",
        trunk_branch: str = "main",
        remote: str = "origin",
        push: bool = True,
    ):
        if repo_path is None:
            repo_path = Path.cwd()
        try:
            self.repo = Repo(repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise VersioningError(f"Not a git repository: {repo_path}") from e

        self.repo_path = Path(self.repo.working_tree_dir)
        self.version_file = Path(version_file).as_posix()
        self.trunk_branch = trunk_branch
        self.remote = remote
        self.push = push

    @property
    def has_remote(self) -> bool:
        return any(r.name == self.remote for r in self.repo.remotes)

    def fetch(self) -> None:
        """
        Refresh remote-tracking branches.

        Raises:
            DegradedReadError: If the fetch fails
        """
        if not self.has_remote:
            logger.debug(f"No remote '{self.remote}', skipping fetch")
            return
        try:
            self.repo.remote(self.remote).fetch(prune=True)
        except GitCommandError as e:
            raise DegradedReadError(f"remote {self.remote}", str(e)) from e

    def _remote_ref(self, branch_ref: str) -> Optional[RemoteReference]:
        if not self.has_remote:
            return None
        ref = RemoteReference(self.repo, f"refs/remotes/{self.remote}/{branch_ref}")
        return ref if ref.is_valid() else None

    def _branch_commit(self, branch_ref: str):
        """
        The commit a branch name stands for.

        The remote-tracking ref wins over the local branch unless the local
        branch is strictly ahead of it, i.e. holds commits not pushed yet.
        """
        local = None
        if branch_ref in self.repo.heads:
            local = self.repo.heads[branch_ref].commit
        remote_ref = self._remote_ref(branch_ref)
        remote = remote_ref.commit if remote_ref is not None else None

        if local is None:
            return remote
        if remote is None or self.repo.is_ancestor(remote, local):
            return local
        return remote

    def _resolve_commit(self, branch_ref: str):
        commit = self._branch_commit(branch_ref)
        if commit is not None:
            return commit
        try:
            return self.repo.commit(branch_ref)
        except (BadName, ValueError, GitCommandError) as e:
            raise DegradedReadError(branch_ref, "unknown branch or revision") from e

    def _read_record_at(self, commit) -> VersionRecord:
        blob = commit.tree / self.version_file
        content = blob.data_stream.read().decode("utf-8")
        return VersionRecord.from_yaml_string(content)

    def read_version_at(self, branch_ref: str) -> SemanticVersion:
        commit = self._resolve_commit(branch_ref)
        try:
            return self._read_record_at(commit).version
        except KeyError as e:
            raise DegradedReadError(
                branch_ref, f"no {self.version_file} at {commit.hexsha[:8]}"
            ) from e

    def _fast_forward(self, local: Head, remote_ref: RemoteReference) -> None:
        target = remote_ref.commit
        if local.commit == target or self.repo.is_ancestor(target, local.commit):
            return
        if not self.repo.is_ancestor(local.commit, target):
            raise VersionWriteError(
                local.name, message=f"diverged from {remote_ref.name}"
            )

        logger.debug(f"Fast-forwarding '{local.name}' to {remote_ref.name}")
        if not self.repo.head.is_detached and self.repo.active_branch == local:
            self.repo.head.reset(target, index=True, working_tree=True)
        else:
            local.commit = target

    def _checkout(self, branch_ref: str) -> None:
        remote_ref = self._remote_ref(branch_ref)

        if branch_ref in self.repo.heads:
            local = self.repo.heads[branch_ref]
            if remote_ref is not None:
                self._fast_forward(local, remote_ref)
            if self.repo.head.is_detached or self.repo.active_branch != local:
                local.checkout()
            return

        if remote_ref is not None:
            local = self.repo.create_head(branch_ref, remote_ref)
            local.set_tracking_branch(remote_ref)
            local.checkout()
            logger.debug(f"Created tracking branch '{branch_ref}'")
            return

        raise VersionWriteError(branch_ref, message="branch not found")

    def _load_working_record(self) -> Optional[VersionRecord]:
        path = self.repo_path / self.version_file
        if not path.exists():
            return None
        try:
            return VersionRecord.from_yaml(path)
        except VersionValidationError as e:
            logger.warning(f"Replacing unreadable {self.version_file}: {e}")
            return None

    def _push(self, branch_ref: str, version: SemanticVersion) -> None:
        try:
            origin = self.repo.remote(self.remote)
        except ValueError as e:
            raise VersionWriteError(
                branch_ref, str(version), f"no remote '{self.remote}'"
            ) from e

        refspec = f"refs/heads/{branch_ref}:refs/heads/{branch_ref}"
        failed = PushInfo.ERROR | PushInfo.REJECTED | PushInfo.REMOTE_REJECTED
        for info in origin.push(refspec=refspec):
            if info.flags & failed:
                raise VersionWriteError(branch_ref, str(version), info.summary.strip())

    def write_version(
        self, branch_ref: str, version: SemanticVersion, marker: MarkerTag
    ) -> str:
        try:
            self._checkout(branch_ref)

            record = self._load_working_record()
            if record is None:
                record = VersionRecord.from_version(version)
            else:
                record = record.with_version(version)
            record.save(self.repo_path / self.version_file)

            self.repo.index.add([self.version_file])
            commit = self.repo.index.commit(commit_message(version, marker))
            logger.debug(f"Committed {version} to {branch_ref} as {commit.hexsha[:8]}")

            if self.push:
                self._push(branch_ref, version)
        except (GitCommandError, OSError) as e:
            raise VersionWriteError(branch_ref, str(version), str(e)) from e

        return commit.hexsha

    def trunk_history(self, limit: Optional[int] = None) -> TrunkVersionHistory:
        head = self._resolve_commit(self.trunk_branch)
        kwargs = {"first_parent": True}
        if limit is not None:
            kwargs["max_count"] = limit

        history = TrunkVersionHistory()
        for commit in reversed(list(self.repo.iter_commits(head, **kwargs))):
            try:
                record = self._read_record_at(commit)
            except KeyError:
                # predates the version record
                continue
            except VersionValidationError as e:
                logger.warning(f"Skipping commit {commit.hexsha[:8]}: {e}")
                continue
            history.append(
                HistoryEntry(
                    commit.hexsha,
                    record.version,
                    MarkerTag.from_message(commit.message),
                )
            )
        return history
