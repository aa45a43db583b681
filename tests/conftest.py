import io
import logging

import pytest
from git import Repo

from prversion.versioning import SemanticVersion, VersionRecord


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("prversion")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


# git fixtures


def _commit_version(repo: Repo, version: SemanticVersion, message: str) -> str:
    """Write version.yaml in the working tree and commit it."""
    path = repo.working_tree_dir + "/version.yaml"
    VersionRecord.from_version(version).save(path)
    repo.index.add(["version.yaml"])
    return repo.index.commit(message).hexsha


@pytest.fixture
def git_repo(tmp_path):
    """A repository whose main branch records 1.0.1."""
    repo = Repo.init(tmp_path / "work")
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
    _commit_version(repo, SemanticVersion(1, 0, 1), "Initial version")
    repo.git.branch("-M", "main")
    return repo


@pytest.fixture
def commit_version():
    """Commit a version record on the checked out branch of a repository."""
    return _commit_version


@pytest.fixture
def git_remote(tmp_path, git_repo):
    """A bare 'origin' for git_repo with main pushed."""
    bare = Repo.init(tmp_path / "origin.git", bare=True)
    git_repo.create_remote("origin", str(tmp_path / "origin.git"))
    git_repo.remote("origin").push(refspec="refs/heads/main:refs/heads/main")
    git_repo.remote("origin").fetch()
    return bare
