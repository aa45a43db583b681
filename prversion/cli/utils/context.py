"""Builds settings, the version store and the PR source for CLI commands."""

from pathlib import Path
from typing import Iterable, Optional

import click

from prversion.config import Settings, load_settings
from prversion.versioning import (
    GitHubPullRequestSource,
    GitVersionStore,
    OpenPullRequest,
    PullRequestSource,
    StaticPullRequestSource,
    UnavailablePullRequestSource,
    github_repository_from_url,
)

from .logging import logger


def get_settings(ctx: click.Context) -> Settings:
    root = ctx.find_root()
    root.ensure_object(dict)
    if "SETTINGS" not in root.obj:
        root.obj["SETTINGS"] = load_settings(repo_root=get_repo_path(ctx))
    return root.obj["SETTINGS"]


def get_repo_path(ctx: click.Context) -> Path:
    root = ctx.find_root()
    root.ensure_object(dict)
    return Path(root.obj.get("REPO") or Path.cwd())


def open_store(ctx: click.Context, push: Optional[bool] = None) -> GitVersionStore:
    settings = get_settings(ctx)
    return GitVersionStore(
        repo_path=get_repo_path(ctx),
        version_file=settings.version_file,
        trunk_branch=settings.trunk_branch,
        remote=settings.remote,
        push=settings.push if push is None else push,
    )


def make_source(
    settings: Settings,
    store: GitVersionStore,
    open_prs: Iterable[OpenPullRequest] = (),
) -> PullRequestSource:
    """
    Pick the PR listing backend.

    Explicit --open-pr values win; otherwise GitHub, with the repository taken
    from settings or inferred from the remote URL.
    """
    open_prs = list(open_prs)
    if open_prs:
        return StaticPullRequestSource(open_prs)

    repository = settings.github_repository
    if repository is None and store.has_remote:
        repository = github_repository_from_url(store.repo.remote(store.remote).url)

    if repository is None:
        logger.debug("No GitHub repository configured or inferable")
        return UnavailablePullRequestSource("no GitHub repository configured")

    return GitHubPullRequestSource(
        repository,
        base_branch=settings.trunk_branch,
        token=settings.github_token,
        api_url=settings.github_api_url,
        timeout=settings.list_timeout,
    )
