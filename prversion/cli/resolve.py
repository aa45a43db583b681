"""CLI command run when a PR is opened or updated."""

import click

from prversion.config import ConfigError
from prversion.versioning import DegradedReadError, VersioningError, VersionResolver

from .error_formatting import format_versioning_error
from .utils.args import OPEN_PR
from .utils.context import get_settings, make_source, open_store
from .utils.logging import logger


@click.command(name="resolve")
@click.option(
    "--pr",
    "pr_id",
    required=True,
    type=int,
    envvar="PRVERSION_PR",
    help="Identifier of the PR being resolved (0-99).",
)
@click.option(
    "--branch",
    "-b",
    required=True,
    envvar="PRVERSION_BRANCH",
    help="Branch of the PR.",
)
@click.option(
    "--open-pr",
    "open_prs",
    multiple=True,
    type=OPEN_PR,
    help="Open PR as NUMBER:BRANCH. Repeat for each PR; skips the GitHub listing.",
)
@click.option("--dry-run", is_flag=True, help="Compute the version without writing it.")
@click.option(
    "--fetch/--no-fetch",
    default=True,
    help="Fetch remote branches before reading versions.",
)
@click.pass_context
def resolve(ctx, pr_id, branch, open_prs, dry_run, fetch):
    """Resolve the next version of a PR and record it on the PR branch.

    Prints the resolved version.
    """
    try:
        settings = get_settings(ctx)
        store = open_store(ctx)
        if fetch:
            try:
                store.fetch()
            except DegradedReadError as e:
                logger.warning(f"{e}; using local refs")
        source = make_source(settings, store, open_prs)

        resolver = VersionResolver(store, source, list_timeout=settings.list_timeout)
        result = resolver.resolve_pr(pr_id, branch, dry_run=dry_run)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
    except VersioningError as e:
        logger.error(format_versioning_error(e))
        ctx.exit(1)

    if result.degraded:
        logger.warning(f"Version {result.version} resolved in degraded mode")
    click.echo(str(result.version))
