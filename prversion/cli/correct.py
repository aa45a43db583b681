"""CLI commands run when a PR merges into trunk."""

import click

from prversion.config import ConfigError
from prversion.versioning import DegradedReadError, MergeCorrector, VersioningError

from .error_formatting import format_versioning_error
from .utils.args import VERSION
from .utils.context import open_store
from .utils.logging import logger


@click.command(name="correct")
@click.option(
    "--previous",
    type=VERSION,
    default=None,
    help="Trunk version before the merge. Read from trunk history by default.",
)
@click.option(
    "--merged",
    type=VERSION,
    default=None,
    help="Trunk version after the merge. Read from trunk history by default.",
)
@click.option(
    "--dry-run", is_flag=True, help="Compute the correction without writing it."
)
@click.option(
    "--fetch/--no-fetch",
    default=True,
    help="Fetch remote branches before reading trunk.",
)
@click.pass_context
def correct(ctx, previous, merged, dry_run, fetch):
    """Restore sequential ordering on trunk after a merge.

    Prints the version deployment must use: the correction if one was made,
    the merged version otherwise.
    """
    try:
        store = open_store(ctx)
        if fetch:
            try:
                store.fetch()
            except DegradedReadError as e:
                logger.warning(f"{e}; using local refs")

        result = MergeCorrector(store).correct_trunk(
            previous=previous, merged=merged, dry_run=dry_run
        )
        if result is None:
            effective = store.read_version_at(store.trunk_branch)
        else:
            effective = result.effective_version
    except ConfigError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
    except VersioningError as e:
        logger.error(format_versioning_error(e))
        ctx.exit(1)

    click.echo(str(effective))


@click.command(name="history")
@click.option(
    "--limit",
    "-n",
    type=click.IntRange(min=1),
    default=20,
    show_default=True,
    help="Number of trunk commits to inspect.",
)
@click.pass_context
def history(ctx, limit):
    """Show trunk's version history with the origin of each version."""
    try:
        store = open_store(ctx)
        trunk = store.trunk_history(limit=limit)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)
    except VersioningError as e:
        logger.error(format_versioning_error(e))
        ctx.exit(1)

    if not len(trunk):
        click.echo(f"No version records on {store.trunk_branch}")
        return

    for entry in trunk:
        version = str(entry.version)
        click.echo(f"{entry.short_commit}  {version:<9} {entry.marker.value}")
