"""CLI commands to inspect and edit configuration."""

from dataclasses import asdict, fields

import click

from prversion.config import (
    REPO_CONFIG_NAME,
    SECTION,
    ConfigAccessor,
    ConfigError,
    Settings,
    validate_value,
)

from .utils.context import get_repo_path, get_settings
from .utils.logging import logger

_KEYS = [f.name for f in fields(Settings) if f.name != "github_token"]


@click.group(name="config")
@click.pass_context
def config(ctx):
    """Show or edit prversion configuration."""
    ctx.ensure_object(dict)


@config.command("show")
@click.pass_context
def show(ctx):
    """Show the effective settings."""
    try:
        settings = get_settings(ctx)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)

    for key, value in asdict(settings).items():
        if key == "github_token" and value:
            value = "***"
        click.echo(f"{key} = {value}")


@config.command("set")
@click.argument("key", type=click.Choice(_KEYS))
@click.argument("value")
@click.option(
    "--scope",
    type=click.Choice(["repo", "user"]),
    default="repo",
    show_default=True,
    help="Write to the repository config file or the user config file.",
)
@click.pass_context
def set_value(ctx, key, value, scope):
    """Set a configuration value."""
    try:
        validate_value(key, value)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        ctx.exit(1)

    if scope == "user":
        accessor = ConfigAccessor()
    else:
        accessor = ConfigAccessor(get_repo_path(ctx) / REPO_CONFIG_NAME)

    accessor.set(SECTION, key, value)
    accessor.save()
    logger.info(f"Set {key} = {value} in {accessor.config_path}")
