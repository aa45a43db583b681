"""prversion CLI"""

import click

from prversion import __version__
from prversion.cli.build import code, decode_command
from prversion.cli.config import config
from prversion.cli.correct import correct, history
from prversion.cli.resolve import resolve

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="prversion")
@click.option(
    "--repo",
    "-C",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    envvar="PRVERSION_REPO",
    help="Path to the git repository. Defaults to the current directory.",
)
@click.pass_context
def cli(ctx, repo):
    """
    Versioning for concurrently developed pull requests.

    \b
    Pipeline events:
      PR opened / updated   prversion resolve --pr N --branch BRANCH
      build requested       prversion code --pr N
      PR merged             prversion correct
    """
    ctx.ensure_object(dict)
    ctx.obj["REPO"] = repo


cli.add_command(add_debug_option(resolve))
cli.add_command(add_debug_option(code))
cli.add_command(add_debug_option(decode_command))
cli.add_command(add_debug_option(correct))
cli.add_command(add_debug_option(history))
cli.add_command(config)

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
