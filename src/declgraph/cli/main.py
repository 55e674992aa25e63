"""declgraph CLI - declgraph command."""

from pathlib import Path

import click

from declgraph.cli.deps import deps_command
from declgraph.cli.printer import print_command
from declgraph.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="declgraph")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of <PATH>/.declgraph/config.yaml",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """declgraph - Swift declaration and dependency analysis."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(print_command, name="print")
cli.add_command(deps_command, name="deps")


if __name__ == "__main__":
    cli()
