"""versecue CLI - versecue command."""

from pathlib import Path

import click

from versecue.cli.listen import listen_command
from versecue.cli.precompute import precompute_command
from versecue.cli.query import query_command
from versecue.cli.themes import themes_command
from versecue.config.loader import load_config
from versecue.core.errors import ConfigError
from versecue.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="versecue")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (default: ./.versecue/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """versecue - live passage suggestions for a spoken transcript."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e
    if verbose:
        config.logging.level = "DEBUG"
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    configure_logging(config=config.logging)


cli.add_command(query_command, name="query")
cli.add_command(listen_command, name="listen")
cli.add_command(precompute_command, name="precompute")
cli.add_command(themes_command, name="themes")


if __name__ == "__main__":
    cli()
