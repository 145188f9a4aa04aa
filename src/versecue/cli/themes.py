"""versecue themes command - show the themes detected in a piece of text."""

import json

import click

from versecue.index.themes import classify


@click.command()
@click.argument("text")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def themes_command(text: str, as_json: bool) -> None:
    """Print the theme tags TEXT triggers."""
    themes = sorted(classify(text))
    if as_json:
        click.echo(json.dumps(themes))
    elif themes:
        click.echo(", ".join(themes))
    else:
        click.echo("(no themes)")
