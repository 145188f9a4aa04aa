"""versecue query command - one-shot suggestions for a piece of transcript."""

import asyncio
import json
from pathlib import Path

import click

from versecue.cli.utils import build_engine, get_config, suggestions_table, warm_up
from versecue.core.errors import VerseCueError
from versecue.core.progress import get_console, status
from versecue.corpus.models import Suggestion
from versecue.search.engine import SuggestionEngine


async def _run(
    engine: SuggestionEngine, text: str, top_k: int | None, translation: str
) -> list[Suggestion]:
    await warm_up(engine)
    return await engine.query_suggestions(text, top_k=top_k, translation_label=translation)


@click.command()
@click.argument("corpus", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("text")
@click.option(
    "--embeddings",
    "embeddings_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Precomputed embedding cache (see 'versecue precompute')",
)
@click.option("-k", "--top-k", type=click.IntRange(min=1), default=None, help="Number of suggestions")
@click.option("-t", "--translation", default="KJV", show_default=True, help="Translation label")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def query_command(
    ctx: click.Context,
    corpus: Path,
    text: str,
    embeddings_path: Path | None,
    top_k: int | None,
    translation: str,
    as_json: bool,
) -> None:
    """Suggest passages from CORPUS for TEXT.

    CORPUS is a JSON array of units ({id, ref, book, chapter, verse, text, themes}).
    """
    engine = build_engine(get_config(ctx), corpus, embeddings_path)
    try:
        suggestions = asyncio.run(_run(engine, text, top_k, translation))
    except VerseCueError as e:
        raise click.ClickException(e.message) from e

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in suggestions], indent=2))
        return
    if not suggestions:
        status("Nothing relevant yet.", style="warning")
        return
    get_console().print(suggestions_table(suggestions))
