"""versecue listen command - follow a transcript on stdin or from a file.

Each input line is appended to a rolling window of recent words and the
window is re-queried. The previous top suggestion is fed back into the next
query so the displayed top does not flicker.
"""

from __future__ import annotations

import asyncio
import json
from collections import deque
from pathlib import Path
from typing import IO

import click

from versecue.cli.utils import build_engine, get_config, warm_up
from versecue.config.constants import LISTEN_WINDOW_WORDS_DEFAULT
from versecue.core.errors import VerseCueError
from versecue.core.progress import get_console, status
from versecue.corpus.models import Suggestion
from versecue.search.engine import SuggestionEngine


class TranscriptWindow:
    """The last ``max_words`` words of a growing transcript."""

    def __init__(self, max_words: int) -> None:
        self._words: deque[str] = deque(maxlen=max_words)

    def extend(self, line: str) -> None:
        self._words.extend(line.split())

    @property
    def text(self) -> str:
        return " ".join(self._words)


async def follow(
    engine: SuggestionEngine,
    stream: IO[str],
    *,
    window_words: int,
    top_k: int | None,
    translation: str,
    as_json: bool,
) -> int:
    """Query once per transcript line. Returns the number of queries issued."""
    await warm_up(engine)
    window = TranscriptWindow(window_words)
    previous_top: Suggestion | None = None
    queries = 0

    while True:
        line = await asyncio.to_thread(stream.readline)
        if not line:
            return queries
        if not line.strip():
            continue
        window.extend(line)
        suggestions = await engine.query_suggestions(
            window.text,
            top_k=top_k,
            translation_label=translation,
            previous_top=previous_top,
        )
        queries += 1
        if not suggestions:
            continue

        top = suggestions[0]
        if as_json:
            click.echo(json.dumps([s.to_dict() for s in suggestions]))
        elif previous_top is None or top.id != previous_top.id:
            get_console().print(
                f"[cyan]{top.reference}[/cyan] [dim]({top.confidence:.0%})[/dim] {top.text}",
                highlight=False,
            )
        previous_top = top


@click.command()
@click.argument("corpus", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--embeddings",
    "embeddings_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Precomputed embedding cache (see 'versecue precompute')",
)
@click.option(
    "-w",
    "--window-words",
    type=click.IntRange(min=1),
    default=LISTEN_WINDOW_WORDS_DEFAULT,
    show_default=True,
    help="Words of recent transcript to query with",
)
@click.option("-k", "--top-k", type=click.IntRange(min=1), default=None, help="Number of suggestions")
@click.option("-t", "--translation", default="KJV", show_default=True, help="Translation label")
@click.option("--json", "as_json", is_flag=True, help="Emit every result as a JSON line")
@click.option(
    "-i",
    "--input",
    "transcript",
    type=click.File("r"),
    default="-",
    show_default=True,
    help="Transcript to follow; - reads stdin",
)
@click.pass_context
def listen_command(
    ctx: click.Context,
    corpus: Path,
    embeddings_path: Path | None,
    window_words: int,
    top_k: int | None,
    translation: str,
    as_json: bool,
    transcript: IO[str],
) -> None:
    """Suggest passages from CORPUS while a transcript streams in on stdin.

    Prints the top suggestion whenever it changes (or every result with --json).
    """
    engine = build_engine(get_config(ctx), corpus, embeddings_path)
    try:
        queries = asyncio.run(
            follow(
                engine,
                transcript,
                window_words=window_words,
                top_k=top_k,
                translation=translation,
                as_json=as_json,
            )
        )
    except VerseCueError as e:
        raise click.ClickException(e.message) from e
    except KeyboardInterrupt:
        return
    if not as_json:
        status(f"Transcript ended after {queries} queries", style="success")
