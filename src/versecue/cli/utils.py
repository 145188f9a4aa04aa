"""CLI utilities."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from versecue.config.models import VerseCueConfig
from versecue.core.errors import VerseCueError
from versecue.core.progress import progress_bar, status
from versecue.corpus.loader import load_embeddings, load_units
from versecue.corpus.models import Suggestion
from versecue.index.embedding import FastEmbedProvider
from versecue.search.engine import SuggestionEngine


def get_config(ctx: click.Context) -> VerseCueConfig:
    """Config loaded by the root command, or defaults when invoked standalone."""
    obj = ctx.find_object(dict) or {}
    config = obj.get("config")
    return config if isinstance(config, VerseCueConfig) else VerseCueConfig()


def build_engine(
    config: VerseCueConfig,
    corpus_path: Path,
    embeddings_path: Path | None = None,
) -> SuggestionEngine:
    """Load a corpus (and optional embedding cache) into a new engine.

    Raises:
        click.ClickException: If the corpus or cache cannot be loaded
    """
    try:
        units = load_units(corpus_path)
        precomputed = load_embeddings(embeddings_path) if embeddings_path else None
        engine = SuggestionEngine(
            FastEmbedProvider(config.embedding),
            config.retrieval,
            embedding_config=config.embedding,
        )
        engine.load(units, precomputed=precomputed)
    except VerseCueError as e:
        raise click.ClickException(e.message) from e
    return engine


async def warm_up(engine: SuggestionEngine) -> None:
    """Embed any units missing from the cache, with a progress bar."""
    store = engine.store
    if store is None or store.is_embedded:
        return
    status(f"Embedding {store.pending} passages (one-time)...")
    with progress_bar("Embedding", total=len(store), unit="passages") as advance:
        await engine.warm_up(on_progress=advance)


def suggestions_table(suggestions: list[Suggestion]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Reference", style="cyan", no_wrap=True)
    table.add_column("Conf", justify="right")
    table.add_column("Text")
    table.add_column("Why", style="dim")
    for i, s in enumerate(suggestions, 1):
        table.add_row(str(i), s.reference, f"{s.confidence:.0%}", s.text, "; ".join(s.reasons))
    return table
