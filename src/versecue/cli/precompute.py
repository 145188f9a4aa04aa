"""versecue precompute command - write the embedding cache for a corpus."""

import asyncio
import time
from pathlib import Path

import click

from versecue.cli.utils import get_config
from versecue.core.errors import VerseCueError
from versecue.core.progress import progress_bar, status
from versecue.corpus.loader import load_units, save_embeddings
from versecue.corpus.store import CorpusStore
from versecue.index.embedding import FastEmbedProvider


@click.command()
@click.argument("corpus", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=None,
    help="Units per embedding batch (default: embedding.batch_size)",
)
@click.pass_context
def precompute_command(
    ctx: click.Context, corpus: Path, output: Path, batch_size: int | None
) -> None:
    """Embed every unit in CORPUS and write the vectors to OUTPUT.

    OUTPUT is a JSON array of vectors, index-aligned to CORPUS. Pass it to
    'query' or 'listen' with --embeddings to skip embedding at startup.
    Caches are only valid for the model that produced them.
    """
    config = get_config(ctx)
    try:
        units = load_units(corpus)
        status(f"Loaded {len(units)} units from {corpus}")
        store = CorpusStore(
            units,
            FastEmbedProvider(config.embedding),
            batch_size=batch_size or config.embedding.batch_size,
        )
        start = time.monotonic()
        with progress_bar("Embedding", total=len(units), unit="units") as advance:
            asyncio.run(store.ensure_embeddings(on_progress=advance))
        elapsed = time.monotonic() - start
    except VerseCueError as e:
        raise click.ClickException(e.message) from e

    if store.matrix is None:
        raise click.ClickException(f"No units to embed in {corpus}")

    size = save_embeddings(output, store.matrix)
    status(
        f"Saved {len(units)} embeddings to {output} ({size / (1024 * 1024):.2f} MB, {elapsed:.1f}s)",
        style="success",
    )
