"""Immutable corpus with lazily computed, index-aligned embeddings.

``units[i]`` and its embedding share position ``i`` for the lifetime of the
store. Reloading the engine builds a new store; nothing is ever upserted or
removed from an existing one.

Embeddings are populated by ``ensure_embeddings``:
  - in corpus order, in sequential batches (default 500)
  - a failing batch retains nothing; earlier batches stay cached
  - single-flight: concurrent callers share one in-flight population, and
    each caller's progress callback sees the batches that finish while it waits
  - once complete, the dense matrix is built and later calls return at once
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence

import numpy as np
import structlog

from versecue.core.errors import CorpusError
from versecue.corpus.models import Unit
from versecue.index.embedding import EmbeddingProvider

log = structlog.get_logger()

ProgressCallback = Callable[[int, int], None]


class CorpusStore:
    """Read-only units plus their embedding cache."""

    def __init__(
        self,
        units: Sequence[Unit],
        provider: EmbeddingProvider,
        *,
        precomputed: np.ndarray | Sequence[Sequence[float]] | None = None,
        batch_size: int = 500,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._units: tuple[Unit, ...] = tuple(units)
        self._provider = provider
        self._batch_size = batch_size

        self._positions: dict[str, int] = {}
        for i, unit in enumerate(self._units):
            if unit.id in self._positions:
                raise CorpusError.duplicate_id(unit.id)
            self._positions[unit.id] = i

        self._vectors: list[np.ndarray | None] = [None] * len(self._units)
        self._matrix: np.ndarray | None = None
        self._norms: np.ndarray | None = None
        self._populate_task: asyncio.Task[None] | None = None
        self._progress_listeners: list[ProgressCallback] = []

        if precomputed is not None:
            self._seed(precomputed)
        if self._units and all(v is not None for v in self._vectors):
            self._build_matrix()

    def _seed(self, precomputed: np.ndarray | Sequence[Sequence[float]]) -> None:
        matrix = np.asarray(precomputed, dtype=np.float32)
        if matrix.size == 0:
            return
        if matrix.ndim != 2:
            raise CorpusError.misaligned_embeddings(
                "expected a 2-D array of vectors", shape=list(matrix.shape)
            )
        if matrix.shape[0] > len(self._units):
            raise CorpusError.misaligned_embeddings(
                "more vectors than units", vectors=matrix.shape[0], units=len(self._units)
            )
        for i, row in enumerate(matrix):
            self._vectors[i] = row
        log.debug("corpus.seeded", vectors=matrix.shape[0], units=len(self._units))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._units)

    @property
    def units(self) -> tuple[Unit, ...]:
        return self._units

    @property
    def is_embedded(self) -> bool:
        return self._matrix is not None

    @property
    def matrix(self) -> np.ndarray | None:
        """``(n, dim)`` float32 embeddings, or None until every unit is embedded."""
        return self._matrix

    @property
    def norms(self) -> np.ndarray | None:
        return self._norms

    def unit_at(self, position: int) -> Unit:
        return self._units[position]

    def index_of(self, unit_id: str) -> int | None:
        return self._positions.get(unit_id)

    def embedding_at(self, position: int) -> np.ndarray | None:
        if 0 <= position < len(self._vectors):
            return self._vectors[position]
        return None

    @property
    def pending(self) -> int:
        """Units still lacking an embedding."""
        return sum(1 for v in self._vectors if v is None)

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    async def ensure_embeddings(self, on_progress: ProgressCallback | None = None) -> None:
        """Embed every unit lacking a vector. No-op once complete.

        ``on_progress(done, total)`` is called after each committed batch.
        A caller joining a population already in flight is called for the
        batches that finish after it joined.
        """
        if self._matrix is not None or not self._units:
            return
        if on_progress is not None:
            self._progress_listeners.append(on_progress)
        try:
            if self._populate_task is None:
                self._populate_task = asyncio.ensure_future(self._populate())
            # Shielded so one cancelled query doesn't abort population for the rest.
            await asyncio.shield(self._populate_task)
        finally:
            if on_progress is not None:
                self._progress_listeners.remove(on_progress)

    async def _populate(self) -> None:
        try:
            await self._embed_missing()
            self._build_matrix()
        finally:
            self._populate_task = None

    async def _embed_missing(self) -> None:
        missing = [i for i, v in enumerate(self._vectors) if v is None]
        total = len(self._units)
        done = total - len(missing)
        start = time.monotonic()
        batches = 0
        for offset in range(0, len(missing), self._batch_size):
            positions = missing[offset : offset + self._batch_size]
            texts = [self._units[i].text for i in positions]
            vectors = await self._provider.embed_many(texts)
            if len(vectors) != len(positions):
                raise CorpusError.misaligned_embeddings(
                    "provider returned a different number of vectors",
                    expected=len(positions),
                    got=len(vectors),
                )
            # Commit the batch only once it fully succeeded
            for i, vec in zip(positions, vectors, strict=True):
                self._vectors[i] = np.asarray(vec, dtype=np.float32)
            batches += 1
            done += len(positions)
            for listener in list(self._progress_listeners):
                listener(done, total)
        if missing:
            log.info(
                "corpus.embedded",
                units=len(missing),
                batches=batches,
                elapsed_ms=round((time.monotonic() - start) * 1000),
            )

    def _build_matrix(self) -> None:
        dims = {v.shape[-1] for v in self._vectors if v is not None}
        if len(dims) > 1:
            raise CorpusError.misaligned_embeddings(
                "vectors have different dimensions", dims=sorted(dims)
            )
        matrix = np.vstack(self._vectors).astype(np.float32)  # type: ignore[arg-type]
        self._norms = np.linalg.norm(matrix, axis=1)
        self._matrix = matrix
