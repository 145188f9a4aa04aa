"""Suggestion engine: the public entry point for live passage retrieval.

Per query:
    blank check → themes → embed window → ensure corpus embeddings
    → dense top-N → lexical top-N → RRF → boosted re-rank
    → hysteresis → truncate to top_k → Suggestions

The engine owns its corpus store and lexical index. ``load`` swaps both in
one assignment, so a query already in flight keeps using the corpus it
started with. Previous-top state is never stored here; callers pass it in.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import structlog

from versecue.config.constants import CONFIDENCE_DECIMALS, DEFAULT_REASON
from versecue.config.models import EmbeddingConfig, RetrievalConfig
from versecue.core.errors import CorpusError
from versecue.core.logging import clear_query_id, set_query_id
from versecue.corpus.models import RankedCandidate, Suggestion, Unit
from versecue.corpus.store import CorpusStore, ProgressCallback
from versecue.index.embedding import EmbeddingProvider
from versecue.index.lexical import LexicalIndex
from versecue.index.themes import ThemeClassifier
from versecue.search.hysteresis import stabilize
from versecue.search.ranking import dense_top, reciprocal_rank_fusion, rerank

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class _Corpus:
    store: CorpusStore
    lexical: LexicalIndex


class SuggestionEngine:
    """Hybrid dense + lexical retrieval over a fixed corpus.

    Usage::

        engine = SuggestionEngine(FastEmbedProvider())
        engine.load(load_units("kjv.json"), precomputed=load_embeddings("kjv-embeddings.json"))

        top = None
        for window in transcript_windows:
            suggestions = await engine.query_suggestions(
                window, translation_label="KJV", previous_top=top
            )
            top = suggestions[0] if suggestions else top
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        config: RetrievalConfig | None = None,
        *,
        embedding_config: EmbeddingConfig | None = None,
        classifier: ThemeClassifier | None = None,
    ) -> None:
        self._provider = provider
        self._config = config or RetrievalConfig()
        self._batch_size = (embedding_config or EmbeddingConfig()).batch_size
        self._classifier = classifier or ThemeClassifier()
        self._corpus: _Corpus | None = None

    @property
    def config(self) -> RetrievalConfig:
        return self._config

    @property
    def store(self) -> CorpusStore | None:
        return self._corpus.store if self._corpus is not None else None

    @property
    def lexical_index(self) -> LexicalIndex | None:
        return self._corpus.lexical if self._corpus is not None else None

    def load(
        self,
        units: Sequence[Unit],
        precomputed: np.ndarray | Sequence[Sequence[float]] | None = None,
    ) -> None:
        """Replace the corpus. Embeddings missing from ``precomputed`` are computed lazily."""
        store = CorpusStore(
            units, self._provider, precomputed=precomputed, batch_size=self._batch_size
        )
        lexical = LexicalIndex(match_all=self._config.lexical_match_all)
        lexical.build(store.units)
        self._corpus = _Corpus(store=store, lexical=lexical)
        log.info(
            "engine.loaded",
            units=len(store),
            precomputed=len(store) - store.pending,
        )

    async def warm_up(self, on_progress: ProgressCallback | None = None) -> None:
        """Populate corpus embeddings now instead of on the first query."""
        if self._corpus is not None:
            await self._corpus.store.ensure_embeddings(on_progress)

    async def query_suggestions(
        self,
        window: str,
        top_k: int | None = None,
        translation_label: str = "",
        previous_top: Suggestion | None = None,
    ) -> list[Suggestion]:
        """Suggest passages for the current transcript window.

        Returns at most ``top_k`` suggestions (default from config). Blank
        windows and empty corpora yield ``[]``. Embedding provider errors
        propagate unchanged. A query vector whose length differs from the
        corpus embeddings raises ``CorpusError``.
        """
        k = self._config.top_k if top_k is None else top_k
        corpus = self._corpus
        if not window.strip() or k <= 0 or corpus is None or not len(corpus.store):
            return []

        set_query_id()
        try:
            return await self._run(corpus, window, k, translation_label, previous_top)
        finally:
            clear_query_id()

    async def _run(
        self,
        corpus: _Corpus,
        window: str,
        top_k: int,
        translation_label: str,
        previous_top: Suggestion | None,
    ) -> list[Suggestion]:
        cfg = self._config
        start = time.monotonic()

        themes = self._classifier.classify(window)
        query_vec = await self._provider.embed(window)
        await corpus.store.ensure_embeddings()
        matrix = corpus.store.matrix
        if matrix is not None and np.shape(query_vec)[-1] != matrix.shape[1]:
            raise CorpusError.misaligned_embeddings(
                "query vector dimension differs from corpus embeddings",
                query=int(np.shape(query_vec)[-1]),
                corpus=int(matrix.shape[1]),
            )

        dense_ids = dense_top(corpus.store, query_vec, cfg.dense_limit)
        lexical_ids = corpus.lexical.search(window, cfg.lexical_limit)
        fused = reciprocal_rank_fusion([dense_ids, lexical_ids], k=cfg.rrf_k)[: cfg.fused_limit]

        ranked = rerank(corpus.store, fused, query_vec, themes, lexical_ids, cfg)
        if not ranked:
            log.warning("engine.no_ranked_results", fused=len(fused))
            return []

        ranked = stabilize(ranked, previous_top, cfg.hysteresis_margin)
        suggestions = [self._to_suggestion(c, translation_label) for c in ranked[:top_k]]

        log.debug(
            "engine.query",
            window_chars=len(window),
            themes=sorted(themes),
            dense=len(dense_ids),
            lexical=len(lexical_ids),
            fused=len(fused),
            returned=len(suggestions),
            top=suggestions[0].id,
            elapsed_ms=round((time.monotonic() - start) * 1000),
        )
        return suggestions

    def _to_suggestion(self, candidate: RankedCandidate, translation_label: str) -> Suggestion:
        score = candidate.score
        if self._config.clamp_confidence:
            score = min(max(score, 0.0), 1.0)
        unit = candidate.unit
        return Suggestion(
            id=unit.id,
            reference=unit.reference,
            text=unit.text,
            translation_label=translation_label,
            confidence=round(score, CONFIDENCE_DECIMALS),
            themes=unit.themes,
            reasons=tuple(candidate.reasons) or (DEFAULT_REASON,),
        )
