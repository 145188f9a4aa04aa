"""Hybrid ranking: dense top-N, reciprocal-rank fusion, boosted re-rank.

Dense and lexical candidates live on incomparable scales (cosine vs. match
rank), so they are merged by rank position only:

    rrf(id) = sum over lists of 1 / (k + rank + 1)        k = 60

The fused head is then re-scored on an absolute scale:

    score = 0.8 * dense + 0.15 * lex + 0.05 * theme
      dense  cosine(query, unit)
      lex    0.02 if the unit matched lexically, else 0
      theme  0.05 if unit and query share a theme, else 0

All sorts are stable, so ties keep corpus order (dense), first-seen order
(fusion), and fused order (re-rank).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
import structlog

from versecue.config.constants import COSINE_EPSILON
from versecue.config.models import RetrievalConfig
from versecue.corpus.models import RankedCandidate
from versecue.corpus.store import CorpusStore

log = structlog.get_logger()

THEME_REASON_PREFIX = "theme match: "
LEXICAL_REASON = "lexical phrase match"
SEMANTIC_REASON = "semantic similarity"


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity in float64; 0.0 for an all-zero vector."""
    a64 = np.asarray(a, dtype=np.float64)
    b64 = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(a64) * np.linalg.norm(b64)) + COSINE_EPSILON
    return float(np.dot(a64, b64)) / denom


def dense_scores(
    query_vec: np.ndarray, matrix: np.ndarray, norms: np.ndarray | None = None
) -> np.ndarray:
    """Cosine similarity of ``query_vec`` against every row of ``matrix``."""
    q = np.asarray(query_vec, dtype=np.float32)
    if norms is None:
        norms = np.linalg.norm(matrix, axis=1)
    return (matrix @ q) / (norms * np.linalg.norm(q) + COSINE_EPSILON)


def dense_top(store: CorpusStore, query_vec: np.ndarray, limit: int) -> list[str]:
    """Ids of the ``limit`` units most similar to the query, best first."""
    matrix = store.matrix
    if matrix is None or limit <= 0:
        return []
    scores = dense_scores(query_vec, matrix, store.norms)
    order = np.argsort(-scores, kind="stable")[:limit]
    return [store.unit_at(int(i)).id for i in order]


def reciprocal_rank_fusion(lists: Iterable[Sequence[str]], k: int = 60) -> list[str]:
    """Merge ranked id lists by reciprocal rank; best first."""
    fused: dict[str, float] = {}
    for ranked in lists:
        for rank, unit_id in enumerate(ranked):
            fused[unit_id] = fused.get(unit_id, 0.0) + 1.0 / (k + rank + 1)
    return [unit_id for unit_id, _ in sorted(fused.items(), key=lambda kv: -kv[1])]


def rerank(
    store: CorpusStore,
    fused_ids: Sequence[str],
    query_vec: np.ndarray,
    query_themes: frozenset[str],
    lexical_ids: Iterable[str],
    config: RetrievalConfig,
) -> list[RankedCandidate]:
    """Score fused candidates with dense similarity plus lexical/theme boosts.

    Ids that no longer resolve to a unit or embedding are dropped.
    """
    lexical = set(lexical_ids)
    ranked: list[RankedCandidate] = []
    for fused_rank, unit_id in enumerate(fused_ids):
        position = store.index_of(unit_id)
        if position is None:
            log.warning("ranking.dropped_candidate", id=unit_id, reason="unit_not_found")
            continue
        vec = store.embedding_at(position)
        if vec is None:
            log.warning("ranking.dropped_candidate", id=unit_id, reason="embedding_not_found")
            continue

        unit = store.unit_at(position)
        dense = cosine_similarity(query_vec, vec)
        shared = [t for t in unit.themes if t in query_themes]
        lex = config.lexical_boost if unit_id in lexical else 0.0
        theme = config.theme_boost if shared else 0.0
        score = (
            config.dense_weight * dense
            + config.lexical_weight * lex
            + config.theme_weight * theme
        )

        reasons: list[str] = []
        if theme:
            reasons.append(THEME_REASON_PREFIX + ", ".join(shared))
        if lex:
            reasons.append(LEXICAL_REASON)
        if dense > config.semantic_threshold:
            reasons.append(SEMANTIC_REASON)

        ranked.append(
            RankedCandidate(
                unit=unit,
                score=score,
                dense_score=dense,
                fused_rank=fused_rank,
                reasons=reasons,
            )
        )

    ranked.sort(key=lambda c: -c.score)
    return ranked
