"""Corpus and precomputed-embedding file I/O.

Corpus file: JSON array of ``{id, ref, book, chapter, verse, text, themes?}``.
Embedding cache: JSON array of numeric arrays, index-aligned to the corpus.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import structlog
from pydantic import TypeAdapter, ValidationError

from versecue.core.errors import CorpusError
from versecue.corpus.models import Unit

log = structlog.get_logger()

_UNITS_ADAPTER = TypeAdapter(list[Unit])


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise CorpusError.file_not_found(str(path))
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CorpusError.invalid(str(path), f"not valid JSON: {e}") from e


def load_units(path: Path | str) -> list[Unit]:
    """Load and validate a corpus file."""
    path = Path(path)
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise CorpusError.invalid(str(path), "expected a JSON array of units")
    try:
        units = _UNITS_ADAPTER.validate_python(raw)
    except ValidationError as e:
        err = e.errors()[0]
        where = ".".join(str(loc) for loc in err["loc"])
        raise CorpusError.invalid(str(path), f"{where}: {err['msg']}") from e
    log.info("corpus.loaded", path=str(path), units=len(units))
    return units


def load_embeddings(path: Path | str) -> np.ndarray:
    """Load a precomputed embedding cache as a float32 ``(n, dim)`` matrix."""
    path = Path(path)
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise CorpusError.invalid(str(path), "expected a JSON array of vectors")
    if not raw:
        return np.zeros((0, 0), dtype=np.float32)
    try:
        matrix = np.asarray(raw, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise CorpusError.invalid(str(path), f"vectors must be equal-length numbers: {e}") from e
    if matrix.ndim != 2:
        raise CorpusError.invalid(str(path), "vectors must be equal-length numeric arrays")
    log.info("corpus.embeddings_loaded", path=str(path), rows=matrix.shape[0], dim=matrix.shape[1])
    return matrix


def save_embeddings(path: Path | str, matrix: np.ndarray) -> int:
    """Write an embedding cache readable by ``load_embeddings``. Returns bytes written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(np.asarray(matrix, dtype=np.float32).tolist())
    path.write_text(payload, encoding="utf-8")
    size = path.stat().st_size
    log.info("corpus.embeddings_saved", path=str(path), rows=len(matrix), bytes=size)
    return size
