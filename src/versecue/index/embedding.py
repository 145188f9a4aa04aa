"""Embedding provider adapter.

Uses fastembed (ONNX-based) for embedding computation and numpy for vectors.
The engine only depends on the ``EmbeddingProvider`` protocol; tests and
alternative backends plug in there.

Model: sentence-transformers/all-MiniLM-L6-v2  (384-dim, mean pooled, L2-normed)

Model construction downloads weights on first use, so it is:
  - lazy          → nothing happens until the first embed call
  - single-flight → concurrent first calls await one load attempt
  - retryable     → a failed load is forgotten; the next call tries again
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np
import structlog

from versecue.config.models import EmbeddingConfig
from versecue.core.errors import ModelUnavailable, ProviderUnavailable

log = structlog.get_logger()

_NORM_FLOOR = 1e-10


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Maps text to a fixed-length, L2-normalized float vector."""

    async def embed(self, text: str) -> np.ndarray: ...

    async def embed_many(self, texts: Sequence[str]) -> list[np.ndarray]: ...


def _detect_providers() -> list[str]:
    """Detect available ONNX Runtime execution providers."""
    try:
        import onnxruntime as ort  # type: ignore[import-not-found]

        available = set(ort.get_available_providers())
    except Exception:
        return []

    providers: list[str] = []
    if "CUDAExecutionProvider" in available:
        providers.append("CUDAExecutionProvider")
    providers.append("CPUExecutionProvider")
    return providers


def l2_normalize(matrix: np.ndarray) -> np.ndarray:
    """Row-normalize a 2-D float32 matrix; all-zero rows stay zero."""
    matrix = np.asarray(matrix, dtype=np.float32)
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms = np.maximum(norms, _NORM_FLOOR)
    return matrix / norms


class FastEmbedProvider:
    """``EmbeddingProvider`` backed by ``fastembed.TextEmbedding``.

    Inference runs in a worker thread so the event loop stays responsive
    while a batch of corpus units is embedded.
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self._config = config or EmbeddingConfig()
        self._model: Any | None = None
        self._model_task: asyncio.Task[Any] | None = None
        self.load_attempts = 0

    @property
    def model_name(self) -> str:
        return self._config.model_name

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    async def embed(self, text: str) -> np.ndarray:
        [vec] = await self.embed_many([text])
        return vec

    async def embed_many(self, texts: Sequence[str]) -> list[np.ndarray]:
        if not texts:
            return []
        model = await self._ensure_model()
        start = time.monotonic()
        try:
            raw = await asyncio.to_thread(self._run_model, model, list(texts))
        except Exception as e:
            log.warning("embedding.embed_failed", texts=len(texts), error=str(e))
            raise ProviderUnavailable.embed_failed(str(e), model=self.model_name) from e
        log.debug(
            "embedding.embedded",
            texts=len(texts),
            elapsed_ms=round((time.monotonic() - start) * 1000),
        )
        return list(l2_normalize(raw))

    @staticmethod
    def _run_model(model: Any, texts: list[str]) -> np.ndarray:
        return np.array(list(model.embed(texts, batch_size=len(texts))), dtype=np.float32)

    async def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        if self._model_task is None:
            self._model_task = asyncio.ensure_future(self._load_model())
        # Shielded: a cancelled caller must not cancel the load other callers share.
        return await asyncio.shield(self._model_task)

    async def _load_model(self) -> Any:
        self.load_attempts += 1
        try:
            self._model = await asyncio.to_thread(self._construct_model)
            return self._model
        except ImportError as e:
            log.warning("embedding.fastembed_not_installed", hint="pip install fastembed")
            raise ModelUnavailable.from_exception(self.model_name, e) from e
        except Exception as e:
            err = ModelUnavailable.from_exception(self.model_name, e)
            log.warning("embedding.model_load_failed", model=self.model_name, hint=err.hint)
            raise err from e
        finally:
            if self._model is None:
                self._model_task = None  # allow retry later

    def _construct_model(self) -> Any:
        from fastembed import TextEmbedding  # type: ignore[import-not-found]

        providers = _detect_providers()
        threads = self._config.threads or max(1, (os.cpu_count() or 4) // 2)
        start = time.monotonic()
        kwargs: dict[str, Any] = {
            "model_name": self.model_name,
            "threads": threads,
        }
        if providers:
            kwargs["providers"] = providers
        if self._config.cache_dir:
            kwargs["cache_dir"] = self._config.cache_dir
        model = TextEmbedding(**kwargs)
        log.info(
            "embedding.model_loaded",
            model=self.model_name,
            providers=providers or ["CPUExecutionProvider"],
            threads=threads,
            elapsed_s=round(time.monotonic() - start, 2),
        )
        return model
