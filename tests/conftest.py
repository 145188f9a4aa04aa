"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides a deterministic embedding provider so tests never download a
model.
"""

import asyncio
import re
import sys
import zlib
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from versecue.corpus.models import Unit  # noqa: E402

_WORD_RE = re.compile(r"[a-z0-9]+")


class BagOfWordsProvider:
    """Hashes words into a fixed number of buckets and L2-normalizes.

    Texts sharing words are similar; texts sharing none score 0. Every call
    is recorded so tests can assert how often the provider was hit.
    """

    def __init__(self, dim: int = 64, delay: float = 0.0) -> None:
        self.dim = dim
        self.delay = delay
        self.calls: list[list[str]] = []
        self.fail_on: str | None = None

    @property
    def texts_embedded(self) -> int:
        return sum(len(batch) for batch in self.calls)

    def vector(self, text: str) -> np.ndarray:
        vec = np.zeros(self.dim, dtype=np.float32)
        for word in _WORD_RE.findall(text.lower()):
            vec[zlib.crc32(word.encode()) % self.dim] += 1.0
        norm = np.linalg.norm(vec)
        return vec / norm if norm else vec

    async def embed(self, text: str) -> np.ndarray:
        [vec] = await self.embed_many([text])
        return vec

    async def embed_many(self, texts: Sequence[str]) -> list[np.ndarray]:
        self.calls.append(list(texts))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_on is not None and any(self.fail_on in t for t in texts):
            raise RuntimeError(f"provider failed on {self.fail_on!r}")
        return [self.vector(t) for t in texts]


@pytest.fixture
def provider() -> BagOfWordsProvider:
    return BagOfWordsProvider()


@pytest.fixture
def make_provider() -> type[BagOfWordsProvider]:
    return BagOfWordsProvider


@pytest.fixture
def bible_units() -> list[Unit]:
    """A handful of verses with and without themes."""
    rows = [
        ("JHN.3.16", "John 3:16", "John", 3, 16,
         "For God so loved the world, that he gave his only begotten Son", ["love"]),
        ("PSA.23.1", "Psalm 23:1", "Psalms", 23, 1,
         "The Lord is my shepherd; I shall not want.", []),
        ("PHP.4.6", "Philippians 4:6", "Philippians", 4, 6,
         "Be careful for nothing; but in every thing by prayer and supplication "
         "with thanksgiving let your requests be made known unto God.", ["anxiety"]),
        ("MAT.6.34", "Matthew 6:34", "Matthew", 6, 34,
         "Take therefore no thought for the morrow: for the morrow shall take "
         "thought for the things of itself.", ["anxiety"]),
        ("EPH.4.32", "Ephesians 4:32", "Ephesians", 4, 32,
         "And be ye kind one to another, tenderhearted, forgiving one another, "
         "even as God for Christ's sake hath forgiven you.", ["forgiveness"]),
        ("HEB.11.1", "Hebrews 11:1", "Hebrews", 11, 1,
         "Now faith is the substance of things hoped for, the evidence of things not seen.",
         ["faith"]),
    ]
    return [
        Unit(id=i, reference=r, group=g, chapter=c, verse=v, text=t, themes=tuple(th))
        for i, r, g, c, v, t, th in rows
    ]
