"""Tests for corpus and embedding-cache file I/O."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from versecue.core.errors import CorpusError, ErrorCode
from versecue.corpus.loader import load_embeddings, load_units, save_embeddings
from versecue.corpus.models import Suggestion, Unit


@pytest.fixture
def corpus_file(tmp_path: Path) -> Path:
    path = tmp_path / "kjv.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "JHN.3.16",
                    "ref": "John 3:16",
                    "book": "John",
                    "chapter": 3,
                    "verse": 16,
                    "text": "For God so loved the world...",
                    "themes": ["love"],
                },
                {
                    "id": "PSA.23.1",
                    "ref": "Psalm 23:1",
                    "group": "Psalms",
                    "text": "The Lord is my shepherd...",
                },
            ]
        )
    )
    return path


class TestLoadUnits:
    """Corpus file parsing."""

    def test_loads_frozen_format(self, corpus_file: Path) -> None:
        """``ref``/``book`` map onto reference/group; themes are optional."""
        units = load_units(corpus_file)

        assert [u.id for u in units] == ["JHN.3.16", "PSA.23.1"]
        john, psalm = units
        assert john.reference == "John 3:16"
        assert john.group == "John"
        assert (john.chapter, john.verse) == (3, 16)
        assert john.themes == ("love",)
        assert psalm.group == "Psalms"
        assert psalm.themes == ()
        assert psalm.chapter is None

    def test_units_are_immutable(self, corpus_file: Path) -> None:
        unit = load_units(corpus_file)[0]
        with pytest.raises(Exception):
            unit.text = "changed"  # type: ignore[misc]

    def test_null_themes_become_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "c.json"
        path.write_text(json.dumps([{"id": "a", "ref": "A", "text": "x", "themes": None}]))
        assert load_units(path)[0].themes == ()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CorpusError) as exc_info:
            load_units(tmp_path / "nope.json")
        assert exc_info.value.code == ErrorCode.CORPUS_FILE_NOT_FOUND

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("[{")
        with pytest.raises(CorpusError, match="not valid JSON"):
            load_units(path)

    def test_not_an_array(self, tmp_path: Path) -> None:
        path = tmp_path / "obj.json"
        path.write_text(json.dumps({"id": "a"}))
        with pytest.raises(CorpusError, match="JSON array"):
            load_units(path)

    def test_missing_text_field(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.json"
        path.write_text(json.dumps([{"id": "a", "ref": "A"}]))
        with pytest.raises(CorpusError) as exc_info:
            load_units(path)
        assert exc_info.value.code == ErrorCode.CORPUS_INVALID
        assert "text" in exc_info.value.message


class TestEmbeddingCache:
    """Precomputed embedding cache round trip and validation."""

    def test_save_then_load(self, tmp_path: Path) -> None:
        matrix = np.array([[0.6, 0.8], [1.0, 0.0]], dtype=np.float32)
        path = tmp_path / "cache" / "kjv-embeddings.json"

        size = save_embeddings(path, matrix)
        loaded = load_embeddings(path)

        assert size > 0
        assert loaded.dtype == np.float32
        np.testing.assert_allclose(loaded, matrix)
        assert json.loads(path.read_text())[1] == [1.0, 0.0]

    def test_empty_cache(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("[]")
        assert load_embeddings(path).size == 0

    def test_ragged_vectors_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "ragged.json"
        path.write_text(json.dumps([[1.0, 2.0], [3.0]]))
        with pytest.raises(CorpusError, match="equal-length"):
            load_embeddings(path)

    def test_flat_array_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "flat.json"
        path.write_text(json.dumps([1.0, 2.0]))
        with pytest.raises(CorpusError):
            load_embeddings(path)


class TestModels:
    """Unit and Suggestion serialization."""

    def test_unit_to_dict_uses_file_shape(self) -> None:
        unit = Unit(id="a", reference="A 1:1", group="A", text="t", themes=("love",))
        assert unit.to_dict() == {
            "id": "a",
            "ref": "A 1:1",
            "book": "A",
            "chapter": None,
            "verse": None,
            "text": "t",
            "themes": ["love"],
        }

    def test_suggestion_to_dict(self) -> None:
        suggestion = Suggestion(
            id="a",
            reference="A 1:1",
            text="t",
            translation_label="KJV",
            confidence=0.712,
            themes=("love",),
            reasons=("theme match: love",),
        )
        assert suggestion.to_dict() == {
            "id": "a",
            "ref": "A 1:1",
            "text": "t",
            "translation": "KJV",
            "confidence": 0.712,
            "themes": ["love"],
            "reasons": ["theme match: love"],
        }
