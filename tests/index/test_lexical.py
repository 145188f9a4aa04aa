"""Tests for the Tantivy-backed lexical index."""

from __future__ import annotations

import pytest

from versecue.corpus.models import Unit
from versecue.index.lexical import LexicalIndex, tokenize


@pytest.fixture
def index(bible_units: list[Unit]) -> LexicalIndex:
    idx = LexicalIndex()
    idx.build(bible_units)
    return idx


class TestTokenize:
    """Query tokenization."""

    def test_lowercases_and_splits_on_punctuation(self) -> None:
        assert tokenize("The Lord's shep-") == ["the", "lord", "s", "shep"]

    def test_deduplicates_in_first_seen_order(self) -> None:
        assert tokenize("love, Love and LOVE again") == ["love", "and", "again"]

    def test_underscores_split(self) -> None:
        assert tokenize("a_b") == ["a", "b"]

    def test_blank(self) -> None:
        assert tokenize("  ...  ") == []


class TestBuild:
    """Index construction."""

    def test_returns_count(self, bible_units: list[Unit]) -> None:
        idx = LexicalIndex()
        assert idx.build(bible_units) == len(bible_units)
        assert idx.size == len(bible_units)

    def test_rebuild_replaces_contents(self, bible_units: list[Unit]) -> None:
        idx = LexicalIndex()
        idx.build(bible_units)
        idx.build([Unit(id="X.1", reference="X 1:1", group="X", text="only this")])
        assert idx.search("shepherd") == []
        assert idx.search("only") == ["X.1"]


class TestSearch:
    """Forward-tokenized multi-field search."""

    def test_partial_last_word_matches_prefix(self, index: LexicalIndex) -> None:
        """A word still being spoken matches the full indexed word."""
        assert index.search("the lord is my shep") and "PSA.23.1" in index.search("shep")

    def test_prefix_is_only_forward(self, index: LexicalIndex) -> None:
        """'herd' is a suffix of 'shepherd', not a prefix."""
        assert index.search("herd") == []

    def test_short_tokens_match_exactly(self, index: LexicalIndex) -> None:
        """Tokens under three characters don't expand into prefixes."""
        assert index.search("th") == []
        assert index.search("so") == ["JHN.3.16"]

    def test_reference_field_matches(self, index: LexicalIndex) -> None:
        assert index.search("philipp") == ["PHP.4.6"]

    def test_each_id_returned_once(self, index: LexicalIndex) -> None:
        """A unit matching in both reference and group appears once."""
        assert index.search("john") == ["JHN.3.16"]

    def test_text_matches_come_before_reference_only_matches(self) -> None:
        """Fields are merged in order: text, then reference, then group."""
        idx = LexicalIndex()
        idx.build(
            [
                Unit(id="REF.1", reference="Hope 1:1", group="Hope", text="nothing here"),
                Unit(id="TXT.1", reference="Other 1:1", group="Other", text="hope springs"),
            ]
        )
        assert idx.search("hope") == ["TXT.1", "REF.1"]

    def test_every_token_must_match(self, index: LexicalIndex) -> None:
        """No verse mentions both a shepherd and faith."""
        assert index.search("shepherd faith") == []
        assert index.search("faith hop") == ["HEB.11.1"]
        assert index.search("god loved") == ["JHN.3.16"]

    def test_tokens_must_match_within_one_field(self, index: LexicalIndex) -> None:
        """'hebrews' is only in the reference, 'faith' only in the text."""
        assert index.search("hebrews faith") == []

    def test_match_any_token(self, bible_units: list[Unit]) -> None:
        idx = LexicalIndex(match_all=False)
        idx.build(bible_units)
        results = idx.search("shepherd faith forgiven")
        assert set(results) == {"PSA.23.1", "HEB.11.1", "EPH.4.32"}

    def test_limit_applies_per_field(self, index: LexicalIndex) -> None:
        """``god`` appears in three texts; limit caps each field."""
        assert len(index.search("god")) == 3
        assert len(index.search("god", limit=1)) == 1

    def test_case_insensitive(self, index: LexicalIndex) -> None:
        assert index.search("SHEPHERD") == ["PSA.23.1"]

    @pytest.mark.parametrize("query", ["", "   ", "?!", "..."])
    def test_blank_query_returns_nothing(self, index: LexicalIndex, query: str) -> None:
        assert index.search(query) == []

    def test_zero_limit_returns_nothing(self, index: LexicalIndex) -> None:
        assert index.search("shepherd", limit=0) == []

    def test_unbuilt_index_returns_nothing(self) -> None:
        assert LexicalIndex().search("shepherd") == []
