"""Lexical index for forward (prefix) token search via Tantivy.

One in-memory Tantivy index is built per corpus load over three fields:
- ``text``      passage content
- ``reference`` human-readable label ("John 3:16")
- ``group``     containing collection ("John")

Queries come from a live transcript, so the last word is often still being
spoken. Every query token is therefore matched as a prefix of indexed tokens
("shep" matches "shepherd"). Very short tokens match exactly, otherwise "i"
would match half the corpus. A unit matches a field only when every query
token matches there, unless the index is built with ``match_all=False``.

Only ranked unit ids leave this module; Tantivy scores are not exposed.
"""

from __future__ import annotations

import re
import time
from collections.abc import Iterable
from typing import Any

import structlog
import tantivy

from versecue.config.constants import LEXICAL_FIELDS, LEXICAL_PREFIX_MIN_CHARS
from versecue.corpus.models import Unit

log = structlog.get_logger()

# Mirrors Tantivy's default tokenizer: split on anything that isn't a letter or digit.
_TOKEN_RE = re.compile(r"[^\W_]+")


def tokenize(text: str) -> list[str]:
    """Lowercased, de-duplicated query tokens in first-seen order."""
    return list(dict.fromkeys(_TOKEN_RE.findall(text.lower())))


class LexicalIndex:
    """
    Multi-field forward-tokenized index over a fixed corpus.

    Usage::

        index = LexicalIndex()
        index.build(units)
        ids = index.search("the lord is my shep", limit=50)
    """

    def __init__(self, match_all: bool = True) -> None:
        self._occur = tantivy.Occur.Must if match_all else tantivy.Occur.Should
        self._schema: Any = None
        self._index: Any = None
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    def build(self, units: Iterable[Unit]) -> int:
        """Create a fresh index over ``units``. Returns the number indexed."""
        start = time.monotonic()

        schema_builder = tantivy.SchemaBuilder()
        # Raw tokenizer: ids are returned verbatim, never matched by content
        schema_builder.add_text_field("id", stored=True, tokenizer_name="raw")
        for name in LEXICAL_FIELDS:
            schema_builder.add_text_field(name, stored=False, tokenizer_name="default")
        schema = schema_builder.build()
        index = tantivy.Index(schema)

        writer = index.writer()
        count = 0
        for unit in units:
            doc = tantivy.Document()
            doc.add_text("id", unit.id)
            doc.add_text("text", unit.text)
            doc.add_text("reference", unit.reference)
            doc.add_text("group", unit.group)
            writer.add_document(doc)
            count += 1
        writer.commit()
        index.reload()

        self._schema = schema
        self._index = index
        self._size = count
        log.info(
            "lexical.built",
            units=count,
            elapsed_ms=round((time.monotonic() - start) * 1000),
        )
        return count

    def _field_query(self, field: str, tokens: list[str]) -> Any:
        clauses = []
        for token in tokens:
            if len(token) < LEXICAL_PREFIX_MIN_CHARS:
                q = tantivy.Query.term_query(self._schema, field, token)
            else:
                q = tantivy.Query.regex_query(self._schema, field, f"{re.escape(token)}.*")
            clauses.append((self._occur, q))
        return tantivy.Query.boolean_query(clauses)

    def search(self, query: str, limit: int = 50) -> list[str]:
        """Search every field; return unit ids merged in field order.

        Each field contributes at most ``limit`` ids, best match first.
        Ids already returned by an earlier field are skipped, so the
        result holds each id once, in first-seen order.
        """
        if self._index is None or limit <= 0:
            return []
        tokens = tokenize(query)
        if not tokens:
            return []

        searcher = self._index.searcher()
        seen: dict[str, None] = {}
        for field in LEXICAL_FIELDS:
            hits = searcher.search(self._field_query(field, tokens), limit).hits
            for _score, doc_addr in hits:
                unit_id = searcher.doc(doc_addr).get_first("id")
                if unit_id is not None:
                    seen.setdefault(str(unit_id), None)
        return list(seen)
