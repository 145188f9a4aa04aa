"""Configuration constants.

Values here are implementation details, not user-configurable.
For configurable values, see models.py (RetrievalConfig, EmbeddingConfig).
"""

COSINE_EPSILON = 1e-8
"""Added to the norm product so degenerate (all-zero) vectors score 0 instead of NaN."""

CONFIDENCE_DECIMALS = 3
"""Decimal places kept in a suggestion's confidence."""

DEFAULT_REASON = "hybrid retrieval"
"""Reason shown when no specific reason applies to a suggestion."""

LEXICAL_PREFIX_MIN_CHARS = 3
"""Query tokens shorter than this match exactly instead of by prefix."""

LEXICAL_FIELDS = ("text", "reference", "group")
"""Searched fields, in result-merge order."""

LISTEN_WINDOW_WORDS_DEFAULT = 150
"""Rolling transcript window for ``versecue listen`` (roughly a minute of speech)."""
