"""Retrieval indexes: dense embeddings, lexical prefix search, theme tags."""

from versecue.index.embedding import EmbeddingProvider, FastEmbedProvider
from versecue.index.lexical import LexicalIndex
from versecue.index.themes import ThemeClassifier, classify

__all__ = [
    "EmbeddingProvider",
    "FastEmbedProvider",
    "LexicalIndex",
    "ThemeClassifier",
    "classify",
]
