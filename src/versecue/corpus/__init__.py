"""Corpus data model, file I/O, and embedding store."""

from versecue.corpus.loader import load_embeddings, load_units, save_embeddings
from versecue.corpus.models import RankedCandidate, Suggestion, Unit
from versecue.corpus.store import CorpusStore

__all__ = [
    "CorpusStore",
    "RankedCandidate",
    "Suggestion",
    "Unit",
    "load_embeddings",
    "load_units",
    "save_embeddings",
]
