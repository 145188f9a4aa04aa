"""Corpus and result data model.

``Unit`` is validated at the JSON boundary (corpus files use ``ref`` and
``book``); everything downstream works with frozen instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Unit(BaseModel):
    """One retrievable passage with stable identity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    reference: str = Field(validation_alias=AliasChoices("reference", "ref"))
    group: str = Field(default="", validation_alias=AliasChoices("group", "book"))
    chapter: int | None = None
    verse: int | None = None
    text: str
    themes: tuple[str, ...] = ()

    @field_validator("themes", mode="before")
    @classmethod
    def _none_themes(cls, v: Any) -> Any:
        return () if v is None else v

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the corpus file shape."""
        return {
            "id": self.id,
            "ref": self.reference,
            "book": self.group,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text,
            "themes": list(self.themes),
        }


@dataclass(slots=True)
class RankedCandidate:
    """A unit scored for one query. Transient; never leaves the engine."""

    unit: Unit
    score: float
    dense_score: float = 0.0
    fused_rank: int = 0
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A suggested passage returned to the caller.

    ``confidence`` is the ranking score rounded to 3 decimals. It reads as
    0..1 for the default weights but is not clamped unless configured.
    """

    id: str
    reference: str
    text: str
    translation_label: str
    confidence: float
    themes: tuple[str, ...] = ()
    reasons: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize for display clients."""
        return {
            "id": self.id,
            "ref": self.reference,
            "text": self.text,
            "translation": self.translation_label,
            "confidence": self.confidence,
            "themes": list(self.themes),
            "reasons": list(self.reasons),
        }
