"""Keyword-group theme tagging.

A theme is present iff the lowercased text contains one of its triggers as a
plain substring. There is no stemming: "worried" does not contain "worry".
"""

from __future__ import annotations

from collections.abc import Mapping

THEME_TRIGGERS: dict[str, tuple[str, ...]] = {
    "anxiety": ("anxious", "worry", "fear", "troubled", "peace"),
    "forgiveness": ("forgive", "mercy", "grace"),
    "love": ("love", "beloved", "compassion", "charity"),
    "faith": ("faith", "believe", "trust"),
}


class ThemeClassifier:
    """Maps text to the set of themes whose triggers it contains."""

    def __init__(self, triggers: Mapping[str, tuple[str, ...]] | None = None) -> None:
        table = THEME_TRIGGERS if triggers is None else triggers
        self._triggers = {
            theme: tuple(t.lower() for t in keys) for theme, keys in table.items()
        }

    @property
    def themes(self) -> tuple[str, ...]:
        return tuple(self._triggers)

    def classify(self, text: str) -> frozenset[str]:
        lowered = text.lower()
        return frozenset(
            theme
            for theme, keys in self._triggers.items()
            if any(k in lowered for k in keys)
        )


_DEFAULT = ThemeClassifier()


def classify(text: str) -> frozenset[str]:
    """Classify with the built-in trigger table."""
    return _DEFAULT.classify(text)
