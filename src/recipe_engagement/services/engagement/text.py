"""Text normalization helpers."""

from __future__ import annotations

from recipe_engagement.services.engagement.constants import WHITESPACE_RUN


def normalize_whitespace(value: str | None) -> str:
    """Collapse whitespace runs to one space and trim; None becomes ``""``."""
    if value is None:
        return ""
    return WHITESPACE_RUN.sub(" ", value).strip()


def split_ingredients(value: str | list[str] | None) -> list[str]:
    """Accept a list or a string with one ingredient per line.

    Commas stay inside an entry, so ``"Salt, to taste"`` is one ingredient.
    Blank entries are dropped.
    """
    if value is None:
        return []
    items = value.splitlines() if isinstance(value, str) else value
    return [item for item in (normalize_whitespace(i) for i in items) if item]
