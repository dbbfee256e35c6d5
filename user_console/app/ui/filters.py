from __future__ import annotations

from collections.abc import Mapping


def clean_filters(filters: Mapping[str, str | None]) -> dict[str, str]:
    return {key: value for key, value in filters.items() if value not in (None, "")}


def matches_text(cell_text: str, term: str) -> bool:
    if not term:
        return True
    return term.casefold() in cell_text.casefold()
