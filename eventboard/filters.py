"""Search and category filtering over a loaded event collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from eventboard.models import Event, dedupe


@dataclass(frozen=True)
class FilterState:
    search_text: str = ""
    selected_category: str | None = None


def matches(event: Event, state: FilterState) -> bool:
    """Title contains the search text (ignoring case) and, if a category is
    selected, the event carries exactly that label."""
    if state.search_text and state.search_text.lower() not in event.title.lower():
        return False
    if state.selected_category and state.selected_category not in event.categories:
        return False
    return True


def filter_events(events: Iterable[Event], state: FilterState) -> list[Event]:
    """Return the visible subset of *events*, preserving their order."""
    return [e for e in events if matches(e, state)]


def category_universe(events: Iterable[Event]) -> list[str]:
    """All labels used by *events*, de-duplicated in order of first appearance.

    Pass the full collection here, not a filtered view, or labels belonging to
    hidden events drop out of the selector.
    """
    return dedupe([label for e in events for label in e.categories])
