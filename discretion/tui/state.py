"""Session state for the table browser."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..models import Dataset, ViewType
from .cursor import CursorState


class SearchMode(Enum):
    IDLE = "idle"
    COMPOSING = "composing"


@dataclass
class FilterState:
    """Filter bookkeeping for one view.

    `original` is the dataset as it was before the first filter pass since
    the last refresh, so clearing a stack of filters gets back to it.
    """

    active: bool = False
    query: str = ""
    original: Dataset | None = None

    def applied(self, before: Dataset, query: str) -> None:
        """Record a filter pass that ran on `before`."""
        if not self.active:
            self.original = before
            self.active = True
            self.query = query
        else:
            self.query = f"{self.query} > {query}"

    def clear(self) -> None:
        self.active = False
        self.query = ""
        self.original = None


def _per_view(factory):
    return field(default_factory=lambda: {view: factory() for view in ViewType})


@dataclass
class UIState:
    """UI session state.

    Cursor and filter state are kept per view, so toggling between the
    vault and secret tables comes back to the same row.
    """

    view: ViewType = ViewType.VAULTS
    mode: SearchMode = SearchMode.IDLE

    # Text being typed while composing a search.
    query: str = ""

    # Status line shown next to the title; written only by the main loop.
    status: str = ""

    refreshing: bool = False

    cursors: dict[ViewType, CursorState] = _per_view(CursorState)
    filters: dict[ViewType, FilterState] = _per_view(FilterState)

    @property
    def cursor(self) -> CursorState:
        return self.cursors[self.view]

    @cursor.setter
    def cursor(self, value: CursorState) -> None:
        self.cursors[self.view] = value

    @property
    def filter(self) -> FilterState:
        return self.filters[self.view]

    def clear_filters(self) -> None:
        for state in self.filters.values():
            state.clear()
