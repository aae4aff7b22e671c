"""Cursor and sliding visible window over a row set."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CursorState:
    """Cursor position and the half-open visible window `[start, end)`."""

    cursor: int = 0
    start: int = 0
    end: int = 0

    def offset(self) -> int | None:
        """Cursor position inside the window, or None when nothing is visible."""
        if self.start <= self.cursor < self.end:
            return self.cursor - self.start
        return None


class WindowedCursor:
    """Moves a cursor over `n` rows and keeps a fixed-capacity window around it.

    The window slides one row at a time as the cursor crosses its edges, so
    scrolling is smooth instead of re-centering. Every input is clamped;
    nothing here raises.
    """

    def __init__(self, capacity: int = 10):
        self.capacity = max(1, int(capacity))

    def height(self, n: int) -> int:
        return min(max(n, 0), self.capacity)

    def move(self, state: CursorState, n: int, delta: int) -> CursorState:
        """Move the cursor by `delta` rows, stopping at either end."""
        if n <= 0:
            return CursorState()
        cursor = min(max(state.cursor + delta, 0), n - 1)
        return self.sync(CursorState(cursor, state.start, state.end), n)

    def jump(self, state: CursorState, n: int, index: int) -> CursorState:
        """Put the cursor on an absolute row index."""
        return self.sync(CursorState(index, state.start, state.end), n)

    def sync(self, state: CursorState, n: int) -> CursorState:
        """Recompute the window for a row set of length `n`.

        Idempotent: syncing an already-synced state returns it unchanged.
        """
        if n <= 0:
            return CursorState()

        height = self.height(n)
        cursor = max(state.cursor, 0)
        start = min(max(state.start, 0), n)

        # A cursor past the end of a shrunken row set starts over at the top.
        if cursor > n - 1:
            cursor = 0
            start = 0

        # Always show the top when the cursor is at the top.
        if cursor == 0:
            start = 0

        # Slide by a single row when the cursor steps past an edge.
        if cursor < start:
            start -= 1
        elif cursor >= start + height:
            start += 1

        # Larger gaps only happen after a jump or a change in `n`.
        if cursor < start:
            start = cursor
        elif cursor >= start + height:
            start = cursor - height + 1

        # Don't leave empty space at the tail while rows above are hidden.
        start = max(0, min(start, n - height))
        end = min(start + height, n)
        return CursorState(cursor=cursor, start=start, end=end)
