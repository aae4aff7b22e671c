"""Messages posted by background tasks and drained by the main loop.

Worker threads never touch controller state. They post one of the events
below and the main loop applies it on its own turn.
"""
from __future__ import annotations

from dataclasses import dataclass
from queue import Empty, Queue
from typing import Union

from .models import Inventory


@dataclass(frozen=True)
class InventoryLoaded:
    inventory: Inventory


@dataclass(frozen=True)
class InventoryFailed:
    error: str


@dataclass(frozen=True)
class ResolutionStarted:
    identifier: str
    name: str


@dataclass(frozen=True)
class ResolutionFinished:
    identifier: str
    name: str
    value: str
    found: bool
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.found and self.error is None


Event = Union[InventoryLoaded, InventoryFailed, ResolutionStarted, ResolutionFinished]


class EventQueue:
    """Thread-safe FIFO of events; many writers, one reader (the main loop)."""

    def __init__(self) -> None:
        self._queue: Queue[Event] = Queue()

    def post(self, event: Event) -> None:
        self._queue.put(event)

    def drain(self) -> list[Event]:
        """Return every pending event in posting order without blocking."""
        events: list[Event] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except Empty:
                return events

    def empty(self) -> bool:
        return self._queue.empty()
