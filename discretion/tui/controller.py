"""Input handling for the table browser.

The controller is driven from a single thread (the terminal app's event
loop). Anything slow runs on an executor and reports back through the
event queue, which `pump()` drains on the loop's own turn.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from ..cache import SecretCache
from ..errors import ClipboardError
from ..events import (
    Event,
    EventQueue,
    InventoryFailed,
    InventoryLoaded,
    ResolutionFinished,
    ResolutionStarted,
)
from ..inventory import collect_inventory
from ..models import Column, Dataset, Inventory, Row, ViewType
from ..providers import ClipboardSink, MetadataProvider
from .cursor import WindowedCursor
from .filtering import FilterEngine
from .state import SearchMode, UIState
from .viewmodel import ViewModel

logger = logging.getLogger(__name__)

STATUS_LOADING = "Loading..."
STATUS_COPYING = "Copying..."
STATUS_COPIED = "Copied"
STATUS_NOT_FOUND = "No secret value found"
STATUS_REFRESH_FAILED = "Refresh failed"
STATUS_NO_CLIPBOARD = "Clipboard unavailable"

QUIT_KEYS = frozenset({"c-c"})

# Idle-mode key -> controller method name.
IDLE_KEYS = {
    "up": "move_up",
    "k": "move_up",
    "down": "move_down",
    "j": "move_down",
    "x": "toggle_view",
    "r": "request_refresh",
    "/": "start_search",
    "enter": "select",
    "escape": "clear_filter",
}


@dataclass(frozen=True)
class Frame:
    """Everything the renderer needs to paint one screen."""

    title: str
    status: str
    columns: tuple[Column, ...]
    rows: tuple[Row, ...]
    highlight: int | None
    composing: bool
    query: str
    cursor: int
    total: int
    filter_query: str = ""


class NavigatorController:
    """Owns the view selector, search mode and per-view cursors.

    Every operation ends by re-syncing the cursor window against the active
    dataset, so callers never have to.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        cache: SecretCache,
        clipboard: ClipboardSink,
        *,
        events: EventQueue,
        window_height: int = 10,
        column_width: int = 20,
        include_disabled: bool = False,
        executor: ThreadPoolExecutor | None = None,
    ):
        self.provider = provider
        self.cache = cache
        self.clipboard = clipboard
        self.events = events
        self.include_disabled = include_disabled
        self.model = ViewModel(column_width)
        self.window = WindowedCursor(window_height)
        self.filter_engine = FilterEngine()
        self.state = UIState()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="discretion-refresh",
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def view(self) -> ViewType:
        return self.state.view

    @property
    def mode(self) -> SearchMode:
        return self.state.mode

    @property
    def status(self) -> str:
        return self.state.status

    def dataset(self) -> Dataset:
        """The active view's dataset (filtered, if a filter is applied)."""
        return self.model.dataset(self.state.view)

    def selected_row(self) -> Row | None:
        rows = self.dataset()
        if len(rows) == 0:
            return None
        return rows[self.state.cursor.cursor]

    def frame(self) -> Frame:
        cursor = self.state.cursor
        rows = self.dataset()
        return Frame(
            title=f"Discretion: {self.state.view}",
            status=self.state.status,
            columns=rows.columns,
            rows=rows.window(cursor.start, cursor.end),
            highlight=cursor.offset(),
            composing=self.state.mode is SearchMode.COMPOSING,
            query=self.state.query,
            cursor=cursor.cursor,
            total=len(rows),
            filter_query=self.state.filter.query,
        )

    # ------------------------------------------------------------------
    # Input dispatch
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Apply one key press. Returns False when the app should quit."""
        if key in QUIT_KEYS:
            return False

        if self.state.mode is SearchMode.COMPOSING:
            self._handle_composing_key(key)
        elif key == "q":
            return False
        else:
            action = IDLE_KEYS.get(key)
            if action is not None:
                getattr(self, action)()

        self._sync()
        return True

    def _handle_composing_key(self, key: str) -> None:
        if key == "escape":
            self.cancel_search()
        elif key == "enter":
            self.submit_search()
        elif key == "backspace":
            self.backspace()
        elif len(key) == 1 and key.isprintable():
            self.type_text(key)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def move(self, delta: int) -> None:
        self.state.cursor = self.window.move(self.state.cursor, len(self.dataset()), delta)

    def move_up(self) -> None:
        self.move(-1)

    def move_down(self) -> None:
        self.move(1)

    def toggle_view(self) -> None:
        self.set_view(self.state.view.other())

    def set_view(self, view: ViewType) -> None:
        self.state.view = view
        self._sync()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def start_search(self) -> None:
        self.state.mode = SearchMode.COMPOSING
        self.state.query = ""

    def type_text(self, text: str) -> None:
        if self.state.mode is SearchMode.COMPOSING:
            self.state.query += text

    def backspace(self) -> None:
        self.state.query = self.state.query[:-1]

    def cancel_search(self) -> None:
        self.state.query = ""
        self.state.mode = SearchMode.IDLE
        self._sync()

    def submit_search(self) -> None:
        """Filter the current dataset with the composed query.

        The filter runs on whatever is displayed, so repeated searches
        narrow further. An empty query leaves the dataset alone.
        """
        query = self.state.query
        self.state.query = ""
        self.state.mode = SearchMode.IDLE

        if query.strip():
            before = self.dataset()
            after = self.filter_engine.filter(query, before)
            self.model.set_dataset(self.state.view, after)
            self.state.filter.applied(before, query)
            # Best match first, so start at the top.
            self.state.cursor = self.window.jump(self.state.cursor, len(after), 0)
            logger.debug("Filter %r on %s: %d -> %d rows", query, self.state.view, len(before), len(after))
        self._sync()

    def clear_filter(self) -> None:
        """Restore the rows the active view had before it was filtered."""
        current = self.state.filter
        if current.active and current.original is not None:
            self.model.set_dataset(self.state.view, current.original)
            current.clear()
        self._sync()

    # ------------------------------------------------------------------
    # Secret resolution
    # ------------------------------------------------------------------

    def select(self) -> Future | None:
        """Copy the highlighted secret to the clipboard in the background.

        Vault rows are a no-op. The clipboard is written from `pump()` once
        the resolution reports back.
        """
        row = self.selected_row()
        if row is None or self.state.view is not ViewType.SECRETS:
            return None
        self.state.status = STATUS_COPYING
        return self.cache.resolve_async(row.key)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh(self) -> Inventory:
        """Fetch metadata synchronously and rebuild everything."""
        inventory = collect_inventory(self.provider, include_disabled=self.include_disabled)
        self.apply_inventory(inventory)
        return inventory

    def request_refresh(self) -> Future | None:
        """Fetch metadata on the background executor.

        Ignored while a refresh is already running.
        """
        if self.state.refreshing:
            return None
        self.state.refreshing = True
        self.state.status = STATUS_LOADING
        return self._executor.submit(self._collect_in_background)

    def _collect_in_background(self) -> None:
        try:
            inventory = collect_inventory(self.provider, include_disabled=self.include_disabled)
        except Exception as e:
            logger.exception("Inventory enumeration failed")
            self.events.post(InventoryFailed(error=str(e) or e.__class__.__name__))
            return
        self.events.post(InventoryLoaded(inventory=inventory))

    def apply_inventory(self, inventory: Inventory) -> None:
        """Replace both datasets and the secret cache; drop any filters."""
        self.model.load(inventory)
        self.cache.replace(inventory.secrets)
        self.state.clear_filters()
        for view in ViewType:
            self.state.cursors[view] = self.window.sync(
                self.state.cursors[view], len(self.model.dataset(view))
            )

    # ------------------------------------------------------------------
    # Background completions
    # ------------------------------------------------------------------

    def pump(self) -> int:
        """Apply every pending background event. Returns how many there were."""
        events = self.events.drain()
        for event in events:
            self._apply_event(event)
        if events:
            self._sync()
        return len(events)

    def _apply_event(self, event: Event) -> None:
        if isinstance(event, InventoryLoaded):
            self.state.refreshing = False
            self.apply_inventory(event.inventory)
            inv = event.inventory
            status = f"Loaded {len(inv.vaults)} vaults, {len(inv.secrets)} secrets"
            if inv.skipped:
                status += f" ({len(inv.skipped)} skipped)"
            self.state.status = status
        elif isinstance(event, InventoryFailed):
            self.state.refreshing = False
            self.state.status = STATUS_REFRESH_FAILED
        elif isinstance(event, ResolutionStarted):
            self.state.status = STATUS_COPYING
        elif isinstance(event, ResolutionFinished):
            self._finish_resolution(event)

    def _finish_resolution(self, event: ResolutionFinished) -> None:
        if not event.found:
            self.state.status = STATUS_NOT_FOUND
            return
        if event.error is not None:
            self.state.status = f"Copy failed: {event.name}"
            return
        try:
            self.clipboard.write(event.value)
        except ClipboardError:
            self.state.status = STATUS_NO_CLIPBOARD
            return
        self.state.status = STATUS_COPIED

    # ------------------------------------------------------------------

    def close(self) -> None:
        self.cache.shutdown()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _sync(self) -> None:
        self.state.cursor = self.window.sync(self.state.cursor, len(self.dataset()))
