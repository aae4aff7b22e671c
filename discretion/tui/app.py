"""Full-screen terminal app: key bindings, painting and the event drain."""
from __future__ import annotations

import asyncio
import logging

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import Window
from prompt_toolkit.layout.controls import FormattedTextControl

from ..cache import SecretCache
from ..events import EventQueue
from ..providers import PyperclipSink
from .components import render_ansi, render_frame
from .controller import NavigatorController

logger = logging.getLogger(__name__)


def build_key_bindings(controller: NavigatorController) -> KeyBindings:
    """Translate prompt_toolkit key presses into controller key names.

    Keys:
      - Up/Down (or k/j): move cursor
      - Enter: copy secret / apply search
      - /: start search, Esc: cancel search or clear filter
      - x: toggle view, r: refresh
      - q (idle) / Ctrl-C (anywhere): quit
    """
    kb = KeyBindings()

    def _dispatch(event, key: str) -> None:
        if not controller.handle_key(key):
            event.app.exit()

    @kb.add("up")
    def _up(event):
        _dispatch(event, "up")

    @kb.add("down")
    def _down(event):
        _dispatch(event, "down")

    @kb.add("enter")
    def _enter(event):
        _dispatch(event, "enter")

    @kb.add("escape")
    def _escape(event):
        _dispatch(event, "escape")

    @kb.add("backspace")
    def _backspace(event):
        _dispatch(event, "backspace")

    @kb.add("c-c")
    def _quit(event):
        _dispatch(event, "c-c")

    @kb.add(Keys.Any)
    def _printable(event):
        _dispatch(event, event.data)

    return kb


class BrowserApp:
    """Runs the controller inside a prompt_toolkit application.

    The app's asyncio loop is the single main loop: key handlers and the
    periodic event drain both run on it, so controller state is never
    touched from a worker thread.
    """

    def __init__(self, controller: NavigatorController, refresh_interval: float = 0.2):
        self.controller = controller
        self.refresh_interval = refresh_interval
        self.app: Application = Application(
            layout=Layout(Window(FormattedTextControl(self._render, focusable=True), wrap_lines=False)),
            key_bindings=build_key_bindings(controller),
            full_screen=True,
            mouse_support=False,
        )
        # Esc is also a prefix of arrow sequences; don't wait long to tell them apart.
        self.app.ttimeoutlen = 0.05

    def _render(self) -> ANSI:
        width = self.app.output.get_size().columns
        return ANSI(render_ansi(render_frame(self.controller.frame()), width))

    async def _drain_events(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            if self.controller.pump():
                self.app.invalidate()

    def run(self) -> None:
        def _start() -> None:
            self.app.create_background_task(self._drain_events())

        self.controller.request_refresh()
        try:
            self.app.run(pre_run=_start)
        finally:
            self.controller.close()
            logger.info("Browser closed")


def run_browser(settings, provider, resolver, clipboard=None) -> None:
    """Wire the cache and controller from settings and run the browser."""
    events = EventQueue()
    cache = SecretCache(resolver, events=events, max_workers=settings.DISCRETION_RESOLVE_WORKERS)
    controller = NavigatorController(
        provider,
        cache,
        clipboard or PyperclipSink(),
        events=events,
        window_height=settings.DISCRETION_WINDOW_HEIGHT,
        column_width=settings.DISCRETION_COLUMN_WIDTH,
        include_disabled=settings.DISCRETION_SHOW_DISABLED,
    )
    BrowserApp(controller, refresh_interval=settings.DISCRETION_REFRESH_INTERVAL).run()
