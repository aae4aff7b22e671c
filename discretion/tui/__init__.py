"""Terminal table browser.

Provides the windowed cursor, fuzzy filter and controller behind the
interactive vault/secret view.
"""
from .controller import Frame, NavigatorController
from .cursor import CursorState, WindowedCursor
from .filtering import FilterEngine
from .state import SearchMode, UIState
from .viewmodel import ViewModel

__all__ = [
    "CursorState",
    "FilterEngine",
    "Frame",
    "NavigatorController",
    "SearchMode",
    "UIState",
    "ViewModel",
    "WindowedCursor",
]
