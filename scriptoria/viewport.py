"""Responsive layout: derive the display mode from the window width."""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from scriptoria.store import ManuscriptStore

log = logging.getLogger(__name__)


class DisplayMode(Enum):
    FULL = "full"
    EXTENSION = "extension"


def classify_width(width: int, breakpoint: int) -> DisplayMode:
    return DisplayMode.EXTENSION if width < breakpoint else DisplayMode.FULL


class ViewportMonitor:
    """Keeps the store's display mode in step with the window width."""

    def __init__(self, store: "ManuscriptStore", breakpoint: int) -> None:
        self.store = store
        self.breakpoint = breakpoint
        self._window: Optional[Any] = None
        self._bind_id: Optional[str] = None

    def evaluate(self, width: int) -> DisplayMode:
        mode = classify_width(width, self.breakpoint)
        self.store.update_mode(mode)
        return mode

    def attach(self, window, initial_width: Optional[int] = None) -> None:
        """Follow a Tk window's resizes and evaluate its width once.

        An unmapped window reports a width of 1, so callers that attach before
        the mainloop starts can pass the width they requested.
        """
        self.detach()
        self._window = window
        self._bind_id = window.bind("<Configure>", self._on_configure, add="+")
        width = window.winfo_width()
        if width <= 1 and initial_width is not None:
            width = initial_width
        self.evaluate(width)

    def detach(self) -> None:
        if self._window is not None and self._bind_id is not None:
            self._window.unbind("<Configure>", self._bind_id)
        self._window = None
        self._bind_id = None

    def _on_configure(self, event=None) -> None:
        # <Configure> also fires for every child widget, only the window counts
        if event is not None and event.widget is not self._window:
            return
        self.evaluate(self._window.winfo_width())
