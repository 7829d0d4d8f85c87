"""Per-window wiring between the host shell and the subscription manager.

The host delivers page-show and window-open notifications through
:class:`EventSource` objects. Registering a listener returns a callable that
removes it again; a :class:`WindowController` owns those callables and the
per-window :class:`PageActionSession`, so no page-action state lives in
module globals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Sequence

from .feed.models import FeedDescriptor

log = logging.getLogger(__name__)

PAGE_ACTION_TITLE = "Add RSS feed to home page"
PAGE_ACTION_ICON = "drawable://icon_openinapp"

APP_SHUTDOWN = "app-shutdown"

Listener = Callable[..., None]


class EventSource:
    """A list of listeners that can be notified and unregistered."""

    def __init__(self, name: str = "event") -> None:
        self.name = name
        self._listeners: List[Listener] = []
        self._lock = RLock()

    def register(self, listener: Listener) -> Callable[[], None]:
        """Add ``listener`` and return a callable that removes it again."""

        with self._lock:
            self._listeners.append(listener)

        def _unregister() -> None:
            with self._lock:
                try:
                    self._listeners.remove(listener)
                except ValueError:
                    pass

        return _unregister

    def emit(self, *args: Any) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                log.exception("Listener for %s failed", self.name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)


@dataclass(frozen=True)
class PageShowEvent:
    """A document finished loading.

    ``top_level`` is false for frames and other sub-documents, which never
    get a page action.
    """

    top_level: bool
    feeds: Sequence[FeedDescriptor] = ()


@dataclass
class HostWindow:
    """The parts of a browser window the add-on talks to.

    ``page_actions`` must offer ``add(options) -> handle`` and
    ``remove(handle)``; ``prompt`` is the single-choice dialog.
    """

    page_actions: Any
    prompt: Optional[Callable[[List[str]], Optional[int]]] = None
    page_show: EventSource = field(default_factory=lambda: EventSource("pageshow"))


class PageActionSession:
    """Holds the page-action button of one window."""

    def __init__(self, window: HostWindow, manager: Any) -> None:
        self.window = window
        self.manager = manager
        self.action_id: Any = None

    def handle_page_show(self, event: PageShowEvent) -> None:
        if not event.top_level:
            return

        self.clear()

        feeds = list(event.feeds or ())
        if not feeds:
            return

        def _on_click() -> None:
            self.manager.on_subscribe_requested(feeds, prompt=self.window.prompt)

        self.action_id = self.window.page_actions.add(
            {
                "icon": PAGE_ACTION_ICON,
                "title": PAGE_ACTION_TITLE,
                "click": _on_click,
            }
        )

    def clear(self) -> None:
        if self.action_id is None:
            return
        try:
            self.window.page_actions.remove(self.action_id)
        finally:
            self.action_id = None


class WindowController:
    """Attaches a :class:`PageActionSession` to every host window."""

    def __init__(self, manager: Any) -> None:
        self.manager = manager
        self._sessions: Dict[int, PageActionSession] = {}
        self._unregister: Dict[int, Callable[[], None]] = {}
        self._window_listener: Optional[Callable[[], None]] = None

    def load_into_window(self, window: HostWindow) -> PageActionSession:
        key = id(window)
        existing = self._sessions.get(key)
        if existing is not None:
            return existing
        session = PageActionSession(window, self.manager)
        self._sessions[key] = session
        self._unregister[key] = window.page_show.register(session.handle_page_show)
        return session

    def unload_from_window(self, window: HostWindow) -> None:
        key = id(window)
        unregister = self._unregister.pop(key, None)
        if unregister is not None:
            unregister()
        session = self._sessions.pop(key, None)
        if session is not None:
            session.clear()

    def startup(self, windows: Sequence[HostWindow], window_opened: Optional[EventSource] = None) -> None:
        for window in windows:
            self.load_into_window(window)
        if window_opened is not None and self._window_listener is None:
            self._window_listener = window_opened.register(self.load_into_window)

    def shutdown(self, windows: Sequence[HostWindow], reason: Optional[str] = None) -> None:
        # The whole UI goes away on application exit.
        if reason == APP_SHUTDOWN:
            return
        if self._window_listener is not None:
            self._window_listener()
            self._window_listener = None
        for window in windows:
            self.unload_from_window(window)

    def session_for(self, window: HostWindow) -> Optional[PageActionSession]:
        return self._sessions.get(id(window))


__all__ = [
    "APP_SHUTDOWN",
    "EventSource",
    "HostWindow",
    "PAGE_ACTION_TITLE",
    "PageActionSession",
    "PageShowEvent",
    "WindowController",
]
