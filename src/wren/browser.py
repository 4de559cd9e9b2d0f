"""Headless browser window and the router's window bindings.

``Window`` bundles the pieces of a browser the router talks to: a
``Document``, a ``Location``, a ``History`` and ``SessionStorage``. It
is an ``EventTarget`` so history traversal can dispatch ``popstate``
the way a browser does.

``attach_window_listeners`` wires a router to a window: back/forward,
hash changes and initial page load all re-enter ``Router.load_path``
without pushing history.
"""

import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from wren.dom import Document
from wren.events import Event, EventTarget
from wren.routing.url import InvalidPathError, split_path

if TYPE_CHECKING:
    from wren.router import Router

logger = logging.getLogger("wren.browser")

WINDOW_EVENTS = ("popstate", "hashchange", "load", "DOMContentLoaded")


class Location:
    """The window's current URL, split into its parts."""

    __slots__ = ("hash", "pathname", "search")

    def __init__(self, url: str = "/") -> None:
        self.pathname = "/"
        self.search = ""
        self.hash = ""
        self.assign(url)

    def assign(self, url: str) -> None:
        try:
            pathname, query, hash_ = split_path(url)
        except InvalidPathError:
            logger.warning("Ignoring malformed URL %r", url)
            return
        search = query.to_string()
        self.pathname = pathname
        self.search = f"?{search}" if search else ""
        self.hash = f"#{hash_}" if hash_ else ""

    @property
    def full_path(self) -> str:
        return f"{self.pathname}{self.search}{self.hash}"

    def __repr__(self) -> str:
        return f"Location({self.full_path!r})"


class History:
    """Session history: a list of entries and a cursor into it."""

    __slots__ = ("_entries", "_index", "_window")

    def __init__(self, window: "Window") -> None:
        self._window = window
        self._entries: list[tuple[Any, str]] = [(None, window.location.full_path)]
        self._index = 0

    @property
    def length(self) -> int:
        return len(self._entries)

    @property
    def state(self) -> Any:
        return self._entries[self._index][0]

    def push_state(self, state: Any, title: str, url: str) -> None:
        del self._entries[self._index + 1 :]
        self._window.location.assign(url)
        self._entries.append((state, self._window.location.full_path))
        self._index += 1

    def replace_state(self, state: Any, title: str, url: str) -> None:
        self._window.location.assign(url)
        self._entries[self._index] = (state, self._window.location.full_path)

    async def go(self, delta: int) -> None:
        """Move the cursor by *delta* and dispatch ``popstate``. Out of range is a no-op."""
        target = self._index + delta
        if delta == 0 or not 0 <= target < len(self._entries):
            return
        self._index = target
        state, url = self._entries[target]
        self._window.location.assign(url)
        await self._window.dispatch_event(Event("popstate", detail=state))

    async def back(self) -> None:
        await self.go(-1)

    async def forward(self) -> None:
        await self.go(1)


class SessionStorage:
    """String key/value storage scoped to the window."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class Window(EventTarget):
    """A headless browser window.

    Usage::

        window = Window("/users/42")
        router = create_web_router(routes=routes, window=window)
        await window.dispatch_event(Event("load"))
    """

    def __init__(self, url: str = "/", document: Document | None = None) -> None:
        super().__init__()
        self.document = document if document is not None else Document()
        self.location = Location(url)
        self.history = History(self)
        self.session_storage = SessionStorage()


def attach_window_listeners(router: "Router", window: Window) -> Callable[[], None]:
    """Bind *router* to *window*'s navigation events.

    Restores a persisted stack-mode history from session storage, then
    routes ``popstate``, ``hashchange``, ``load`` and ``DOMContentLoaded``
    into ``router.load_path(..., should_push_history=False)``. Events
    that arrive while the router is already handling one are ignored.

    Returns a function that removes every listener it added.
    """
    _restore_history(router, window)

    async def on_window_event(event: Event) -> None:
        if router.is_loading:
            return
        router.is_loading = True
        try:
            await router.load_path(window.location.full_path, False, event)
        finally:
            router.is_loading = False

    def on_lock_prevented(event: Event) -> None:
        window.history.replace_state(None, "", event.detail.locked_path)

    for type_ in WINDOW_EVENTS:
        window.add_event_listener(type_, on_window_event)
    router.add_event_listener("routelockprevented", on_lock_prevented)

    def detach() -> None:
        for type_ in WINDOW_EVENTS:
            window.remove_event_listener(type_, on_window_event)
        router.remove_event_listener("routelockprevented", on_lock_prevented)

    return detach


def _restore_history(router: "Router", window: Window) -> None:
    saved = window.session_storage.get_item(router.config.history_storage_key)
    if not saved:
        return
    try:
        entries = json.loads(saved)
    except ValueError as exc:
        logger.warning("Could not parse saved router history: %s", exc)
        return
    if not isinstance(entries, list):
        return
    # Entries may already exist from navigations made before attaching.
    if entries and router.router_history and entries[-1] == router.router_history[0]:
        entries.pop()
    router.router_history[:0] = [str(entry) for entry in entries]
