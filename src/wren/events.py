"""Events and the ``EventTarget`` shared by the router, DOM and window.

Listeners may be sync or async; ``dispatch_event`` awaits each one in
registration order. Cancelable events can be stopped with
``event.prevent_default()``; the dispatcher returns ``False`` when that
happened.

Router events:

- ``beforenavigate``      (cancelable) before a path is loaded
- ``routechange``         (cancelable) after matching, before rendering
- ``routeerror``          a soft failure (not found, redirect loop, ...)
- ``routeloadcompleted``  a navigation rendered and settled
- ``routelockprevented``  a navigation was refused while locked
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from wren._internal.invoke import invoke

type Listener = Callable[[Any], Any]


@dataclass(slots=True)
class Event:
    """A dispatched event. Mutable only through ``prevent_default()``."""

    type: str
    detail: Any = None
    cancelable: bool = False
    target: Any = None
    default_prevented: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        if self.cancelable:
            self.default_prevented = True


@dataclass(frozen=True, slots=True)
class NavigationChange:
    """Detail of ``beforenavigate`` and ``routechange``."""

    from_: str | None
    to: str


@dataclass(frozen=True, slots=True)
class RouteErrorDetail:
    message: str
    path: str


@dataclass(frozen=True, slots=True)
class RouteLoadCompleted:
    full_path: str
    title: str
    old_history_length: int
    new_history_length: int
    replace: bool = False
    transition_type: str | None = None


@dataclass(frozen=True, slots=True)
class RouteLockPrevented:
    locked_path: str
    attempted_path: str


def before_navigate_event(from_: str | None, to: str) -> Event:
    return Event("beforenavigate", NavigationChange(from_, to), cancelable=True)


def route_change_event(from_: str | None, to: str) -> Event:
    return Event("routechange", NavigationChange(from_, to), cancelable=True)


def route_error_event(message: str, path: str) -> Event:
    return Event("routeerror", RouteErrorDetail(message, path))


def route_load_completed_event(detail: RouteLoadCompleted) -> Event:
    return Event("routeloadcompleted", detail)


def route_lock_prevented_event(locked_path: str, attempted_path: str) -> Event:
    return Event("routelockprevented", RouteLockPrevented(locked_path, attempted_path))


class EventTarget:
    """Minimal listener registry with awaitable dispatch."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def add_event_listener(self, type_: str, listener: Listener) -> None:
        listeners = self._listeners.setdefault(type_, [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_event_listener(self, type_: str, listener: Listener) -> None:
        listeners = self._listeners.get(type_)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, type_: str) -> int:
        return len(self._listeners.get(type_, ()))

    async def dispatch_event(self, event: Event) -> bool:
        """Call every listener for ``event.type``.

        Returns ``False`` if a listener prevented the default action.
        """
        if event.target is None:
            event.target = self
        for listener in list(self._listeners.get(event.type, ())):
            await invoke(listener, event)
        return not event.default_prevented
