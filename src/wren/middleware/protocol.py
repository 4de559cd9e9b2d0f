"""Navigation middleware protocol.

A middleware runs once per navigation, before anything is rendered, and
receives ``NavigationDetails`` with ``from_`` and ``to`` route snapshots.
It either returns nothing (continue) or a ``RedirectResponse``::

    async def require_login(details: NavigationDetails) -> RedirectResponse | None:
        if details.to.full_path.startswith("/admin") and not session.user:
            return redirect("/login")
        return None

    router = create_web_router(routes=routes, middlewares=[define_middleware(require_login)])

No base class required. Anything with a ``callback`` attribute works,
and so does a bare callable. The router checks the shape, not the lineage.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from wren._internal.query import QueryParams


@dataclass(frozen=True, slots=True)
class RouteData:
    """A snapshot of one route: where the router is, or where it is going.

    Attributes:
        name: Name of the deepest matched route.
        path: Pattern of the deepest matched route (``/users/:id``).
        full_path: Concrete URL, with query and hash (``/users/42?tab=1``).
    """

    name: str | None
    path: str
    full_path: str
    params: dict[str, str] = field(default_factory=dict)
    query: QueryParams = field(default_factory=QueryParams)
    hash: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class NavigationDetails:
    """Argument passed to every middleware.

    ``from_`` is ``None`` on the first navigation of a router.
    """

    from_: RouteData | None
    to: RouteData


@dataclass(frozen=True, slots=True)
class RedirectResponse:
    """Returned by a middleware to send the navigation elsewhere."""

    path: str
    type: str = "redirect"


def redirect(path: str) -> RedirectResponse:
    """Build a ``RedirectResponse`` to *path*."""
    return RedirectResponse(path=path)


# What a middleware callback may return
type MiddlewareResult = RedirectResponse | None

# A middleware callback, sync or async
type MiddlewareCallback = Callable[
    [NavigationDetails], MiddlewareResult | Awaitable[MiddlewareResult]
]


class Middleware(Protocol):
    """Protocol for wren navigation middleware.

    Accepts any object exposing a ``callback``::

        class AuditTrail:
            async def callback(self, details: NavigationDetails) -> None:
                log.append((details.from_, details.to))
    """

    def callback(self, details: NavigationDetails) -> Any: ...


@dataclass(frozen=True, slots=True)
class RouterMiddleware:
    """A middleware built from a plain callback by ``define_middleware``."""

    callback: MiddlewareCallback


def define_middleware(callback: MiddlewareCallback) -> RouterMiddleware:
    """Wrap a callback into a middleware object."""
    return RouterMiddleware(callback=callback)


def callback_of(middleware: Any) -> Callable[[NavigationDetails], Any]:
    """Return the callable to invoke for *middleware*."""
    return getattr(middleware, "callback", middleware)
