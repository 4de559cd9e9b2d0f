"""Middleware — Protocol-based, no inheritance required.

A middleware is anything with a ``callback`` (or a bare callable) matching:
    async def callback(details: NavigationDetails) -> RedirectResponse | None
"""

from wren.middleware.protocol import (
    Middleware,
    NavigationDetails,
    RedirectResponse,
    RouteData,
    RouterMiddleware,
    define_middleware,
    redirect,
)

__all__ = [
    "Middleware",
    "NavigationDetails",
    "RedirectResponse",
    "RouteData",
    "RouterMiddleware",
    "define_middleware",
    "redirect",
]
