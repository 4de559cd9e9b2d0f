"""Router-scoped context via ContextVar.

Provides:
- ``router_var``: The router that is currently rendering.
- ``outlet_depth_var``: Nesting depth of the route level being rendered.

Both are set by the router around each component render and reset
afterwards, so components (and the ``Outlet``/``Link`` primitives they
create) find their router without a module-level singleton.

Thread safety:
    ``ContextVar`` is task-local under asyncio, so concurrent navigations
    of different routers never see each other's values.
"""

from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.router import Router

router_var: ContextVar["Router"] = ContextVar("wren_router")
"""The router rendering the current component."""

outlet_depth_var: ContextVar[int] = ContextVar("wren_outlet_depth", default=0)
"""Depth an ``Outlet`` created right now belongs to. 0 outside any render."""


def use_router() -> "Router":
    """Return the router rendering the current component.

    Raises ``LookupError`` if called outside a router scope.
    """
    return router_var.get()
