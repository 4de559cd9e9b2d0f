"""Wren — a client-side navigation engine for nested routes.

Maps URL paths to a tree of nested view components, renders the matched
chain into outlets, and keeps that rendering in sync with history and
programmatic navigation.

Basic usage::

    from wren import create_web_router

    def App():
        return router.Outlet()

    routes = [
        {"path": "/", "component": Home, "children": [
            {"path": "users/:id", "component": UserPage},
        ]},
        {"path": "/old", "redirect": "/"},
    ]

    router = create_web_router(routes=routes)
    router.window.document.body.append(router.Outlet())
    await router.navigate("/users/42")
    router.params["id"]  # "42"
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "Event",
    "LazyLoadError",
    "Link",
    "MatchResult",
    "NavigationDetails",
    "Outlet",
    "RedirectResponse",
    "RouteData",
    "RouteRecord",
    "RouteTree",
    "Router",
    "RouterConfig",
    "RouterError",
    "RouterMiddleware",
    "Window",
    "WrenError",
    "create_web_router",
    "define_middleware",
    "define_route",
    "define_routes",
    "lazy",
    "redirect",
    "render_static",
    "use_router",
]

# Public name -> module that defines it
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "wren.errors",
    "Event": "wren.events",
    "LazyLoadError": "wren.errors",
    "Link": "wren.router",
    "MatchResult": "wren.routing.route",
    "NavigationDetails": "wren.middleware.protocol",
    "Outlet": "wren.router",
    "RedirectResponse": "wren.middleware.protocol",
    "RouteData": "wren.middleware.protocol",
    "RouteRecord": "wren.routing.record",
    "RouteTree": "wren.routing.tree",
    "Router": "wren.router",
    "RouterConfig": "wren.config",
    "RouterError": "wren.errors",
    "RouterMiddleware": "wren.middleware.protocol",
    "Window": "wren.browser",
    "WrenError": "wren.errors",
    "create_web_router": "wren.router",
    "define_middleware": "wren.middleware.protocol",
    "define_route": "wren.routing.record",
    "define_routes": "wren.routing.record",
    "lazy": "wren.routing.lazy",
    "redirect": "wren.middleware.protocol",
    "render_static": "wren.prerender",
    "use_router": "wren.context",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_path), name)
