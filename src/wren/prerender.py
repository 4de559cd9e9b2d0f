"""Static pre-rendering — one path to a complete HTML document.

Runs a router against a fresh headless window, then serializes the
document body into a kida shell template. Every outlet is marked with
the static attribute, so a client router that later finds these outlets
clears the mark once and takes over rendering.

Usage::

    html = await render_static(routes, "/users/42", title="Users")
"""

from collections.abc import Callable, Sequence
from typing import Any

from kida import Environment
from kida.utils.html import Markup

from wren._internal.invoke import invoke
from wren.browser import Window
from wren.dom import serialize
from wren.router import Router, create_web_router

SHELL = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body>{{ body }}</body>
</html>
"""

type RouterFactory = Callable[[Window], Router | Any]


async def render_static(
    routes_or_factory: Sequence[Any] | RouterFactory,
    path: str,
    *,
    title: str | None = None,
) -> str:
    """Render *path* and return the full HTML document.

    *routes_or_factory* is either a list of route records or a callable
    taking the ``Window`` and returning a ``Router`` (sync or async).
    When the document has no outlet for the router yet, one is appended
    to the body. *title* overrides the title set by the matched routes.
    """
    window = Window(path)
    if callable(routes_or_factory):
        router = await invoke(routes_or_factory, window)
    else:
        router = create_web_router(routes_or_factory, window=window)
    if router.window is not window:
        router.set_window(window)

    if not router.outlets():
        window.document.body.append(router.Outlet())
    await router.load_path(path)

    for outlet in router.outlets():
        outlet.set_attribute(router.config.static_attribute, True)

    env = Environment()
    template = env.from_string(SHELL)
    return template.render(
        {
            "title": title if title is not None else window.document.title,
            "body": Markup(serialize(window.document.body.children)),
        }
    )
