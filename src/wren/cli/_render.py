"""``wren render`` — pre-render a path and print the HTML document."""

import argparse
import sys

import anyio

from wren.cli._resolve import resolve_routes
from wren.errors import WrenError
from wren.prerender import render_static


def run_render(args: argparse.Namespace) -> None:
    """Render ``args.path`` with the routes of ``args.routes`` to stdout."""
    try:
        routes = resolve_routes(args.routes)
        html = anyio.run(_render, routes, args.path, args.title)
    except (ModuleNotFoundError, AttributeError, TypeError, WrenError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(html)


async def _render(routes: list, path: str, title: str | None) -> str:
    return await render_static(routes, path, title=title)
