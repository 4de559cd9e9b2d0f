"""``wren routes`` — print the compiled route tree.

Resolves an import string to route records, compiles them and prints
one row per route, indented by nesting depth.
"""

import argparse
import sys
from typing import Any

from wren.cli._resolve import resolve_routes
from wren.errors import ConfigurationError
from wren.routing.lazy import Lazy
from wren.routing.route import LazyRoute, Route
from wren.routing.tree import RouteTree


def describe_component(component: Any) -> str:
    if component is None:
        return "-"
    if isinstance(component, Lazy):
        importer = component.importer
        target = importer if isinstance(importer, str) else getattr(importer, "__name__", "?")
        return f"lazy({target})"
    return getattr(component, "__name__", repr(component))


def _flags(node: Route | LazyRoute) -> str:
    if isinstance(node, LazyRoute):
        return "lazy-subtree"
    flags = [f for f in ("dynamic", "wildcard", "transient") if getattr(node, f"is_{f}")]
    if node.redirect:
        flags.append(f"redirect={node.redirect}")
    return ",".join(flags) or "-"


def run_routes(args: argparse.Namespace) -> None:
    """Print the compiled route tree for ``args.routes``."""
    try:
        tree = RouteTree.from_records(resolve_routes(args.routes))
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    # Build rows: (indented path, name, flags, component)
    rows: list[tuple[str, str, str, str]] = []
    for depth, node in tree.walk():
        name = getattr(node, "name", None) or "-"
        component = describe_component(getattr(node, "component", None))
        rows.append(("  " * depth + node.path, name, _flags(node), component))

    if not rows:
        print("No routes registered.")
        return

    widths = [max(len(row[i]) for row in rows) for i in range(3)]
    widths = [max(widths[0], 4), max(widths[1], 4), max(widths[2], 5)]

    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    print(fmt.format("PATH", "NAME", "FLAGS", "COMPONENT"))
    sep_len = sum(widths) + 6 + max(len(row[3]) for row in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
