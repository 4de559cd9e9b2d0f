"""``wren match`` — show what a path matches.

Prints the matched chain (after transient links are flattened), the
captured params, the query and the merged metadata. Exits with status 1
when nothing matches.
"""

import argparse
import sys

import anyio

from wren.cli._resolve import resolve_routes
from wren.cli._routes import describe_component
from wren.errors import ConfigurationError, LazyLoadError
from wren.routing.route import MatchResult
from wren.routing.tree import RouteTree


async def _match(tree: RouteTree, path: str) -> MatchResult:
    result = await tree.match(path)
    result.flatten_transient_routes()
    return result


def run_match(args: argparse.Namespace) -> None:
    """Match ``args.path`` against the routes of ``args.routes``."""
    try:
        tree = RouteTree.from_records(resolve_routes(args.routes))
        result = anyio.run(_match, tree, args.path)
    except (
        ModuleNotFoundError,
        AttributeError,
        TypeError,
        ConfigurationError,
        LazyLoadError,
    ) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if result.sub_tree is None:
        print(f"No route matches {args.path}", file=sys.stderr)
        raise SystemExit(1)

    for depth, node in enumerate(result.chain()):
        label = f"{node.path} -> {node.full_path}"
        extra = f"  [{node.name}]" if node.name else ""
        print(f"{'  ' * depth}{label}  {describe_component(node.component)}{extra}")

    print()
    print(f"params:   {dict(result.params)}")
    print(f"query:    {result.search_query_params.to_string() or '-'}")
    print(f"hash:     {result.hash or '-'}")
    print(f"metadata: {result.metadata}")
