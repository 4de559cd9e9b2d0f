"""Wren CLI — inspect route trees and pre-render paths.

Entry point registered as ``wren`` in ``pyproject.toml``::

    [project.scripts]
    wren = "wren.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wren`` command."""
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Wren — a client-side navigation engine for nested routes.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log matching and navigation progress to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wren routes ------------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="Print the compiled route tree")
    routes_parser.add_argument("routes", help="Import string (e.g. myapp.routes:routes)")

    # -- wren match -------------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Match a path against the routes")
    match_parser.add_argument("routes", help="Import string (e.g. myapp.routes:routes)")
    match_parser.add_argument("path", help="Path to match (e.g. /users/42?tab=posts)")

    # -- wren render ------------------------------------------------------
    render_parser = subparsers.add_parser("render", help="Pre-render a path to HTML")
    render_parser.add_argument("routes", help="Import string (e.g. myapp.routes:routes)")
    render_parser.add_argument("path", help="Path to render")
    render_parser.add_argument("--title", default=None, help="Document title override")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from wren.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from wren.cli._match import run_match

        run_match(args)
    elif args.command == "render":
        from wren.cli._render import run_render

        run_render(args)
