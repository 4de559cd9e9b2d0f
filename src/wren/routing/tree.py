"""Route tree — compiled route records and the path matcher.

Route records are compiled once into a forest of ``Route`` nodes. Each
node carries its full path from the root, so matching compares a node's
segments against the target path from index 0 and descends into
children until the path is consumed.

Matching rules, per segment:

- ``*`` accepts any single segment without naming it.
- ``:name`` binds the segment to ``params["name"]``. A name already
  bound by an ancestor must capture the same value, else the branch fails.
- ``:name*`` binds like ``:name`` and, when the route is the deepest
  match, absorbs every remaining segment (``"a/b/c"``).
- anything else must equal the segment exactly.

Roots are tried in declaration order and the first structural match
wins. Children are tried in order and the first matching child wins.
The compiled tree is never modified by matching, except that lazy
subtrees are spliced in place of their placeholder once loaded.
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from wren.errors import ConfigurationError
from wren.routing.record import RouteRecord, to_record
from wren.routing.route import LazyRoute, MatchedRoute, MatchResult, Route
from wren.routing.url import InvalidPathError, normalize_path, path_segments, split_path

logger = logging.getLogger("wren.routing")


class ComponentRegistry:
    """Which routes each renderable is installed on.

    Lets a component be swapped on every route that uses it (module
    reloads) without rebuilding the tree. Routes are addressed by their
    stable ``route_id``.
    """

    __slots__ = ("_by_component", "_routes")

    def __init__(self) -> None:
        self._routes: dict[int, Route] = {}
        self._by_component: dict[int, list[int]] = {}

    def register(self, route: Route) -> None:
        self._routes[route.route_id] = route
        if route.component is not None:
            self._by_component.setdefault(id(route.component), []).append(route.route_id)

    def get(self, route_id: int) -> Route:
        return self._routes[route_id]

    def routes_for(self, component: Any) -> list[Route]:
        """Return the routes *component* is currently installed on."""
        return [self._routes[rid] for rid in self._by_component.get(id(component), [])]

    def replace(self, route_id: int, component: Any) -> None:
        """Install *component* on a single route."""
        route = self._routes[route_id]
        ids = self._by_component.get(id(route.component))
        if ids is not None and route_id in ids:
            ids.remove(route_id)
            if not ids:
                del self._by_component[id(route.component)]
        route.component = component
        self._by_component.setdefault(id(component), []).append(route_id)

    def swap(self, old: Any, new: Any) -> int:
        """Replace *old* with *new* on every route using it. Returns the count."""
        route_ids = list(self._by_component.get(id(old), []))
        for route_id in route_ids:
            self.replace(route_id, new)
        return len(route_ids)

    def __len__(self) -> int:
        return len(self._routes)


def _join(parent_segments: Sequence[str], segments: Sequence[str]) -> str:
    return "/" + "/".join([*parent_segments, *segments])


def _ends_in_wildcard(route: Route) -> bool:
    return bool(route.segments) and route.segments[-1].endswith("*")


class RouteTree:
    """A forest of compiled routes.

    Usage::

        tree = RouteTree.from_records([
            {"path": "/", "component": Home, "children": [
                {"path": "users/:id", "component": UserPage},
            ]},
        ])
        result = await tree.match("/users/42")
        result.params  # {"id": "42"}
    """

    __slots__ = ("registry", "roots")

    def __init__(
        self,
        roots: list[Route | LazyRoute] | None = None,
        registry: ComponentRegistry | None = None,
    ) -> None:
        self.roots: list[Route | LazyRoute] = roots if roots is not None else []
        self.registry = registry if registry is not None else ComponentRegistry()

    # -- Compilation --

    @classmethod
    def from_records(
        cls,
        records: Sequence[RouteRecord | Mapping[str, Any]],
        parent: Route | None = None,
        registry: ComponentRegistry | None = None,
    ) -> "RouteTree":
        """Compile route records into a tree.

        Multi-segment record paths become a chain of transient routes
        ending at the record's own route. Duplicate or overlapping paths
        are allowed; the first declared wins at match time.
        """
        tree = cls(registry=registry)
        for raw in records:
            record = to_record(raw)
            root = tree._compile(record, parent)
            tree.roots.append(root)
        return tree

    def _compile(self, record: RouteRecord, parent: Route | None) -> Route | LazyRoute:
        parent_segments = parent.segments if parent is not None else ()
        segments = path_segments(normalize_path(record.path))

        if not segments:
            # Index route: shares its parent's path.
            if record.subtree is not None:
                return LazyRoute(_join(parent_segments, ()), record.subtree, base=parent)
            leaf = Route(_join(parent_segments, ()))
            self._fill(leaf, record)
            return leaf

        chain: list[Route | LazyRoute] = []
        last = len(segments) - 1
        for idx, segment in enumerate(segments):
            full_path = _join(parent_segments, segments[: idx + 1])
            node: Route | LazyRoute
            if idx == last and record.subtree is not None:
                node = LazyRoute(full_path, record.subtree, base=parent)
            else:
                node = Route(
                    full_path,
                    is_dynamic=segment.startswith(":"),
                    is_wildcard=segment.startswith("*"),
                    is_transient=idx != last,
                )
            if chain:
                chain[-1].children.append(node)
            chain.append(node)

        if isinstance(chain[-1], Route):
            self._fill(chain[-1], record)
        return chain[0]

    def _fill(self, leaf: Route, record: RouteRecord) -> None:
        leaf.name = record.name
        leaf.component = record.component
        leaf.redirect = record.redirect
        leaf.title = record.title
        leaf.transition_type = record.transition_type
        leaf.metadata = record.metadata
        self.registry.register(leaf)
        for child in record.children:
            leaf.children.append(self._compile(child, leaf))

    # -- Introspection --

    def walk(self) -> Iterator[tuple[int, Route | LazyRoute]]:
        """Yield ``(depth, route)`` for every node, depth-first, in declaration order."""

        def _walk(nodes: list[Route | LazyRoute], depth: int) -> Iterator[tuple[int, Route | LazyRoute]]:
            for node in nodes:
                yield depth, node
                yield from _walk(node.children, depth + 1)

        yield from _walk(self.roots, 0)

    # -- Matching --

    async def match(self, path: str) -> MatchResult:
        """Match *path* against the tree.

        Never raises for an unmatched or malformed path: a malformed path
        logs a warning and returns an empty ``MatchResult``; an unmatched
        path returns a result whose ``sub_tree`` is ``None``.
        """
        try:
            pathname, query, hash_ = split_path(path)
        except InvalidPathError as exc:
            logger.warning("%s", exc)
            return MatchResult(path=path)

        segments = path_segments(pathname)
        for root in list(self.roots):
            params: dict[str, str] = {}
            sub_tree = await self._check_root(segments, root, params, None)
            if sub_tree is not None:
                result = MatchResult(
                    path=path,
                    search_query_params=query,
                    params=params,
                    hash=hash_,
                    sub_tree=sub_tree,
                )
                await result.collect_metadata()
                logger.debug("Matched %s -> %s", path, [n.path for n in result.chain()])
                return result

        return MatchResult(path=path, search_query_params=query, hash=hash_)

    async def _check_root(
        self,
        segments: list[str],
        route: Route | LazyRoute,
        params: dict[str, str],
        parent: Route | None,
    ) -> MatchedRoute | None:
        children_tried = False

        # Index and grouping routes fall through to their children first.
        if not route.segments or (parent is not None and route.path == parent.path):
            resolved = await self._resolve(route, parent)
            child = await self._match_children(segments, resolved, params)
            children_tried = True
            if child is not None:
                matched = MatchedRoute.from_route(resolved, _join((), segments[: len(resolved.segments)]))
                matched.child = child
                return matched

        catch_all: tuple[str, int] | None = None
        for i, pattern in enumerate(route.segments):
            if i >= len(segments):
                # Route is longer than the path.
                return None
            segment = segments[i]
            if pattern == "*":
                continue
            if pattern.startswith(":"):
                name = pattern[1:]
                if name.endswith("*"):
                    name = name[:-1]
                    catch_all = (name, i)
                if params.setdefault(name, segment) != segment:
                    return None
                continue
            if pattern != segment:
                return None

        consumed = len(route.segments)
        resolved = await self._resolve(route, parent)
        matched = MatchedRoute.from_route(resolved, _join((), segments[:consumed]))

        path_left = consumed < len(segments)
        has_index_child = any(child.path == resolved.path for child in resolved.children)
        continue_matching = path_left or (
            resolved.component is None and bool(resolved.children)
        ) or has_index_child

        if continue_matching and not children_tried:
            matched.child = await self._match_children(segments, resolved, params)

        if matched.child is not None:
            return matched

        if path_left:
            if not _ends_in_wildcard(resolved):
                return None
            # Trailing wildcard absorbs the rest of the path.
            if catch_all is not None:
                name, index = catch_all
                params[name] = "/".join(segments[index:])
            matched.full_path = _join((), segments)
            return matched

        # A link or group that none of its children completed.
        if resolved.is_transient:
            return None
        if resolved.component is None and resolved.redirect is None and resolved.children:
            return None
        return matched

    async def _match_children(
        self,
        segments: list[str],
        route: Route,
        params: dict[str, str],
    ) -> MatchedRoute | None:
        for child in list(route.children):
            attempt = dict(params)
            matched = await self._check_root(segments, child, attempt, route)
            if matched is not None:
                params.update(attempt)
                return matched
        return None

    async def _resolve(self, route: Route | LazyRoute, parent: Route | None) -> Route:
        """Load a lazy subtree (once) and splice it into the tree."""
        if isinstance(route, Route):
            return route

        record = to_record(await route.subtree.unwrap())
        while record.subtree is not None:
            record = to_record(await record.subtree.unwrap())

        subtree = RouteTree.from_records([record], route.base, self.registry)
        resolved = subtree.roots[0]
        while isinstance(resolved, Route) and resolved.is_transient and resolved.children:
            resolved = resolved.children[0]

        if not isinstance(resolved, Route) or resolved.path != route.path:
            msg = (
                "Lazy subtrees must have the same path as their parents. "
                f"Parent path: {route.path}, Subtree path: {resolved.path}"
            )
            raise ConfigurationError(msg)

        siblings = parent.children if parent is not None else self.roots
        if route in siblings:
            siblings[siblings.index(route)] = resolved
        logger.debug("Loaded lazy subtree at %s", route.path)
        return resolved
