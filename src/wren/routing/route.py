"""Compiled routes and match results.

``Route`` nodes are built once from route records and form the route
tree. ``MatchedRoute`` nodes are copied out of the tree for every match
and linked into a chain, one node per nesting level. ``MatchResult``
holds the chain together with the params, query and merged metadata.
"""

import itertools
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wren._internal.invoke import invoke
from wren._internal.query import QueryParams
from wren.routing.url import path_segments

if TYPE_CHECKING:
    from wren.routing.lazy import Lazy


@dataclass(frozen=True, slots=True)
class MetadataOptions:
    """Argument passed to metadata functions."""

    params: dict[str, str]
    query: QueryParams


type Metadata = (
    dict[str, Any] | Callable[[MetadataOptions], dict[str, Any] | Awaitable[dict[str, Any]]]
)

_route_ids = itertools.count(1)


@dataclass(slots=True, eq=False)
class Route:
    """A compiled route tree node.

    Attributes:
        path: Full, slash-normalized path from the root (``/users/:id``).
        is_dynamic: The route's own segment is a ``:param``.
        is_wildcard: The route's own segment is ``*``.
        is_transient: The route only links a multi-segment record path
            (``users/:id`` compiles to ``/users`` -> ``/users/:id``) and
            renders nothing itself.
        route_id: Stable identity, used by ``ComponentRegistry``.
    """

    path: str
    name: str | None = None
    redirect: str | None = None
    title: str | None = None
    metadata: Metadata | None = None
    component: Any = None
    transition_type: str | None = None
    is_dynamic: bool = False
    is_wildcard: bool = False
    is_transient: bool = False
    children: list["Route | LazyRoute"] = field(default_factory=list)
    segments: tuple[str, ...] = ()
    route_id: int = field(default_factory=lambda: next(_route_ids))

    def __post_init__(self) -> None:
        self.segments = tuple(path_segments(self.path))

    def __repr__(self) -> str:
        flags = [f for f in ("dynamic", "wildcard", "transient") if getattr(self, f"is_{f}")]
        extra = f", {'/'.join(flags)}" if flags else ""
        kids = f", children={len(self.children)}" if self.children else ""
        return f"Route({self.path!r}{extra}{kids})"


@dataclass(slots=True, eq=False)
class LazyRoute:
    """Placeholder for a subtree that is loaded on first match.

    Replaced in the tree by the compiled subtree once resolved.
    """

    path: str
    subtree: "Lazy"
    base: Route | None = None  # Route the subtree's record is relative to
    segments: tuple[str, ...] = ()
    children: list["Route | LazyRoute"] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.segments = tuple(path_segments(self.path))


@dataclass(slots=True, eq=False)
class MatchedRoute:
    """One link of a matched chain, copied from a ``Route`` at match time.

    ``path`` is the route's pattern; ``full_path`` is the concrete path
    the pattern matched (``/users/:id`` -> ``/users/42``).
    """

    path: str
    full_path: str
    name: str | None = None
    redirect: str | None = None
    title: str | None = None
    component: Any = None
    transition_type: str | None = None
    metadata: Metadata | None = None
    is_dynamic: bool = False
    is_transient: bool = False
    child: "MatchedRoute | None" = None

    @classmethod
    def from_route(cls, route: Route, full_path: str) -> "MatchedRoute":
        return cls(
            path=route.path or "/",
            full_path=full_path or "/",
            name=route.name,
            redirect=route.redirect,
            title=route.title,
            component=route.component,
            transition_type=route.transition_type,
            metadata=route.metadata,
            is_dynamic=route.is_dynamic,
            is_transient=route.is_transient,
        )


@dataclass(slots=True)
class MatchResult:
    """The outcome of matching one path.

    ``params`` is shared across the whole matching pass, so a param name
    repeated at two nesting levels must capture the same value.
    ``metadata`` is merged root to leaf: child keys overwrite parent keys.
    """

    path: str
    search_query_params: QueryParams = field(default_factory=QueryParams)
    params: dict[str, str] = field(default_factory=dict)
    hash: str | None = None
    sub_tree: MatchedRoute | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def chain(self) -> Iterator[MatchedRoute]:
        """Iterate the matched chain from root to leaf."""
        current = self.sub_tree
        while current is not None:
            yield current
            current = current.child

    def leaf(self) -> MatchedRoute | None:
        """Return the deepest matched node, or ``None`` when nothing matched."""
        last = None
        for node in self.chain():
            last = node
        return last

    async def collect_metadata(self) -> dict[str, Any]:
        """Merge route and component metadata down the chain.

        Metadata functions (sync or async) receive a ``MetadataOptions``
        with the match's params and query. At each level the route's own
        metadata is applied first, then metadata embedded on the
        component callable.
        """
        options = MetadataOptions(params=self.params, query=self.search_query_params)
        for node in self.chain():
            embedded = None
            if callable(node.component):
                embedded = getattr(node.component, "metadata", None)
            for source in (node.metadata, embedded):
                if not source:
                    continue
                values = await invoke(source, options) if callable(source) else source
                if values:
                    self.metadata.update(values)
        return self.metadata

    def flatten_transient_routes(self) -> None:
        """Splice transient links out of the chain, the head included."""
        while self.sub_tree is not None and self.sub_tree.is_transient:
            self.sub_tree = self.sub_tree.child

        current = self.sub_tree
        while current is not None:
            while current.child is not None and current.child.is_transient:
                current.child = current.child.child
            current = current.child
