"""Route records — the user-authored route configuration.

Records can be written as ``RouteRecord`` instances or as plain dicts
with the same keys::

    routes = define_routes([
        {"path": "/", "component": Home, "children": [
            {"path": "users/:id", "component": UserPage, "title": "User"},
        ]},
        {"path": "/old-home", "redirect": "/"},
    ])
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields
from typing import Any

from wren.errors import ConfigurationError
from wren.routing.lazy import Lazy
from wren.routing.route import Metadata

# camelCase spellings accepted in dict records
_ALIASES = {"transitionType": "transition_type"}


@dataclass(frozen=True, slots=True)
class RouteRecord:
    """One route record, possibly nested through ``children``.

    Exactly one of ``component``, ``redirect``, non-empty ``children`` or
    ``subtree`` is expected for the route to be navigable. A record with
    none of them renders the not-found placeholder.
    """

    path: str
    name: str | None = None
    redirect: str | None = None
    title: str | None = None
    metadata: Metadata | None = None
    component: Any = None
    transition_type: str | None = None
    children: tuple["RouteRecord", ...] = ()
    subtree: Lazy | None = None


_FIELD_NAMES = frozenset(f.name for f in fields(RouteRecord))


def to_record(raw: "RouteRecord | Mapping[str, Any]") -> RouteRecord:
    """Normalize a dict (or record) into a ``RouteRecord``.

    Raises ``ConfigurationError`` for a missing or non-string ``path``,
    unknown keys, or ``children`` that is not a list.
    """
    if isinstance(raw, RouteRecord):
        return raw
    if not isinstance(raw, Mapping):
        msg = f"Route records must be dicts or RouteRecord, got {type(raw).__name__}"
        raise ConfigurationError(msg)

    values = {_ALIASES.get(key, key): value for key, value in raw.items()}
    unknown = set(values) - _FIELD_NAMES
    if unknown:
        msg = f"Unknown route record keys {sorted(unknown)} in record {raw!r}"
        raise ConfigurationError(msg)

    path = values.get("path")
    if not isinstance(path, str):
        msg = f"Route record needs a string 'path', got {path!r}"
        raise ConfigurationError(msg)

    children = values.get("children", ())
    if isinstance(children, (str, bytes)) or not isinstance(children, Sequence):
        msg = f"'children' of route {path!r} must be a list of records"
        raise ConfigurationError(msg)
    values["children"] = tuple(to_record(child) for child in children)

    subtree = values.get("subtree")
    if subtree is not None and not isinstance(subtree, Lazy):
        msg = f"'subtree' of route {path!r} must be a Lazy handle (use lazy(...))"
        raise ConfigurationError(msg)

    return RouteRecord(**values)


def define_routes(routes: Sequence["RouteRecord | Mapping[str, Any]"]) -> list[RouteRecord]:
    """Validate and normalize a list of route records."""
    return [to_record(route) for route in routes]


def define_route(route: "RouteRecord | Mapping[str, Any]") -> RouteRecord:
    """Validate and normalize a single route record."""
    return to_record(route)
