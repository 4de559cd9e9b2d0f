"""Path helpers — splitting navigation targets and rebuilding URLs.

Navigation targets are URL-ish strings: a bare pathname (``/users/42``),
a pathname with query and fragment (``/search?q=wren#top``), or a
hash-fragment form (``#/users/42``) as produced by ``location.hash``.
"""

import re
from collections.abc import Mapping
from urllib.parse import urlsplit

from wren._internal.query import QueryParams

_SLASHES = re.compile(r"/+")
_PARAM = re.compile(r":(\w+)\*?")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


class InvalidPathError(ValueError):
    """A navigation target that cannot be parsed as a path."""


def normalize_path(path: str) -> str:
    """Collapse repeated slashes: ``"//users///:id"`` -> ``"/users/:id"``."""
    return _SLASHES.sub("/", path)


def path_segments(path: str) -> list[str]:
    """Split a path into its non-empty segments."""
    return [part for part in path.split("/") if part]


def split_path(path: str) -> tuple[str, QueryParams, str | None]:
    """Split a navigation target into ``(pathname, query, hash)``.

    A leading ``#`` is treated as the hash-fragment form of a path.
    Raises ``InvalidPathError`` for relative paths or control characters.
    """
    if path.startswith("#"):
        path = "/" + path[1:].lstrip("/")
    if not path.startswith("/"):
        msg = f"Invalid path: {path!r} (expected a leading '/')"
        raise InvalidPathError(msg)
    if _CONTROL.search(path):
        msg = f"Invalid path: {path!r} (control characters)"
        raise InvalidPathError(msg)

    parts = urlsplit(f"http://localhost{path}")
    return parts.path or "/", QueryParams(parts.query), parts.fragment or None


def construct_url(
    path: str,
    params: Mapping[str, str],
    query: QueryParams | None = None,
    hash_: str | None = None,
) -> str:
    """Fill ``:name`` placeholders in *path* from *params*, then append query and hash.

    Placeholders without a value are left as they are::

        construct_url("/users/:id", {"id": "42"})       -> "/users/42"
        construct_url("/docs/:rest*", {"rest": "a/b"})  -> "/docs/a/b"
    """
    final = _PARAM.sub(lambda m: params.get(m.group(1)) or m.group(0), path)
    if query:
        final += f"?{query.to_string()}"
    if hash_:
        final += f"#{hash_}"
    return final
