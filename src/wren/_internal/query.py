"""Query string parameters of a navigation target.

Shared by the matcher (``MatchResult.search_query_params``), route data
snapshots and URL construction. Values keep their original order so the
query re-encodes the way it was written (minus redundant escaping).
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl, urlencode


class QueryParams(Mapping[str, str]):
    """Read-only view of a query string.

    Indexing a key gives its first value; ``get_list`` gives every value
    in order. Blank values (``?flag=``) are kept.
    """

    __slots__ = ("_by_key", "_pairs")

    def __init__(self, query_string: str = "") -> None:
        pairs = tuple(parse_qsl(query_string.removeprefix("?"), keep_blank_values=True))
        by_key: dict[str, list[str]] = {}
        for key, value in pairs:
            by_key.setdefault(key, []).append(value)
        self._pairs = pairs
        self._by_key = by_key

    def __getitem__(self, key: str) -> str:
        return self._by_key[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_key)

    def __len__(self) -> int:
        return len(self._by_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryParams):
            return NotImplemented
        return self._by_key == other._by_key

    def __hash__(self) -> int:
        return hash(frozenset((key, tuple(values)) for key, values in self._by_key.items()))

    def __repr__(self) -> str:
        shown = {key: values[0] for key, values in self._by_key.items()}
        return f"QueryParams({shown!r})"

    def get_list(self, key: str) -> list[str]:
        """All values for *key*, empty when absent."""
        return list(self._by_key.get(key, ()))

    def to_string(self) -> str:
        """Encode back to a query string, without the leading ``?``."""
        return urlencode(self._pairs)
