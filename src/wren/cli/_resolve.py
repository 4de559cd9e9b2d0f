"""Route import resolution — resolves ``"module:attribute"`` strings to route records.

Shared utility used by every ``wren`` command to locate the route
records from a user-supplied import string.
"""

import importlib
from collections.abc import Sequence
from typing import Any


def resolve_routes(import_string: str) -> list[Any]:
    """Resolve an import string to a list of route records.

    Accepts ``"module:attribute"`` format. When the attribute portion
    is omitted, defaults to ``"routes"`` (e.g. ``"myapp"`` resolves to
    ``myapp.routes``).

    Supports factory functions: a callable attribute is called with no
    arguments and must return the records.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a sequence of records.

    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "routes"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, (str, bytes)) or not isinstance(obj, Sequence):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a list of route records"
        raise TypeError(msg)

    return list(obj)
