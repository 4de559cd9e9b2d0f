"""Lazy components and lazy route subtrees.

A ``Lazy`` wraps a loader that is only called when a route using it is
first matched. The loader is either:

- a zero-argument callable (sync or async) returning the loaded value,
  or a module-like object whose ``default`` attribute is the value;
- an import string ``"package.module:attribute"``, imported in a worker
  thread so the event loop is not blocked by module execution.

Usage::

    routes = [
        {"path": "/", "component": Home},
        {"path": "/admin", "component": lazy("myapp.views.admin:AdminPage")},
        {"path": "/docs", "subtree": lazy(load_docs_routes)},
    ]
"""

import importlib
from collections.abc import Callable
from typing import Any

import anyio.to_thread

from wren._internal.invoke import invoke
from wren.errors import LazyLoadError


def _import_target(target: str) -> Any:
    module_path, _, attr_name = target.partition(":")
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise LazyLoadError(target, str(exc)) from exc
    if not attr_name:
        return module
    try:
        return getattr(module, attr_name)
    except AttributeError as exc:
        raise LazyLoadError(target, f"module has no attribute {attr_name!r}") from exc


class Lazy:
    """A handle to something loaded on first use.

    The loaded value is cached: every ``unwrap()`` after the first
    returns the same object without calling the loader again. A loader
    that raises is not cached, so a later navigation retries it.
    """

    __slots__ = ("_loaded", "_value", "importer")

    def __init__(self, importer: Callable[[], Any] | str) -> None:
        self.importer = importer
        self._loaded = False
        self._value: Any = None

    async def unwrap(self) -> Any:
        """Load (once) and return the wrapped value.

        Modules and objects exposing ``default`` are unwrapped to that
        attribute, mirroring ``module.default`` exports.
        """
        if self._loaded:
            return self._value

        if isinstance(self.importer, str):
            loaded = await anyio.to_thread.run_sync(_import_target, self.importer)
        else:
            loaded = await invoke(self.importer)

        if isinstance(loaded, dict) and "default" in loaded:
            loaded = loaded["default"]
        elif hasattr(loaded, "default"):
            loaded = loaded.default

        self._value = loaded
        self._loaded = True
        return loaded

    def __repr__(self) -> str:
        target = self.importer if isinstance(self.importer, str) else getattr(
            self.importer, "__name__", repr(self.importer)
        )
        return f"Lazy({target!r})"


def lazy(importer: Callable[[], Any] | str) -> Lazy:
    """Create a ``Lazy`` handle for a component or route subtree."""
    return Lazy(importer)
