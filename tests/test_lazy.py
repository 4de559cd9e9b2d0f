"""Tests for wren.routing.lazy — lazy components and import strings."""

import types

import pytest

from wren.errors import LazyLoadError
from wren.routing.lazy import Lazy, lazy


def Page() -> str:
    return "page"


class TestLazy:
    async def test_sync_loader(self) -> None:
        handle = lazy(lambda: Page)
        assert await handle.unwrap() is Page

    async def test_async_loader(self) -> None:
        async def load():
            return Page

        assert await lazy(load).unwrap() is Page

    async def test_dict_default_unwrapped(self) -> None:
        assert await lazy(lambda: {"default": Page}).unwrap() is Page

    async def test_module_default_unwrapped(self) -> None:
        module = types.SimpleNamespace(default=Page)
        assert await lazy(lambda: module).unwrap() is Page

    async def test_loaded_once(self) -> None:
        calls: list[int] = []

        def load():
            calls.append(1)
            return Page

        handle = lazy(load)
        await handle.unwrap()
        await handle.unwrap()
        assert calls == [1]

    async def test_failure_not_cached(self) -> None:
        attempts: list[int] = []

        def load():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("network down")
            return Page

        handle = lazy(load)
        with pytest.raises(RuntimeError):
            await handle.unwrap()
        assert await handle.unwrap() is Page

    async def test_factory_returns_lazy(self) -> None:
        assert isinstance(lazy(lambda: Page), Lazy)


class TestImportStrings:
    async def test_module_attribute(self) -> None:
        handle = lazy("json:dumps")
        import json

        assert await handle.unwrap() is json.dumps

    async def test_missing_module(self) -> None:
        with pytest.raises(LazyLoadError, match="wren_no_such_module"):
            await lazy("wren_no_such_module:Page").unwrap()

    async def test_missing_attribute(self) -> None:
        with pytest.raises(LazyLoadError, match="no attribute") as exc_info:
            await lazy("json:NoSuchThing").unwrap()
        assert isinstance(exc_info.value.__cause__, AttributeError)

    def test_repr(self) -> None:
        assert repr(lazy("json:dumps")) == "Lazy('json:dumps')"
