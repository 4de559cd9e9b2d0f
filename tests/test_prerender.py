"""Tests for wren.prerender — static HTML rendering of one path."""

from wren.browser import Window
from wren.router import Outlet, Router, create_web_router
from wren.prerender import render_static


def Layout() -> list:
    return ["layout:", Outlet()]


def Users() -> str:
    return "users <list>"


ROUTES = [
    {
        "path": "/",
        "title": "Home",
        "component": Layout,
        "children": [{"path": "users", "title": "Users", "component": Users}],
    }
]


class TestRenderStatic:
    async def test_document_shell(self) -> None:
        html = await render_static(ROUTES, "/users")
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Users</title>" in html
        assert "layout:" in html
        assert "users &lt;list&gt;" in html

    async def test_outlets_marked_static(self) -> None:
        html = await render_static(ROUTES, "/users")
        assert html.count("data-static") == 2
        assert 'data-path="/users"' in html

    async def test_title_override(self) -> None:
        html = await render_static(ROUTES, "/users", title="Custom")
        assert "<title>Custom</title>" in html

    async def test_not_found(self) -> None:
        html = await render_static(ROUTES, "/missing")
        assert "Route not found: /missing" in html

    async def test_factory_keeps_its_outlet(self) -> None:
        def factory(window: Window) -> Router:
            router = create_web_router(routes=ROUTES, window=window)
            window.document.body.append(router.Outlet(id="app"))
            return router

        html = await render_static(factory, "/")
        assert html.count('id="app"') == 1
        assert "layout:" in html


class TestHydration:
    async def test_client_router_takes_over_static_outlet(self) -> None:
        """A client router clears the static mark and renders into the outlet."""
        calls: list[str] = []

        def Page() -> str:
            calls.append("page")
            return "client"

        router = create_web_router(routes=[{"path": "/", "component": Page}])
        outlet = router.Outlet()
        outlet.set_attribute("data-static", True)
        router.window.document.body.append(outlet)
        await router.navigate("/")
        assert calls == ["page"]
        assert not outlet.has_attribute("data-static")
