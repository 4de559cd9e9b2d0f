"""Tests for wren.cli — entrypoint, argument parsing and the subcommands."""

import sys
import types

import pytest

from wren.cli import main
from wren.cli._resolve import resolve_routes
from wren.routing.lazy import lazy


def Home() -> str:
    return "home"


def UserPage() -> str:
    return "user"


@pytest.fixture
def _fake_routes_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with route records on sys.modules."""
    mod = types.ModuleType("_fake_wren_routes")
    mod.routes = [  # type: ignore[attr-defined]
        {
            "path": "/",
            "name": "home",
            "title": "Home",
            "component": Home,
            "children": [{"path": "users/:id", "name": "user", "component": UserPage}],
        },
        {"path": "/old", "redirect": "/"},
        {"path": "/docs", "component": lazy("_fake_wren_routes:Home")},
    ]
    mod.Home = Home  # type: ignore[attr-defined]
    mod.factory = lambda: mod.routes  # type: ignore[attr-defined]
    mod.broken = lambda: 1 / 0  # type: ignore[attr-defined]
    mod.empty = []  # type: ignore[attr-defined]
    mod.not_routes = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_wren_routes", mod)


class TestCLIHelp:
    @pytest.mark.parametrize("argv", [["--help"], ["routes", "--help"], ["match", "--help"], ["render", "--help"]])
    def test_help_exits_zero(self, argv: list[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    @pytest.mark.parametrize("argv", [["routes"], ["match", "x:routes"], ["render"]])
    def test_missing_args_exit_two(self, argv: list[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 2


class TestCLINoCommand:
    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "wren" in capsys.readouterr().out


@pytest.mark.usefixtures("_fake_routes_module")
class TestResolveRoutes:
    def test_explicit_attribute(self) -> None:
        assert len(resolve_routes("_fake_wren_routes:routes")) == 3

    def test_default_attribute(self) -> None:
        assert len(resolve_routes("_fake_wren_routes")) == 3

    def test_factory(self) -> None:
        assert len(resolve_routes("_fake_wren_routes:factory")) == 3

    def test_factory_error(self) -> None:
        with pytest.raises(TypeError, match="raised an error"):
            resolve_routes("_fake_wren_routes:broken")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match="not a list of route records"):
            resolve_routes("_fake_wren_routes:not_routes")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_routes("nonexistent_module_xyz:routes")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_routes("_fake_wren_routes:does_not_exist")


@pytest.mark.usefixtures("_fake_routes_module")
class TestRoutesCommand:
    def test_prints_tree(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_wren_routes:routes"])
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0].split() == ["PATH", "NAME", "FLAGS", "COMPONENT"]
        assert any(line.startswith("    /users/:id") and "dynamic" in line for line in lines)
        assert any(line.startswith("  /users ") and "transient" in line for line in lines)
        assert "redirect=/" in out
        assert "lazy(_fake_wren_routes:Home)" in out

    def test_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_wren_routes:empty"])
        assert "No routes registered." in capsys.readouterr().out

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "nonexistent_module_xyz"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


@pytest.mark.usefixtures("_fake_routes_module")
class TestMatchCommand:
    def test_prints_chain_and_params(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", "_fake_wren_routes:routes", "/users/42?tab=posts#bio"])
        out = capsys.readouterr().out
        assert "/ -> /  Home  [home]" in out
        assert "  /users/:id -> /users/42  UserPage  [user]" in out
        assert "params:   {'id': '42'}" in out
        assert "query:    tab=posts" in out
        assert "hash:     bio" in out

    def test_no_match_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", "_fake_wren_routes:routes", "/nowhere"])
        assert exc_info.value.code == 1
        assert "No route matches /nowhere" in capsys.readouterr().err


@pytest.mark.usefixtures("_fake_routes_module")
class TestRenderCommand:
    def test_prints_document(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["render", "_fake_wren_routes:routes", "/", "--title", "Static"])
        out = capsys.readouterr().out
        assert "<title>Static</title>" in out
        assert ">home</div>" in out

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["render", "nonexistent_module_xyz", "/"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err
