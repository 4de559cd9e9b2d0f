"""Tests for wren.routing.url — path splitting and URL construction."""

import pytest

from wren._internal.query import QueryParams
from wren.routing.url import (
    InvalidPathError,
    construct_url,
    normalize_path,
    path_segments,
    split_path,
)


class TestNormalizePath:
    def test_collapses_slashes(self) -> None:
        assert normalize_path("//users///:id") == "/users/:id"

    def test_leaves_clean_path(self) -> None:
        assert normalize_path("/users/:id") == "/users/:id"


class TestPathSegments:
    def test_root(self) -> None:
        assert path_segments("/") == []

    def test_trailing_slash_ignored(self) -> None:
        assert path_segments("/users/42/") == ["users", "42"]

    def test_relative(self) -> None:
        assert path_segments("users/:id") == ["users", ":id"]


class TestSplitPath:
    def test_bare_pathname(self) -> None:
        pathname, query, hash_ = split_path("/users/42")
        assert pathname == "/users/42"
        assert len(query) == 0
        assert hash_ is None

    def test_query_and_hash(self) -> None:
        pathname, query, hash_ = split_path("/search?q=wren&page=2#top")
        assert pathname == "/search"
        assert query["q"] == "wren"
        assert query["page"] == "2"
        assert hash_ == "top"

    def test_hash_fragment_form(self) -> None:
        pathname, _, _ = split_path("#/users/42")
        assert pathname == "/users/42"

    def test_empty_hash_is_root(self) -> None:
        pathname, _, _ = split_path("#")
        assert pathname == "/"

    def test_relative_path_rejected(self) -> None:
        with pytest.raises(InvalidPathError, match="leading"):
            split_path("users/42")

    def test_control_characters_rejected(self) -> None:
        with pytest.raises(InvalidPathError, match="control"):
            split_path("/users/\x00")

    def test_invalid_path_is_value_error(self) -> None:
        assert issubclass(InvalidPathError, ValueError)


class TestConstructUrl:
    def test_fills_params(self) -> None:
        assert construct_url("/users/:id", {"id": "42"}) == "/users/42"

    def test_fills_catch_all(self) -> None:
        assert construct_url("/docs/:rest*", {"rest": "a/b/c"}) == "/docs/a/b/c"

    def test_missing_param_left_alone(self) -> None:
        assert construct_url("/users/:id", {}) == "/users/:id"

    def test_appends_query_and_hash(self) -> None:
        url = construct_url("/search", {}, QueryParams("q=wren"), "results")
        assert url == "/search?q=wren#results"
