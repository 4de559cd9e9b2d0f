"""Tests for MatchResult.collect_metadata — metadata inheritance down the chain."""

from wren.routing.route import MetadataOptions
from wren.routing.tree import RouteTree


def Admin() -> str:
    return "admin"


def Users() -> str:
    return "users"


def Profile() -> str:
    return "profile"


Profile.metadata = {"kind": "profile", "section": "Embedded"}  # type: ignore[attr-defined]


class TestMetadataInheritance:
    async def test_parent_and_child_keys_merged(self) -> None:
        tree = RouteTree.from_records(
            [
                {
                    "path": "/admin",
                    "component": Admin,
                    "metadata": {"section": "Admin"},
                    "children": [
                        {"path": "users", "component": Users, "metadata": {"title": "Users"}},
                    ],
                }
            ]
        )
        result = await tree.match("/admin/users")
        assert result.metadata == {"section": "Admin", "title": "Users"}

    async def test_child_overrides_parent(self) -> None:
        tree = RouteTree.from_records(
            [
                {
                    "path": "/admin",
                    "component": Admin,
                    "metadata": {"section": "Admin"},
                    "children": [
                        {"path": "users", "component": Users, "metadata": {"section": "People"}},
                    ],
                }
            ]
        )
        result = await tree.match("/admin/users")
        assert result.metadata == {"section": "People"}

    async def test_parent_only_for_parent_path(self) -> None:
        tree = RouteTree.from_records(
            [
                {
                    "path": "/admin",
                    "component": Admin,
                    "metadata": {"section": "Admin"},
                    "children": [
                        {"path": "users", "component": Users, "metadata": {"title": "Users"}},
                    ],
                }
            ]
        )
        result = await tree.match("/admin")
        assert result.metadata == {"section": "Admin"}


class TestMetadataFunctions:
    async def test_sync_function_receives_params_and_query(self) -> None:
        seen: list[MetadataOptions] = []

        def metadata(options: MetadataOptions) -> dict:
            seen.append(options)
            return {"user": options.params["id"], "tab": options.query.get("tab")}

        tree = RouteTree.from_records(
            [{"path": "/users/:id", "component": Users, "metadata": metadata}]
        )
        result = await tree.match("/users/42?tab=posts")
        assert result.metadata == {"user": "42", "tab": "posts"}
        assert len(seen) == 1

    async def test_async_function(self) -> None:
        async def metadata(options: MetadataOptions) -> dict:
            return {"loaded": True}

        tree = RouteTree.from_records([{"path": "/a", "component": Users, "metadata": metadata}])
        result = await tree.match("/a")
        assert result.metadata == {"loaded": True}


class TestComponentMetadata:
    async def test_component_metadata_applied_after_route_metadata(self) -> None:
        tree = RouteTree.from_records(
            [{"path": "/me", "component": Profile, "metadata": {"section": "Route", "extra": 1}}]
        )
        result = await tree.match("/me")
        assert result.metadata == {"section": "Embedded", "extra": 1, "kind": "profile"}
