"""Router — the navigation engine.

Owns the compiled route tree, the middleware list and the live mapping
from a matched route chain to outlet elements. Every navigation runs
the same settle sequence:

1. match the path and flatten transient links
2. run middlewares in order (a redirect hands the next hop back to
   ``load_path``)
3. walk the matched chain, rendering each level into the outlet at its
   depth and skipping outlets that already show that path
4. clear outlets deeper than the chain, commit ``current_path``

Soft failures (no matching route, a dead-end route, too many redirects)
never raise. They are logged, dispatched as ``routeerror`` and leave the
page in a consistent state. Exceptions from lazy imports, middlewares
and components propagate out of ``navigate()``.

Each navigation takes a generation number. A navigation that has been
overtaken by a newer one is abandoned before it writes an outlet,
commits ``current_path`` or touches history.
"""

import dataclasses
import json
import logging
import uuid
import weakref
from collections import OrderedDict
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import urlsplit

import anyio

from wren._internal.invoke import invoke
from wren.browser import Window, attach_window_listeners
from wren.config import RouterConfig
from wren.context import outlet_depth_var, router_var, use_router
from wren.dom import DOMRenderer, Element, Node, Renderer, Text, generate_child_nodes
from wren.errors import RouterError
from wren.events import (
    EventTarget,
    RouteLoadCompleted,
    before_navigate_event,
    route_change_event,
    route_error_event,
    route_load_completed_event,
    route_lock_prevented_event,
)
from wren.middleware.protocol import (
    NavigationDetails,
    RedirectResponse,
    RouteData,
    callback_of,
)
from wren.routing.lazy import Lazy
from wren.routing.record import RouteRecord
from wren.routing.route import MatchedRoute, MatchResult
from wren.routing.tree import RouteTree
from wren.routing.url import InvalidPathError, construct_url, path_segments, split_path

logger = logging.getLogger("wren.router")

DEPTH_ATTRIBUTE = "data-outlet-depth"
PATH_ATTRIBUTE = "data-path"


def _strip_html(path: str) -> str:
    root, sep, query = path.partition("?")
    if root.endswith(".html"):
        root = root[: -len(".html")]
    return f"{root}{sep}{query}"


def _full_path(pathname: str, result: MatchResult) -> str:
    return construct_url(pathname, {}, result.search_query_params, result.hash)


def canonical_path(path: str) -> str:
    """Normalize a navigation target for comparison.

    Collapses slashes, drops a trailing slash and re-encodes the query,
    so ``/users/42/?a=1`` and ``/users/42?a=1`` compare equal. Paths that
    cannot be parsed are returned unchanged.
    """
    try:
        pathname, query, hash_ = split_path(path)
    except InvalidPathError:
        return path
    return construct_url("/" + "/".join(path_segments(pathname)), {}, query, hash_)


def _is_external(href: str) -> bool:
    return bool(urlsplit(href).scheme)


def _attribute_name(name: str) -> str:
    # class_ -> class, data_id -> data-id
    return name.rstrip("_").replace("_", "-")


class _KeepAliveCache:
    """Nodes of previously rendered paths for one outlet, least recently used first."""

    __slots__ = ("_entries", "max_size")

    def __init__(self, max_size: int) -> None:
        self.max_size = max_size
        self._entries: OrderedDict[str, list[Node]] = OrderedDict()

    def take(self, path: str) -> list[Node] | None:
        return self._entries.pop(path, None)

    def store(self, path: str, nodes: list[Node]) -> None:
        self._entries[path] = nodes
        self._entries.move_to_end(path)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class Router(EventTarget):
    """Client-side router bound to one window.

    Prefer ``create_web_router()``, which also attaches a headless
    ``Window`` when none is given.

    Attributes:
        params: Params of the latest match, readable by rendering components.
        current_path: Snapshot of the last successfully rendered route.
        redirect_stack_count: Redirect budget in use; increments per
            redirect hop, decrements on every successful settle.
        is_loading: Set while a browser event (popstate, load, ...) is
            being handled; further browser events are ignored meanwhile.
    """

    def __init__(
        self,
        routes: Sequence[RouteRecord | dict[str, Any]],
        *,
        middlewares: Sequence[Any] = (),
        max_redirects: int | None = None,
        config: RouterConfig | None = None,
        window: Window | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        super().__init__()
        config = config if config is not None else RouterConfig()
        if max_redirects is not None:
            config = dataclasses.replace(config, max_redirects=max_redirects)
        self.config = config
        self.id = uuid.uuid4().hex
        self.route_tree = RouteTree.from_records(routes)
        self.middlewares = list(middlewares)
        self.max_redirects = config.max_redirects
        self.stack_mode = config.stack_mode
        self.redirect_stack_count = 0
        self.params: dict[str, str] = {}
        self.current_path: RouteData | None = None
        self.is_loading = False
        self.links: weakref.WeakSet[Element] = weakref.WeakSet()
        self.router_history: list[str] = []
        self.window: Window | None = None
        self.renderer = renderer
        self._generation = 0
        self._last_transition_type: str | None = None
        self._locked_path: str | None = None
        self._displayed_path: str | None = None
        self._in_flight = 0
        self._keep_alive: weakref.WeakKeyDictionary[Element, _KeepAliveCache] = (
            weakref.WeakKeyDictionary()
        )
        self._detach: Callable[[], None] | None = None
        if window is not None:
            self.set_window(window)

    # -- Window --

    def set_window(self, window: Window) -> None:
        """Attach *window*, replacing (and detaching from) any previous one."""
        if self._detach is not None:
            self._detach()
        self.window = window
        if self.renderer is None or isinstance(self.renderer, DOMRenderer):
            self.renderer = DOMRenderer(window.document)
        self._detach = attach_window_listeners(self, window)

    def _require_window(self) -> Window:
        if self.window is None:
            msg = "Router has no window attached. Pass window= or call set_window() first."
            raise RouterError(msg)
        return self.window

    # -- Public navigation --

    async def navigate(self, path: str) -> None:
        """Navigate to *path* and push a history entry. Returns once settled."""
        if path == "#":
            return
        if not await self._assert_not_locked(path):
            return
        await self.load_path(path, True)

    async def replace(self, path: str) -> None:
        """Like ``navigate()``, but replaces the current history entry."""
        if path == "#":
            return
        if not await self._assert_not_locked(path):
            return
        await self.load_path(path, True, replace=True)

    async def back(self) -> None:
        """Go back one history entry.

        Delegates to the window's history; the ``popstate`` binding
        re-enters ``load_path``.
        """
        window = self._require_window()
        previous = self.router_history[-2] if len(self.router_history) > 1 else ""
        if not await self._assert_not_locked(previous):
            return
        await window.history.back()

    def lock(self) -> None:
        """Refuse every navigation until ``unlock()``.

        Refused attempts dispatch ``routelockprevented``; browser-driven
        ones also have their URL restored to the locked path.
        """
        if self.current_path is not None:
            self._locked_path = self.current_path.full_path
        else:
            self._locked_path = canonical_path(self._require_window().location.full_path)

    def unlock(self) -> None:
        self._locked_path = None

    @property
    def is_locked(self) -> bool:
        return self._locked_path is not None

    def get_current_route(self) -> RouteData | None:
        """Return a copy of the current route snapshot."""
        if self.current_path is None:
            return None
        return dataclasses.replace(
            self.current_path,
            params=dict(self.current_path.params),
            metadata=dict(self.current_path.metadata),
        )

    async def load_path(
        self,
        path: str,
        should_push_history: bool = False,
        event: Any = None,
        *,
        replace: bool = False,
    ) -> None:
        """Load *path* into the outlets.

        A no-op when *path* is already displayed and no other navigation
        is in flight. Otherwise runs the settle routine, refreshes active
        links and, if something was loaded and *should_push_history* is
        set, updates window history. Redirects are followed hop by hop in
        this loop, and every hop updates history (replacing the entry when
        *replace* is set).
        """
        while True:
            redirect_to = await self._load_once(path, should_push_history, event, replace)
            if redirect_to is None or redirect_to == "#":
                return
            path, should_push_history, event = redirect_to, True, None

    async def _load_once(
        self, path: str, should_push_history: bool, event: Any, replace: bool
    ) -> str | None:
        path = _strip_html(path)
        target = canonical_path(path)
        if self._locked_path is not None and target != self._locked_path:
            await self._assert_not_locked(path)
            return None
        if self._displayed_path == target:
            if not self._in_flight:
                return None
            # Overtake the navigation in flight; the URL still shows target.
            should_push_history = False

        window = self._require_window()
        from_ = self.current_path.full_path if self.current_path is not None else None
        if not await self.dispatch_event(before_navigate_event(from_, target)):
            logger.debug("Navigation to %s cancelled by beforenavigate", target)
            return None

        if event is not None:
            logger.debug("Loading %s (triggered by %s)", target, getattr(event, "type", event))
        generation = self._next_generation()
        old_history_length = len(self.router_history)
        self._in_flight += 1
        try:
            loaded, redirect_to = await self._settle(path, generation)
        finally:
            self._in_flight -= 1
        new_history_length = len(self.router_history)

        self._update_links()
        if redirect_to is not None:
            return redirect_to
        if not loaded or not self._is_current(generation):
            return None

        if should_push_history:
            if self.stack_mode and new_history_length < old_history_length:
                await window.history.back()
            elif self.stack_mode and new_history_length == old_history_length:
                pass
            elif replace:
                window.history.replace_state(None, "", target)
            else:
                window.history.push_state(None, "", target)

        await self.dispatch_event(
            route_load_completed_event(
                RouteLoadCompleted(
                    full_path=self.current_path.full_path if self.current_path else target,
                    title=window.document.title,
                    old_history_length=old_history_length,
                    new_history_length=new_history_length,
                    replace=replace,
                    transition_type=self._last_transition_type,
                )
            )
        )
        await anyio.sleep(0)
        return None

    # -- Settle routine --

    async def update_dom_with_matching_path(
        self, path: str, generation: int | None = None
    ) -> bool:
        """Match *path*, run middlewares and render the chain into outlets.

        Returns whether anything was loaded. ``False`` means the
        navigation was redirected, aborted, cancelled or overtaken. A
        redirect is followed with ``navigate()`` before returning.
        """
        loaded, redirect_to = await self._settle(path, generation)
        if redirect_to is not None:
            await self.navigate(redirect_to)
        return loaded

    async def _settle(
        self, path: str, generation: int | None = None
    ) -> tuple[bool, str | None]:
        """Run one settle pass. Returns ``(loaded, redirect target or None)``."""
        if path == "#":
            return False, None
        window = self._require_window()
        if generation is None:
            generation = self._next_generation()

        result = await self.route_tree.match(path)
        result.flatten_transient_routes()
        self.params = result.params

        leaf = result.leaf()
        if leaf is not None:
            response = await self._run_middlewares(path, result, leaf)
            if response is not None:
                return False, await self._take_redirect(path, response.path)

        if result.sub_tree is None or leaf is None:
            logger.warning("No route matches path: %s", path)
            return await self._render_not_found(self._find_outlet(0), path, generation), None

        from_ = self.current_path.full_path if self.current_path is not None else None
        target = _full_path(leaf.full_path, result)
        if not await self.dispatch_event(route_change_event(from_, target)):
            logger.debug("Navigation to %s cancelled by routechange", target)
            return False, None

        node: MatchedRoute | None = result.sub_tree
        depth = 0
        while node is not None:
            if node.component is None:
                if node.title:
                    self._set_title(window, node.title)
                if node.child is not None:
                    # Grouping level: renders nothing, consumes no outlet.
                    node = node.child
                    continue
                if node.redirect is not None and canonical_path(node.redirect) != canonical_path(path):
                    return False, await self._take_redirect(path, node.redirect)

            outlet = self._find_outlet(depth)
            if outlet is None:
                logger.debug("No outlet at depth %d for %s", depth, node.full_path)
                break

            if outlet.has_attribute(self.config.static_attribute):
                outlet.remove_attribute(self.config.static_attribute)
                outlet.remove_attribute(PATH_ATTRIBUTE)

            if node.component is None:
                logger.warning("No component for route %s (path %s)", node.path, path)
                return await self._render_not_found(outlet, path, generation), None

            if outlet.get_attribute(PATH_ATTRIBUTE) == node.full_path:
                logger.debug("Outlet at depth %d already shows %s", depth, node.full_path)
            elif not await self._render_level(outlet, node, depth, generation):
                return False, None

            depth += 1
            node = node.child

        for spare in self._outlets_from(depth):
            if not self._is_current(generation):
                return False, None
            spare.remove_attribute(PATH_ATTRIBUTE)
            self._renderer().replace_children(spare, [])

        if leaf.redirect is not None and canonical_path(leaf.redirect) != canonical_path(path):
            redirect_to = await self._take_redirect(path, leaf.redirect)
            if redirect_to is not None:
                return False, redirect_to

        if not self._is_current(generation):
            logger.debug("Abandoning stale navigation to %s", path)
            return False, None

        full_path = _full_path(leaf.full_path, result)
        if self.stack_mode:
            self._record_stack_entry(full_path)
        self.current_path = RouteData(
            name=leaf.name,
            path=leaf.path,
            full_path=full_path,
            params=dict(result.params),
            query=result.search_query_params,
            hash=result.hash,
            metadata=dict(result.metadata),
        )
        self._displayed_path = canonical_path(full_path)
        self._last_transition_type = leaf.transition_type
        if self.redirect_stack_count > 0:
            self.redirect_stack_count -= 1
        return True, None

    async def _render_level(
        self, outlet: Element, node: MatchedRoute, depth: int, generation: int
    ) -> bool:
        component = node.component
        if isinstance(component, Lazy):
            component = await component.unwrap()
        if not self._is_current(generation):
            return False

        previous_path = outlet.get_attribute(PATH_ATTRIBUTE)
        outlet.set_attribute(PATH_ATTRIBUTE, node.full_path)
        cache = self._keep_alive.get(outlet)
        nodes = cache.take(node.full_path) if cache is not None else None
        if nodes is None:
            try:
                nodes = await self._render(component, depth)
            except BaseException:
                self._release_outlet(outlet, node.full_path, previous_path)
                raise

        # The component may have navigated elsewhere while rendering.
        if not self._is_current(generation):
            logger.debug("Abandoning stale render of %s", node.full_path)
            self._release_outlet(outlet, node.full_path, previous_path)
            return False
        if outlet.get_attribute(PATH_ATTRIBUTE) != node.full_path:
            logger.debug("Outlet for %s was claimed while rendering", node.full_path)
            return False

        if cache is not None and previous_path and outlet.children:
            cache.store(previous_path, list(outlet.children))
        self._renderer().replace_children(outlet, nodes)
        if node.title:
            self._set_title(self._require_window(), node.title)
        return True

    @staticmethod
    def _release_outlet(outlet: Element, path: str, previous_path: str | None) -> None:
        # Content was never replaced, so the tag goes back to what is shown.
        if outlet.get_attribute(PATH_ATTRIBUTE) == path:
            outlet.set_attribute(PATH_ATTRIBUTE, previous_path)

    async def _render(self, component: Any, depth: int) -> list[Node]:
        router_token = router_var.set(self)
        depth_token = outlet_depth_var.set(depth + 1)
        try:
            return await self._renderer().render(component, {})
        finally:
            outlet_depth_var.reset(depth_token)
            router_var.reset(router_token)

    async def _render_not_found(self, outlet: Element | None, path: str, generation: int) -> bool:
        message = self.config.not_found_text.format(path=path)
        if not self._is_current(generation):
            return False
        if outlet is not None:
            outlet.remove_attribute(PATH_ATTRIBUTE)
            self._renderer().replace_children(outlet, [Text(message)])
        self._displayed_path = canonical_path(path)
        await self.dispatch_event(route_error_event(message, path))
        return True

    # -- Middleware and redirects --

    async def _run_middlewares(
        self, path: str, result: MatchResult, leaf: MatchedRoute
    ) -> RedirectResponse | None:
        details = NavigationDetails(
            from_=self.current_path,
            to=RouteData(
                name=leaf.name,
                path=leaf.path,
                full_path=_full_path(leaf.full_path, result),
                params=dict(result.params),
                query=result.search_query_params,
                hash=result.hash,
                metadata=dict(result.metadata),
            ),
        )
        for middleware in self.middlewares:
            response = await invoke(callback_of(middleware), details)
            if not isinstance(response, RedirectResponse) or response.type != "redirect":
                continue
            if canonical_path(response.path) == canonical_path(path):
                logger.debug("Ignoring redirect from %s to itself", path)
                continue
            return response
        return None

    async def _take_redirect(self, source: str, target: str) -> str | None:
        """Spend one hop of the redirect budget on *target*.

        Returns the target to load next, or ``None`` once the budget is
        exhausted and the navigation is aborted.
        """
        if self.redirect_stack_count > self.max_redirects:
            message = (
                f"Your router redirected too many times ({self.max_redirects}). "
                "This is probably due to a circular redirect in your route configuration."
            )
            logger.warning("%s Last attempt: %s -> %s", message, source, target)
            self.redirect_stack_count = 0
            await self.dispatch_event(route_error_event(message, source))
            return None
        self.redirect_stack_count += 1
        logger.debug("Redirecting %s -> %s (%d)", source, target, self.redirect_stack_count)
        return target

    # -- Outlets and links --

    def outlets(self) -> list[Element]:
        """Outlets owned by this router, in document order."""
        window = self._require_window()
        return window.document.query_all(
            self.config.outlet_tag, {self.config.outlet_attribute: self.id}
        )

    def _find_outlet(self, depth: int) -> Element | None:
        for outlet in self.outlets():
            if outlet.get_attribute(DEPTH_ATTRIBUTE) == str(depth):
                return outlet
        return None

    def _outlets_from(self, depth: int) -> list[Element]:
        spares = []
        for outlet in self.outlets():
            value = outlet.get_attribute(DEPTH_ATTRIBUTE) or "0"
            if value.isdigit() and int(value) >= depth:
                spares.append(outlet)
        return spares

    def _update_links(self) -> None:
        full_path = self.current_path.full_path if self.current_path is not None else None
        for link in list(self.links):
            self._toggle_active(link, full_path)

    @staticmethod
    def _toggle_active(link: Element, full_path: str | None) -> None:
        href = link.get_attribute("data-href")
        link.toggle_attribute("active", bool(full_path and href and href.startswith(full_path)))

    def Outlet(  # noqa: N802
        self,
        *,
        keep_alive: bool = False,
        max_keep_alive_count: int | None = None,
        children: Any = None,
        **attrs: Any,
    ) -> Element:
        """Create an outlet element for the route level being rendered.

        Extra keyword arguments become attributes (``class_="main"``).
        With *keep_alive*, nodes of previously shown paths are cached
        and reused instead of rendering the component again.
        """
        window = self._require_window()
        outlet = window.document.create_element(self.config.outlet_tag)
        for name, value in attrs.items():
            outlet.set_attribute(_attribute_name(name), value)
        outlet.set_attribute(self.config.outlet_attribute, self.id)
        outlet.set_attribute(DEPTH_ATTRIBUTE, outlet_depth_var.get())
        if keep_alive:
            outlet.set_attribute("data-keep-alive", True)
            size = max_keep_alive_count or self.config.keep_alive_default_size
            self._keep_alive[outlet] = _KeepAliveCache(size)
        if children is not None:
            outlet.replace_children(*generate_child_nodes(children))
        return outlet

    def Link(  # noqa: N802
        self,
        *,
        href: str,
        children: Any = None,
        replace: bool = False,
        **attrs: Any,
    ) -> Element:
        """Create an anchor that navigates through the router when clicked.

        Absolute URLs (with a scheme) are left to the browser. The
        ``active`` attribute is owned by the router.
        """
        window = self._require_window()
        link = window.document.create_element("a")
        for name, value in attrs.items():
            if _attribute_name(name) != "active":
                link.set_attribute(_attribute_name(name), value)
        link.set_attribute("href", href)
        link.set_attribute("data-href", href)
        if children is not None:
            link.replace_children(*generate_child_nodes(children))

        async def on_click(event: Any) -> None:
            if _is_external(href):
                return
            event.prevent_default()
            if replace:
                await self.replace(href)
            else:
                await self.navigate(href)

        link.add_event_listener("click", on_click)
        self.links.add(link)
        self._toggle_active(link, self.current_path.full_path if self.current_path else None)
        return link

    # -- Internals --

    def _renderer(self) -> Renderer:
        if self.renderer is None:
            self.renderer = DOMRenderer(self._require_window().document)
        return self.renderer

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _set_title(self, window: Window, title: str) -> None:
        window.document.title = title

    def _record_stack_entry(self, full_path: str) -> None:
        if len(self.router_history) > 1 and self.router_history[-2] == full_path:
            self.router_history.pop()
        elif not self.router_history or self.router_history[-1] != full_path:
            self.router_history.append(full_path)
        else:
            return
        self._persist_history()

    def _persist_history(self) -> None:
        if self.window is None:
            return
        self.window.session_storage.set_item(
            self.config.history_storage_key, json.dumps(self.router_history)
        )

    async def _assert_not_locked(self, path: str) -> bool:
        if self._locked_path is None:
            return True
        logger.debug("Router locked to %s, refusing %s", self._locked_path, path)
        await self.dispatch_event(route_lock_prevented_event(self._locked_path, path))
        return False

    def __repr__(self) -> str:
        current = self.current_path.full_path if self.current_path else None
        return f"Router(id={self.id[:8]!r}, current={current!r})"


def create_web_router(
    routes: Sequence[RouteRecord | dict[str, Any]],
    *,
    middlewares: Sequence[Any] | None = None,
    max_redirects: int | None = None,
    config: RouterConfig | None = None,
    window: Window | None = None,
    renderer: Renderer | None = None,
) -> Router:
    """Create a router bound to *window* (a fresh headless ``Window`` by default).

    Back/forward, hash changes and page load are wired to the router.
    Explicit *max_redirects* overrides the one in *config*.
    """
    return Router(
        routes,
        middlewares=middlewares or (),
        max_redirects=max_redirects,
        config=config,
        window=window if window is not None else Window(),
        renderer=renderer,
    )


def Outlet(**props: Any) -> Element:  # noqa: N802
    """Create an outlet on the router rendering the current component."""
    return use_router().Outlet(**props)


def Link(**props: Any) -> Element:  # noqa: N802
    """Create a link on the router rendering the current component."""
    return use_router().Link(**props)
