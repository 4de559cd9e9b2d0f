"""In-memory DOM — the rendering collaborator the router writes into.

The router needs very little from a DOM: create elements, set and read
attributes, replace an element's children, and find outlet elements in
document order. This module provides exactly that as plain Python
objects, plus a ``Renderer`` protocol so a different backend (a real
browser bridge, a virtual DOM) can be plugged in.

Component templates are normalized by ``generate_child_nodes``:

- ``None`` / ``False`` -> nothing
- ``str`` / numbers    -> a ``Text`` node
- ``Node``             -> itself
- lists / tuples       -> flattened, in order
"""

import html
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Protocol

from wren._internal.invoke import invoke
from wren.events import Event, EventTarget

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}
)


class Node:
    """Base for everything that can live in a document tree."""

    __slots__ = ("parent",)

    def __init__(self) -> None:
        self.parent: Element | None = None

    @property
    def text_content(self) -> str:
        return ""


class Text(Node):
    __slots__ = ("data",)

    def __init__(self, data: str) -> None:
        super().__init__()
        self.data = data

    @property
    def text_content(self) -> str:
        return self.data

    def __repr__(self) -> str:
        return f"Text({self.data!r})"


class Element(Node, EventTarget):
    """An element with attributes, children and event listeners.

    Attribute values are strings; boolean attributes are stored as ``""``.
    """

    __slots__ = ("attributes", "children", "tag")

    def __init__(
        self,
        tag: str,
        attributes: Mapping[str, Any] | None = None,
        children: Any = None,
    ) -> None:
        Node.__init__(self)
        EventTarget.__init__(self)
        self.tag = tag
        self.attributes: dict[str, str] = {}
        self.children: list[Node] = []
        for name, value in (attributes or {}).items():
            self.set_attribute(name, value)
        if children is not None:
            self.replace_children(*generate_child_nodes(children))

    # -- Attributes --

    def set_attribute(self, name: str, value: Any) -> None:
        if value is None or value is False:
            self.attributes.pop(name, None)
        elif value is True:
            self.attributes[name] = ""
        else:
            self.attributes[name] = str(value)

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def toggle_attribute(self, name: str, force: bool | None = None) -> bool:
        present = name in self.attributes if force is None else not force
        if present:
            self.attributes.pop(name, None)
            return False
        self.attributes[name] = ""
        return True

    # -- Children --

    def replace_children(self, *nodes: Node) -> None:
        for child in self.children:
            child.parent = None
        self.children = []
        self.append(*nodes)

    def append(self, *nodes: Node) -> None:
        for node in nodes:
            if node.parent is not None:
                node.parent.children.remove(node)
            node.parent = self
            self.children.append(node)

    def iter(self) -> Iterator["Element"]:
        """Yield this element and every descendant element, in document order."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()

    def query_all(
        self,
        tag: str | None = None,
        attrs: Mapping[str, str | None] | None = None,
    ) -> list["Element"]:
        """Descendant elements matching *tag* and *attrs*, in document order.

        An attribute mapped to ``None`` only has to be present.
        """
        found = []
        for element in self.iter():
            if element is self:
                continue
            if tag is not None and element.tag != tag:
                continue
            if attrs and not all(
                element.attributes.get(name) == value
                if value is not None
                else name in element.attributes
                for name, value in attrs.items()
            ):
                continue
            found.append(element)
        return found

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.children)

    # -- Events --

    async def click(self) -> bool:
        """Dispatch a cancelable ``click``. Returns ``False`` if prevented."""
        return await self.dispatch_event(Event("click", cancelable=True, target=self))

    def __repr__(self) -> str:
        return f"<{self.tag} {self.attributes!r}>"


class Document:
    """A document: a ``<html>`` root with a ``<body>`` and a title."""

    __slots__ = ("body", "document_element", "title")

    def __init__(self, title: str = "") -> None:
        self.document_element = Element("html")
        self.body = Element("body")
        self.document_element.append(self.body)
        self.title = title

    def create_element(self, tag: str, attributes: Mapping[str, Any] | None = None) -> Element:
        return Element(tag, attributes)

    def create_text_node(self, data: str) -> Text:
        return Text(data)

    def query_all(
        self,
        tag: str | None = None,
        attrs: Mapping[str, str | None] | None = None,
    ) -> list[Element]:
        return self.document_element.query_all(tag, attrs)


def generate_child_nodes(template: Any) -> list[Node]:
    """Normalize a component's return value into a flat list of nodes."""
    if template is None or template is False or template is True:
        return []
    if isinstance(template, Node):
        return [template]
    if isinstance(template, (str, int, float)):
        return [Text(str(template))]
    if isinstance(template, Iterable):
        nodes: list[Node] = []
        for item in template:
            nodes.extend(generate_child_nodes(item))
        return nodes
    return [Text(str(template))]


class Renderer(Protocol):
    """What the router needs from a rendering backend."""

    async def render(self, component: Any, props: Mapping[str, Any]) -> list[Node]: ...

    def replace_children(self, outlet: Element, nodes: list[Node]) -> None: ...


class DOMRenderer:
    """Renders components straight into the in-memory DOM."""

    __slots__ = ("document",)

    def __init__(self, document: Document) -> None:
        self.document = document

    async def render(self, component: Any, props: Mapping[str, Any]) -> list[Node]:
        return generate_child_nodes(await invoke(component, **props))

    def replace_children(self, outlet: Element, nodes: list[Node]) -> None:
        outlet.replace_children(*nodes)


def serialize(nodes: Node | Iterable[Node]) -> str:
    """Serialize nodes to HTML. Text and attribute values are escaped."""
    if isinstance(nodes, Node):
        nodes = [nodes]
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(html.escape(node.data, quote=False))
        elif isinstance(node, Element):
            attrs = "".join(
                f" {name}" if value == "" else f' {name}="{html.escape(value)}"'
                for name, value in node.attributes.items()
            )
            if node.tag in VOID_ELEMENTS:
                parts.append(f"<{node.tag}{attrs}>")
            else:
                parts.append(f"<{node.tag}{attrs}>{serialize(node.children)}</{node.tag}>")
    return "".join(parts)
