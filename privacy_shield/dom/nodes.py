"""Headless document tree.

A small in-memory stand-in for the browser document the shield runs
against: element and text nodes, form-control values, ``contenteditable``
regions, rendered text, host-supplied geometry, a viewport, and the
editing commands needed for undoable text insertion.

Layout is not computed. The host assigns each element's bounding rectangle
(viewport coordinates) through :meth:`Element.set_bounding_client_rect`,
and size changes are reported to resize observers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from privacy_shield.dom.editing import EditEntry, EditHistory, Range, Selection
from privacy_shield.dom.events import Event, EventTarget
from privacy_shield.dom.observers import MutationRecord
from privacy_shield.exceptions import DomError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from privacy_shield.dom.observers import MutationObserver, ResizeObserver

__all__ = [
    "ClassList",
    "ComputedStyle",
    "Document",
    "Element",
    "Node",
    "Rect",
    "Text",
    "Window",
]

_BLOCK_TAGS = frozenset({
    "article", "blockquote", "div", "h1", "h2", "h3", "h4", "h5", "h6",
    "li", "ol", "p", "pre", "section", "tr", "ul",
})


# ---------------------------------------------------------------------------
# Geometry and style
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle in viewport coordinates."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True, slots=True)
class ComputedStyle:
    overflow_y: str = "visible"


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class Node(EventTarget):
    """Common tree behaviour for documents, elements and text."""

    def __init__(self, owner_document: Document | None) -> None:
        super().__init__()
        self.parent: Node | None = None
        self.children: list[Node] = []
        self.owner_document: Document = owner_document  # type: ignore[assignment]

    def _parent_target(self) -> EventTarget | None:
        return self.parent

    # -- structure ---------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        node: Node = self
        while node.parent is not None:
            node = node.parent
        return node is self.owner_document

    def contains(self, other: Node | None) -> bool:
        """True when *other* is this node or one of its descendants."""
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def iter_descendants(self) -> Iterator[Node]:
        """Yield descendants in document order (pre-order)."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_text_nodes(self) -> Iterator[Text]:
        """Yield descendant text nodes in document order."""
        for node in self.iter_descendants():
            if isinstance(node, Text):
                yield node

    def append_child(self, child: Node) -> Node:
        return self.insert_before(child, None)

    def append(self, *children: Node) -> None:
        for child in children:
            self.append_child(child)

    def insert_before(self, child: Node, reference: Node | None) -> Node:
        if isinstance(child, Document):
            raise DomError("a document cannot be inserted into a tree")
        if child.contains(self):
            raise DomError("cannot insert a node into itself or its descendants")
        if reference is not None and reference.parent is not self:
            raise DomError("reference node is not a child of this node")
        if child.parent is not None:
            child.parent.remove_child(child)
        index = len(self.children) if reference is None else self.children.index(reference)
        self.children.insert(index, child)
        child.parent = self
        self.owner_document._record_child_list(self, added=(child,))
        return child

    def remove_child(self, child: Node) -> Node:
        if child.parent is not self:
            raise DomError("node is not a child of this node")
        self.children.remove(child)
        child.parent = None
        self.owner_document._record_child_list(self, removed=(child,))
        return child

    def remove(self) -> None:
        """Detach this node from its parent; a no-op when already detached."""
        if self.parent is not None:
            self.parent.remove_child(self)

    def replace_children(self, *children: Node) -> None:
        for child in list(self.children):
            self.remove_child(child)
        self.append(*children)

    # -- text --------------------------------------------------------------

    @property
    def text_content(self) -> str:
        return "".join(node.data for node in self.iter_text_nodes())

    @text_content.setter
    def text_content(self, value: str) -> None:
        self.replace_children(*([self.owner_document.create_text_node(value)] if value else []))


class Text(Node):
    """A run of character data."""

    def __init__(self, data: str, owner_document: Document) -> None:
        super().__init__(owner_document)
        self.data = data

    @property
    def text_content(self) -> str:
        return self.data

    @text_content.setter
    def text_content(self, value: str) -> None:
        self.data = value

    def __repr__(self) -> str:
        return f"<Text {self.data[:20]!r}>"


class ClassList:
    """Mutable view over an element's ``class`` attribute."""

    __slots__ = ("_element",)

    def __init__(self, element: Element) -> None:
        self._element = element

    def _tokens(self) -> list[str]:
        return self._element.get_attribute("class", "").split()

    def _store(self, tokens: list[str]) -> None:
        self._element.set_attribute("class", " ".join(tokens))

    def __contains__(self, token: str) -> bool:
        return token in self._tokens()

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens())

    def contains(self, token: str) -> bool:
        return token in self

    def add(self, *tokens: str) -> None:
        current = self._tokens()
        self._store(current + [t for t in tokens if t not in current])

    def remove(self, *tokens: str) -> None:
        self._store([t for t in self._tokens() if t not in tokens])

    def toggle(self, token: str) -> bool:
        """Flip *token*; returns True when it is now present."""
        if token in self:
            self.remove(token)
            return False
        self.add(token)
        return True


class Element(Node):
    """An element node.

    Attributes
    ----------
    tag : str
        Lower-case tag name.
    attributes : dict[str, str]
        Raw attributes, including ``class`` and ``contenteditable``.
    dataset : dict[str, str]
        ``data-*`` values keyed by their camel-cased name.
    style : dict[str, str]
        Inline style declarations (CSS property names).
    value : str
        Current value of form controls (``textarea``, ``input``).
    """

    def __init__(
        self,
        tag: str,
        owner_document: Document,
        attributes: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(owner_document)
        self.tag = tag.lower()
        self.attributes: dict[str, str] = dict(attributes or {})
        self.dataset: dict[str, str] = {}
        self.style: dict[str, str] = {}
        self.value = ""
        self._rect = Rect()

    def __repr__(self) -> str:
        classes = self.get_attribute("class")
        suffix = f" class={classes!r}" if classes else ""
        return f"<Element {self.tag}{suffix}>"

    # -- attributes --------------------------------------------------------

    def get_attribute(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    @property
    def class_list(self) -> ClassList:
        return ClassList(self)

    @property
    def class_name(self) -> str:
        return self.get_attribute("class", "")

    @class_name.setter
    def class_name(self, value: str) -> None:
        self.set_attribute("class", value)

    @property
    def is_content_editable(self) -> bool:
        """Whether this element is editable through ``contenteditable``."""
        node: Node | None = self
        while isinstance(node, Element):
            flag = node.get_attribute("contenteditable")
            if flag is not None:
                return flag.lower() in ("", "true", "plaintext-only")
            node = node.parent
        return False

    def iter_elements(self) -> Iterator[Element]:
        for node in self.iter_descendants():
            if isinstance(node, Element):
                yield node

    def ancestors(self) -> Iterator[Element]:
        node = self.parent
        while isinstance(node, Element):
            yield node
            node = node.parent

    # -- rendered text -----------------------------------------------------

    @property
    def inner_text(self) -> str:
        """Rendered text: text nodes joined, ``<br>`` and block boundaries as newlines."""
        parts: list[str] = []
        pending_break = False

        def emit(chunk: str) -> None:
            nonlocal pending_break
            if pending_break and parts and not parts[-1].endswith("\n"):
                parts.append("\n")
            pending_break = False
            parts.append(chunk)

        def walk(node: Node) -> None:
            nonlocal pending_break
            for child in node.children:
                if isinstance(child, Text):
                    if child.data:
                        emit(child.data)
                elif isinstance(child, Element):
                    if child.tag == "br":
                        emit("\n")
                        continue
                    block = child.tag in _BLOCK_TAGS
                    if block:
                        pending_break = True
                    walk(child)
                    if block:
                        pending_break = True

        walk(self)
        return "".join(parts)

    @inner_text.setter
    def inner_text(self, value: str) -> None:
        document = self.owner_document
        nodes: list[Node] = []
        for index, line in enumerate(value.split("\n")):
            if index:
                nodes.append(document.create_element("br"))
            if line:
                nodes.append(document.create_text_node(line))
        self.replace_children(*nodes)

    # -- interaction -------------------------------------------------------

    def focus(self) -> None:
        document = self.owner_document
        if document.active_element is self:
            return
        document.active_element = self
        self.dispatch_event(Event("focus"))

    def click(self) -> None:
        self.dispatch_event(Event("click", bubbles=True))

    # -- geometry ----------------------------------------------------------

    def get_bounding_client_rect(self) -> Rect:
        return self._rect

    def set_bounding_client_rect(self, rect: Rect) -> None:
        """Assign layout geometry; size changes notify resize observers."""
        previous, self._rect = self._rect, rect
        if (previous.width, previous.height) != (rect.width, rect.height):
            self.owner_document._record_resize(self, rect)


class Window(EventTarget):
    """The viewport owning a document."""

    def __init__(self, document: Document, inner_height: float) -> None:
        super().__init__()
        self.document = document
        self.inner_height = inner_height

    def get_computed_style(self, element: Element) -> ComputedStyle:
        style = element.style
        overflow = style.get("overflow", "visible")
        return ComputedStyle(overflow_y=style.get("overflow-y", overflow))

    def get_selection(self) -> Selection:
        return self.document.get_selection()

    def resize(self, inner_height: float) -> None:
        self.inner_height = inner_height
        self.dispatch_event(Event("resize"))

    def scroll(self) -> None:
        """Scroll the document; the host is expected to move element rects."""
        self.document.dispatch_event(Event("scroll", bubbles=True))


class Document(Node):
    """Root of the tree, with ``<html>`` and ``<body>`` created up front."""

    def __init__(self, *, viewport_height: float = 800.0) -> None:
        super().__init__(None)
        self.owner_document = self
        self._mutation_observers: list[MutationObserver] = []
        self._resize_observers: list[ResizeObserver] = []
        self._selection = Selection()
        self._history = EditHistory()
        self.default_view = Window(self, viewport_height)
        self.active_element: Element | None = None
        self.document_element = self.create_element("html")
        self.body = self.create_element("body")
        self.append_child(self.document_element)
        self.document_element.append_child(self.body)

    def _parent_target(self) -> EventTarget | None:
        return self.default_view

    def __repr__(self) -> str:
        return "<Document>"

    # -- factories ---------------------------------------------------------

    def create_element(self, tag: str, attributes: Mapping[str, str] | None = None) -> Element:
        return Element(tag, self, attributes)

    def create_text_node(self, data: str) -> Text:
        return Text(data, self)

    def create_range(self) -> Range:
        return Range()

    def get_selection(self) -> Selection:
        return self._selection

    def query_all(self, predicate: Callable[[Element], bool]) -> list[Element]:
        return [element for element in self.document_element.iter_elements() if predicate(element)]

    # -- editing -----------------------------------------------------------

    @property
    def undo_depth(self) -> int:
        return self._history.depth

    def exec_command(self, command: str, value: str = "") -> bool:
        """Run an editing command against the selection.

        Supported: ``insertText`` (replace the selected range inside one text
        node, recorded in the undo history), ``undo`` and ``redo``. Each
        successful command fires a bubbling ``input`` event on the editing
        host. Returns False when the command could not run.
        """
        if command == "insertText":
            return self._insert_text(value)
        if command in ("undo", "redo"):
            entry = self._history.undo() if command == "undo" else self._history.redo()
            if entry is None:
                return False
            host = self._editing_host(entry.node)
            if host is not None:
                host.dispatch_event(Event("input", bubbles=True))
            return True
        return False

    def _insert_text(self, value: str) -> bool:
        if self._selection.range_count == 0:
            return False
        rng = self._selection.get_range_at(0)
        node = rng.start_container
        if node is None or node is not rng.end_container or not isinstance(node, Text):
            return False
        host = self._editing_host(node)
        if host is None:
            return False
        start, end = sorted((rng.start_offset, rng.end_offset))
        entry = EditEntry(node, start, node.data[start:end], value)
        entry.apply()
        self._history.record(entry)
        rng.collapse_to(node, start + len(value))
        host.dispatch_event(Event("input", bubbles=True, data=value))
        return True

    @staticmethod
    def _editing_host(node: Node) -> Element | None:
        host: Element | None = None
        current = node.parent if isinstance(node, Text) else node
        while isinstance(current, Element) and current.is_content_editable:
            host = current
            current = current.parent
        return host

    # -- observer plumbing -------------------------------------------------

    def _register_mutation_observer(self, observer: MutationObserver) -> None:
        if observer not in self._mutation_observers:
            self._mutation_observers.append(observer)

    def _unregister_mutation_observer(self, observer: MutationObserver) -> None:
        if observer in self._mutation_observers:
            self._mutation_observers.remove(observer)

    def _register_resize_observer(self, observer: ResizeObserver) -> None:
        if observer not in self._resize_observers:
            self._resize_observers.append(observer)

    def _unregister_resize_observer(self, observer: ResizeObserver) -> None:
        if observer in self._resize_observers:
            self._resize_observers.remove(observer)

    def _record_child_list(
        self,
        target: Node,
        *,
        added: tuple[Node, ...] = (),
        removed: tuple[Node, ...] = (),
    ) -> None:
        if not self._mutation_observers:
            return
        record = MutationRecord(target=target, added_nodes=added, removed_nodes=removed)
        for observer in list(self._mutation_observers):
            observer._deliver(record)

    def _record_resize(self, element: Element, rect: Rect) -> None:
        for observer in list(self._resize_observers):
            observer._deliver(element, rect)
