"""Tree-mutation and element-resize observation.

Records are delivered synchronously, right after the tree change or size
change that produced them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from privacy_shield.dom.nodes import Element, Node, Rect

__all__ = [
    "MutationObserver",
    "MutationRecord",
    "ResizeObserver",
    "ResizeObserverEntry",
]


@dataclass(frozen=True, slots=True)
class MutationRecord:
    """A child-list change on ``target``."""

    target: Node
    added_nodes: tuple[Node, ...] = ()
    removed_nodes: tuple[Node, ...] = ()
    type: str = "childList"


class MutationObserver:
    """Reports child-list changes under the observed nodes."""

    def __init__(self, callback: Callable[[list[MutationRecord], MutationObserver], None]) -> None:
        self._callback = callback
        self._targets: list[tuple[Node, bool]] = []

    def observe(self, node: Node, *, child_list: bool = True, subtree: bool = False) -> None:
        if not child_list:
            return
        self._targets = [(target, deep) for target, deep in self._targets if target is not node]
        self._targets.append((node, subtree))
        node.owner_document._register_mutation_observer(self)

    def disconnect(self) -> None:
        for target, _ in self._targets:
            target.owner_document._unregister_mutation_observer(self)
        self._targets.clear()

    def _wants(self, parent: Node) -> bool:
        return any(
            target is parent or (subtree and target.contains(parent))
            for target, subtree in self._targets
        )

    def _deliver(self, record: MutationRecord) -> None:
        if self._wants(record.target):
            self._callback([record], self)


@dataclass(frozen=True, slots=True)
class ResizeObserverEntry:
    target: Element
    content_rect: Rect


class ResizeObserver:
    """Reports size changes of observed elements."""

    def __init__(self, callback: Callable[[list[ResizeObserverEntry], ResizeObserver], None]) -> None:
        self._callback = callback
        self._targets: list[Element] = []

    @property
    def targets(self) -> tuple[Element, ...]:
        return tuple(self._targets)

    def observe(self, element: Element) -> None:
        if element not in self._targets:
            self._targets.append(element)
            element.owner_document._register_resize_observer(self)

    def disconnect(self) -> None:
        for element in self._targets:
            element.owner_document._unregister_resize_observer(self)
        self._targets.clear()

    def _deliver(self, element: Element, rect: Rect) -> None:
        if element in self._targets:
            self._callback([ResizeObserverEntry(element, rect)], self)
