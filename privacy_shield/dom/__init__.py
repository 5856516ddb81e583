"""Headless document model the shield runs against.

Provides the platform surface the shield needs from a browser document:
tree mutation, events with capture/bubble phases, mutation and resize
observation, selections with undoable text insertion, and host-supplied
geometry.
"""

from __future__ import annotations

from privacy_shield.dom.editing import EditEntry, EditHistory, Range, Selection
from privacy_shield.dom.events import Event, EventTarget, listen
from privacy_shield.dom.nodes import (
    ClassList,
    ComputedStyle,
    Document,
    Element,
    Node,
    Rect,
    Text,
    Window,
)
from privacy_shield.dom.observers import (
    MutationObserver,
    MutationRecord,
    ResizeObserver,
    ResizeObserverEntry,
)

__all__ = [
    "ClassList",
    "ComputedStyle",
    "Document",
    "EditEntry",
    "EditHistory",
    "Element",
    "Event",
    "EventTarget",
    "MutationObserver",
    "MutationRecord",
    "Node",
    "Range",
    "Rect",
    "ResizeObserver",
    "ResizeObserverEntry",
    "Selection",
    "Text",
    "Window",
    "listen",
]
