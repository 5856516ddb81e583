"""Editable surface kinds and text access."""

from __future__ import annotations

from enum import Enum

from privacy_shield.dom import Element
from privacy_shield.exceptions import SurfaceKindError

__all__ = [
    "ATTACHED_MARKER",
    "SurfaceKind",
    "describe",
    "is_surface",
    "read_text",
    "surface_kind",
]

#: ``dataset`` key flagging surfaces the registry has wired up.
ATTACHED_MARKER = "psAttached"

_TEXT_INPUT_TYPES = frozenset({"", "text", "search", "email", "url", "tel"})


class SurfaceKind(str, Enum):  # noqa: UP042
    """How a surface stores its text."""

    VALUE_FIELD = "value_field"
    RICH_EDITABLE = "rich_editable"


def surface_kind(element: object) -> SurfaceKind | None:
    """Classify *element*, or None when it is not an editable surface."""
    if not isinstance(element, Element):
        return None
    if element.tag == "textarea":
        return SurfaceKind.VALUE_FIELD
    if element.tag == "input":
        input_type = (element.get_attribute("type") or "").lower()
        return SurfaceKind.VALUE_FIELD if input_type in _TEXT_INPUT_TYPES else None
    if (element.get_attribute("contenteditable") or "").lower() == "true":
        return SurfaceKind.RICH_EDITABLE
    return None


def is_surface(element: object) -> bool:
    return surface_kind(element) is not None


def read_text(surface: Element) -> str:
    """Current text of *surface*: the value of a field, the rendered text of an editor."""
    kind = surface_kind(surface)
    if kind is SurfaceKind.VALUE_FIELD:
        return surface.value
    if kind is SurfaceKind.RICH_EDITABLE:
        return surface.inner_text
    raise SurfaceKindError(f"{surface!r} is not an editable surface")


def describe(surface: Element) -> str:
    """Short label for log lines; never includes surface content."""
    element_id = surface.get_attribute("id")
    return f"{surface.tag}#{element_id}" if element_id else f"{surface.tag}@{id(surface):x}"
