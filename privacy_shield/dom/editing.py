"""Selection, ranges and undoable text edits.

Only the subset the shield relies on is modelled: ranges whose boundaries
sit inside text nodes, a single-range selection, and an undo history fed by
``Document.exec_command("insertText", ...)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from privacy_shield.exceptions import DomError

if TYPE_CHECKING:
    from privacy_shield.dom.nodes import Text

__all__ = [
    "EditEntry",
    "EditHistory",
    "Range",
    "Selection",
]


class Range:
    """A span between two boundary points inside text nodes."""

    __slots__ = ("end_container", "end_offset", "start_container", "start_offset")

    def __init__(self) -> None:
        self.start_container: Text | None = None
        self.start_offset = 0
        self.end_container: Text | None = None
        self.end_offset = 0

    def set_start(self, node: Text, offset: int) -> None:
        self._check(node, offset)
        self.start_container = node
        self.start_offset = offset
        if self.end_container is None:
            self.end_container, self.end_offset = node, offset

    def set_end(self, node: Text, offset: int) -> None:
        self._check(node, offset)
        self.end_container = node
        self.end_offset = offset
        if self.start_container is None:
            self.start_container, self.start_offset = node, offset

    def collapse_to(self, node: Text, offset: int) -> None:
        self._check(node, offset)
        self.start_container = self.end_container = node
        self.start_offset = self.end_offset = offset

    @staticmethod
    def _check(node: Text, offset: int) -> None:
        if not 0 <= offset <= len(node.data):
            raise DomError(f"offset {offset} outside text node of length {len(node.data)}")


class Selection:
    """The document selection; holds at most one range."""

    __slots__ = ("_range",)

    def __init__(self) -> None:
        self._range: Range | None = None

    @property
    def range_count(self) -> int:
        return 0 if self._range is None else 1

    def get_range_at(self, index: int) -> Range:
        if index != 0 or self._range is None:
            raise DomError(f"selection has no range at index {index}")
        return self._range

    def add_range(self, rng: Range) -> None:
        # Matches the platform: a second range is ignored while one is present
        if self._range is None:
            self._range = rng

    def remove_all_ranges(self) -> None:
        self._range = None


@dataclass(slots=True)
class EditEntry:
    """One text replacement inside a single text node."""

    node: Text
    offset: int
    removed: str
    inserted: str

    def apply(self) -> None:
        data = self.node.data
        self.node.data = data[:self.offset] + self.inserted + data[self.offset + len(self.removed):]

    def revert(self) -> None:
        data = self.node.data
        self.node.data = data[:self.offset] + self.removed + data[self.offset + len(self.inserted):]


class EditHistory:
    """Undo/redo stacks for editing commands."""

    __slots__ = ("_redo", "_undo")

    def __init__(self) -> None:
        self._undo: list[EditEntry] = []
        self._redo: list[EditEntry] = []

    def record(self, entry: EditEntry) -> None:
        self._undo.append(entry)
        self._redo.clear()

    def undo(self) -> EditEntry | None:
        if not self._undo:
            return None
        entry = self._undo.pop()
        entry.revert()
        self._redo.append(entry)
        return entry

    def redo(self) -> EditEntry | None:
        if not self._redo:
            return None
        entry = self._redo.pop()
        entry.apply()
        self._undo.append(entry)
        return entry

    @property
    def depth(self) -> int:
        return len(self._undo)
