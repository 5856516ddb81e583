"""Finding model: what a scan reports.

A scan yields an ordered, immutable tuple of ``Finding`` values. Order is
whatever the scanner produced; nothing downstream re-sorts it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

__all__ = [
    "Finding",
    "Findings",
    "Scanner",
    "display_count",
    "freeze_findings",
]


@dataclass(frozen=True, slots=True)
class Finding:
    """One instance of sensitive data.

    Attributes
    ----------
    type : str
        Classification, e.g. ``"credit_card"`` or ``"email"``.
    value : str
        The matched literal exactly as it appears in the surface text.
    """

    type: str
    value: str


Findings = tuple[Finding, ...]


@runtime_checkable
class Scanner(Protocol):
    """Pattern engine contract: pure, synchronous, side-effect free."""

    def scan(self, text: str) -> Sequence[Finding]:
        ...


def freeze_findings(items: Iterable[Finding | Mapping[str, str]]) -> Findings:
    """Normalise scanner output into a ``Findings`` tuple.

    Accepts ``Finding`` instances or ``{"type": ..., "value": ...}`` mappings,
    preserving order.
    """
    frozen: list[Finding] = []
    for item in items:
        if isinstance(item, Finding):
            frozen.append(item)
        else:
            frozen.append(Finding(type=str(item["type"]), value=str(item["value"])))
    return tuple(frozen)


def display_count(count: int, cap: int = 9) -> str:
    """Badge text for *count* findings: exact up to *cap*, then ``"<cap>+"``."""
    if count > cap:
        return f"{cap}+"
    return str(count)
