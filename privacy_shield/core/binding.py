"""The live overlay binding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from privacy_shield.clock import Handle
    from privacy_shield.core.findings import Findings
    from privacy_shield.core.positioning import Placement, PositionSynchronizer
    from privacy_shield.dom import Element

__all__ = ["OverlayBinding"]


@dataclass(slots=True, eq=False)
class OverlayBinding:
    """Overlay state tied to one surface.

    Attributes
    ----------
    surface : Element
        The editable surface the overlay reports on.
    anchor : Element
        Element whose rectangle positions the overlay, resolved once.
    container : Element
        Root of the rendered overlay, a direct child of ``body``.
    badge : Element
        Clickable status pill.
    status : Element
        Text holder inside the badge (checkmark or count).
    popup : Element
        Issue list shown above the badge.
    findings : Findings
        Latest scan result for ``surface``; exact, never capped.
    visible : bool
        Whether the last sync placed the container on screen.
    placement : Placement | None
        Last computed position, None while hidden.
    pending_frame : Handle | None
        Queued position sync, at most one.
    released : bool
        Set once teardown has run; a released binding is inert.
    """

    surface: Element
    anchor: Element
    container: Element
    badge: Element
    status: Element
    popup: Element
    findings: Findings = ()
    banner: str | None = None
    visible: bool = False
    placement: Placement | None = None
    pending_frame: Handle | None = None
    released: bool = False
    synchronizer: PositionSynchronizer | None = None
    disposers: list[Callable[[], None]] = field(default_factory=list)
