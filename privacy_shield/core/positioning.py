"""Anchor resolution and frame-coalesced overlay positioning.

The overlay is a fixed-position container glued to the bottom-right corner
of its anchor. When the anchor is taller than the viewport the badge sticks
to the bottom of the visible part, but never rises above the anchor's top
edge plus the margin.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from privacy_shield.core.surfaces import SurfaceKind, describe, surface_kind
from privacy_shield.dom import ResizeObserver, listen

if TYPE_CHECKING:
    from collections.abc import Callable

    from privacy_shield.clock import Clock
    from privacy_shield.core.binding import OverlayBinding
    from privacy_shield.dom import Element, Event, Rect, Window

log = logging.getLogger(__name__)

__all__ = [
    "SCROLLABLE_OVERFLOW",
    "Placement",
    "PositionSynchronizer",
    "SyncOutcome",
    "compute_placement",
    "resolve_anchor",
]

SCROLLABLE_OVERFLOW = frozenset({"auto", "scroll", "overlay"})


def resolve_anchor(surface: Element, window: Window) -> Element:
    """Return the element whose rectangle the overlay follows.

    Value fields anchor to themselves. Rich editables anchor to the nearest
    ancestor that scrolls vertically, stopping before ``body`` and the root
    element, and fall back to themselves.
    """
    if surface_kind(surface) is SurfaceKind.VALUE_FIELD:
        return surface
    document = surface.owner_document
    for ancestor in surface.ancestors():
        if ancestor is document.body or ancestor is document.document_element:
            break
        if window.get_computed_style(ancestor).overflow_y in SCROLLABLE_OVERFLOW:
            return ancestor
    return surface


@dataclass(frozen=True, slots=True)
class Placement:
    """Viewport position of the overlay container's top-left corner."""

    top: float
    left: float


def compute_placement(
    rect: Rect,
    viewport_height: float,
    *,
    margin: float = 15.0,
    badge_size: float = 24.0,
) -> Placement | None:
    """Position for an anchor occupying *rect*, or None when it must be hidden.

    Hidden when the rectangle has no area or lies entirely above or below
    the viewport.
    """
    if rect.width == 0 or rect.height == 0:
        return None
    if rect.bottom < 0 or rect.top > viewport_height:
        return None
    left = rect.right - margin - badge_size
    visible_bottom = min(rect.bottom, viewport_height)
    top = visible_bottom - margin - badge_size
    if top < rect.top + margin:
        top = rect.top + margin
    return Placement(top=top, left=left)


class SyncOutcome(str, Enum):  # noqa: UP042
    """What a position sync did."""

    PLACED = "placed"
    HIDDEN = "hidden"
    DETACHED = "detached"
    RELEASED = "released"


def _px(value: float) -> str:
    return f"{float(value)}".removesuffix(".0") + "px"


class PositionSynchronizer:
    """Keep a binding's container positioned over its anchor.

    Scroll, resize, input and element-resize notifications all funnel into
    :meth:`request`, which queues at most one frame callback at a time.

    Parameters
    ----------
    binding:
        The binding to position; ``binding.pending_frame`` holds the queued
        frame.
    clock:
        Frame source.
    window:
        Viewport used for the visibility check and the capture scroll hook.
    margin, badge_size:
        Placement geometry.
    on_detached:
        Called when a sync finds the surface gone from the document; expected
        to tear the whole binding down.
    """

    def __init__(
        self,
        binding: OverlayBinding,
        clock: Clock,
        window: Window,
        *,
        margin: float = 15.0,
        badge_size: float = 24.0,
        on_detached: Callable[[], None] | None = None,
    ) -> None:
        self.binding = binding
        self._clock = clock
        self._window = window
        self._margin = margin
        self._badge_size = badge_size
        self._on_detached = on_detached
        self._disposers: list[Callable[[], None]] = []
        self._observer: ResizeObserver | None = None
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def install(self) -> None:
        """Hook every repositioning trigger and queue the initial sync."""
        binding = self.binding
        self._disposers = [
            listen(self._window, "scroll", self.request, capture=True),
            listen(self._window, "resize", self.request),
            listen(binding.anchor, "scroll", self.request),
            listen(binding.surface, "input", self.request),
        ]
        self._observer = ResizeObserver(lambda entries, observer: self.request())
        self._observer.observe(binding.anchor)
        self._observer.observe(binding.surface)
        self.request()

    def request(self, _event: Event | None = None) -> None:
        """Queue a sync for the next frame unless one is already queued."""
        if self._released or self.binding.pending_frame is not None:
            return
        self.binding.pending_frame = self._clock.request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self.binding.pending_frame = None
        self.sync()

    def sync(self) -> SyncOutcome:
        """Recompute visibility and position now."""
        if self._released:
            return SyncOutcome.RELEASED
        binding = self.binding
        if not binding.surface.is_connected:
            log.debug("Surface %s left the document; releasing overlay", describe(binding.surface))
            if self._on_detached is not None:
                self._on_detached()
            else:
                self.release()
            return SyncOutcome.DETACHED

        anchor = binding.anchor if binding.anchor.is_connected else binding.surface
        placement = compute_placement(
            anchor.get_bounding_client_rect(),
            self._window.inner_height,
            margin=self._margin,
            badge_size=self._badge_size,
        )
        style = binding.container.style
        binding.placement = placement
        if placement is None:
            style["display"] = "none"
            binding.visible = False
            return SyncOutcome.HIDDEN
        style["display"] = "flex"
        style["top"] = _px(placement.top)
        style["left"] = _px(placement.left)
        binding.visible = True
        return SyncOutcome.PLACED

    def release(self) -> None:
        """Remove every hook and cancel the queued frame; idempotent."""
        if self._released:
            return
        self._released = True
        for dispose in self._disposers:
            dispose()
        self._disposers.clear()
        if self._observer is not None:
            self._observer.disconnect()
            self._observer = None
        if self.binding.pending_frame is not None:
            self.binding.pending_frame.cancel()
            self.binding.pending_frame = None
