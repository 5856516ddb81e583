"""Surface discovery and per-surface wiring."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from privacy_shield.core.surfaces import ATTACHED_MARKER, describe, is_surface
from privacy_shield.dom import Element, MutationObserver, listen

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from privacy_shield.clock import Clock, Handle
    from privacy_shield.core.overlay import OverlayController
    from privacy_shield.core.scheduler import ScanScheduler
    from privacy_shield.dom import Document, MutationRecord, Node

log = logging.getLogger(__name__)

__all__ = ["DEBOUNCED_EVENTS", "SETTLED_EVENTS", "SurfaceRegistry", "iter_candidates"]

DEBOUNCED_EVENTS = ("input", "focus", "keyup")
# Content is not final yet when these fire
SETTLED_EVENTS = ("paste", "cut", "drop")


def iter_candidates(node: Node) -> Iterator[Element]:
    """Yield *node* itself and every descendant that is an editable surface."""
    if isinstance(node, Element) and is_surface(node):
        yield node
    for descendant in node.iter_descendants():
        if isinstance(descendant, Element) and is_surface(descendant):
            yield descendant


class SurfaceRegistry:
    """Find editable surfaces and wire each of them exactly once.

    Attachment is recorded on the element itself
    (``dataset["psAttached"] == "true"``), so a surface already wired by an
    earlier registry instance is left alone.

    Parameters
    ----------
    document:
        Document to observe.
    clock:
        Timer source for the startup sweep.
    scheduler:
        Receives scan requests from surface events.
    overlay:
        Bound to each newly attached surface.
    startup_sweep_ms:
        Delay before the one-shot sweep of surfaces present at start.
    """

    def __init__(
        self,
        document: Document,
        clock: Clock,
        scheduler: ScanScheduler,
        overlay: OverlayController,
        *,
        startup_sweep_ms: float = 1000.0,
    ) -> None:
        self._document = document
        self._clock = clock
        self._scheduler = scheduler
        self._overlay = overlay
        self._startup_sweep_ms = startup_sweep_ms
        self._observer: MutationObserver | None = None
        self._sweep_handle: Handle | None = None
        self._disposers: dict[Element, list[Callable[[], None]]] = {}

    @property
    def attached(self) -> tuple[Element, ...]:
        return tuple(self._disposers)

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Observe ``body`` for inserted surfaces and queue the startup sweep."""
        if self._observer is not None:
            return
        self._observer = MutationObserver(self._on_mutations)
        self._observer.observe(self._document.body, child_list=True, subtree=True)
        self._sweep_handle = self._clock.call_later(self._startup_sweep_ms, self._on_startup_sweep)
        log.debug("Surface registry started")

    def stop(self) -> None:
        """Stop observing and detach every surface this registry wired."""
        if self._observer is not None:
            self._observer.disconnect()
            self._observer = None
        if self._sweep_handle is not None:
            self._sweep_handle.cancel()
            self._sweep_handle = None
        for surface in list(self._disposers):
            self.detach(surface)
        log.debug("Surface registry stopped")

    def sweep(self) -> int:
        """Attach every candidate currently in the document; returns how many were new."""
        return sum(self.attach(surface) for surface in list(iter_candidates(self._document.body)))

    def attach(self, surface: Element) -> bool:
        """Wire *surface* once; False when already attached or not a surface."""
        if not is_surface(surface) or surface.dataset.get(ATTACHED_MARKER):
            return False
        surface.dataset[ATTACHED_MARKER] = "true"

        scheduler = self._scheduler
        disposers = [
            listen(surface, event_type, lambda _event: scheduler.schedule(surface))
            for event_type in DEBOUNCED_EVENTS
        ]
        disposers.extend(
            listen(surface, event_type, lambda _event: scheduler.schedule_settled(surface))
            for event_type in SETTLED_EVENTS
        )
        self._disposers[surface] = disposers

        self._overlay.bind(surface)
        # Catch content that was there before the surface was wired
        scheduler.schedule(surface)
        log.debug("Attached %s", describe(surface))
        return True

    def detach(self, surface: Element) -> bool:
        """Unwire *surface*; it will be attached again if re-inserted."""
        disposers = self._disposers.pop(surface, None)
        if disposers is None:
            return False
        for dispose in disposers:
            dispose()
        surface.dataset.pop(ATTACHED_MARKER, None)
        self._scheduler.cancel(surface)
        self._overlay.release(surface)
        log.debug("Detached %s", describe(surface))
        return True

    def _on_startup_sweep(self) -> None:
        self._sweep_handle = None
        attached = self.sweep()
        log.debug("Startup sweep attached %d surface(s)", attached)

    def _on_mutations(self, records: list[MutationRecord], _observer: MutationObserver) -> None:
        for record in records:
            for node in record.removed_nodes:
                for surface in list(iter_candidates(node)):
                    if surface in self._disposers and not surface.is_connected:
                        self.detach(surface)
            for node in record.added_nodes:
                if not node.is_connected:
                    continue
                for surface in list(iter_candidates(node)):
                    self.attach(surface)
