"""Scan scheduling: per-surface debounce with a settle path for bulk edits.

Each surface owns one queued scan task. Scheduling again replaces the task,
so a burst of edits collapses into a single scan that reads the text as it
is when the quiet window elapses. Paste, cut and drop go through a settle
delay first, since the surface may not hold the new content yet when those
events fire.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from privacy_shield.core.findings import Finding, Findings, freeze_findings
from privacy_shield.core.surfaces import describe, read_text

if TYPE_CHECKING:
    from privacy_shield.clock import Clock, Handle
    from privacy_shield.dom import Element

log = logging.getLogger(__name__)

__all__ = ["ScanScheduler"]

ScanFunction = Callable[[str], Sequence[Finding]]
FindingsSink = Callable[["Element", Findings], object]


class ScanScheduler:
    """Debounce scan requests per surface.

    Parameters
    ----------
    clock:
        Source of delayed callbacks.
    scan:
        The pattern engine, ``scan(text) -> findings``.
    on_findings:
        Receives ``(surface, findings)`` after every executed scan; normally
        ``OverlayController.update_shield``.
    debounce_ms:
        Quiet window before a scan runs.
    settle_ms:
        Extra wait applied to paste/cut/drop before entering the debounce.
    """

    __slots__ = (
        "_clock",
        "_debounce_ms",
        "_debounced",
        "_on_findings",
        "_scan",
        "_settle_ms",
        "_settling",
    )

    def __init__(
        self,
        clock: Clock,
        scan: ScanFunction,
        on_findings: FindingsSink,
        *,
        debounce_ms: float = 300.0,
        settle_ms: float = 100.0,
    ) -> None:
        self._clock = clock
        self._scan = scan
        self._on_findings = on_findings
        self._debounce_ms = debounce_ms
        self._settle_ms = settle_ms
        self._debounced: dict[Element, Handle] = {}
        self._settling: dict[Element, list[Handle]] = {}

    def schedule(self, surface: Element) -> None:
        """Queue a scan of *surface*, replacing any scan already queued for it."""
        previous = self._debounced.pop(surface, None)
        if previous is not None:
            previous.cancel()
        self._debounced[surface] = self._clock.call_later(
            self._debounce_ms, lambda: self._run(surface)
        )

    def schedule_settled(self, surface: Element) -> None:
        """Queue a scan after the settle delay (paste, cut, drop)."""
        handles = self._settling.setdefault(surface, [])
        handle: Handle | None = None

        def settled() -> None:
            if handle in handles:
                handles.remove(handle)
            if not handles:
                self._settling.pop(surface, None)
            self.schedule(surface)

        handle = self._clock.call_later(self._settle_ms, settled)
        handles.append(handle)

    def cancel(self, surface: Element) -> None:
        """Drop every queued task for *surface*."""
        handle = self._debounced.pop(surface, None)
        if handle is not None:
            handle.cancel()
        for settle in self._settling.pop(surface, []):
            settle.cancel()

    def cancel_all(self) -> None:
        for surface in list(self._debounced) + list(self._settling):
            self.cancel(surface)

    def is_pending(self, surface: Element) -> bool:
        return surface in self._debounced or bool(self._settling.get(surface))

    def _run(self, surface: Element) -> None:
        self._debounced.pop(surface, None)
        if not surface.is_connected:
            log.debug("Dropping scan for detached surface %s", describe(surface))
            return
        text = read_text(surface)
        try:
            findings = freeze_findings(self._scan(text))
        except Exception:
            log.warning("Scanner failed on %s; scan dropped", describe(surface), exc_info=True)
            return
        log.debug("Scanned %s: %d finding(s)", describe(surface), len(findings))
        self._on_findings(surface, findings)
