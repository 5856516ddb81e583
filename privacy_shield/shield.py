"""Composition root: one shield per document."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from privacy_shield.config import ShieldSettings
from privacy_shield.core.overlay import OverlayController, ShieldState
from privacy_shield.core.registry import SurfaceRegistry
from privacy_shield.core.scheduler import ScanScheduler
from privacy_shield.scanner import PatternScanner

if TYPE_CHECKING:
    import random

    from privacy_shield.assets import AssetResolver
    from privacy_shield.clock import Clock
    from privacy_shield.core.findings import Scanner
    from privacy_shield.core.redaction import Redactor
    from privacy_shield.dom import Document

log = logging.getLogger(__name__)

__all__ = ["PrivacyShield"]


class PrivacyShield:
    """Wire registry, scheduler and overlay around one document.

    Parameters
    ----------
    document:
        Document whose editable surfaces are watched.
    clock:
        Timer and frame source shared by every component.
    scanner:
        Pattern engine; defaults to ``PatternScanner``.
    settings:
        Timing and geometry; defaults to ``ShieldSettings()`` (environment
        overrides apply).
    assets, rng, redactor:
        Passed through to ``OverlayController``.

    Example
    -------
    >>> shield = PrivacyShield(document, VirtualClock())
    >>> shield.start()
    """

    def __init__(
        self,
        document: Document,
        clock: Clock,
        scanner: Scanner | None = None,
        *,
        settings: ShieldSettings | None = None,
        assets: AssetResolver | None = None,
        rng: random.Random | None = None,
        redactor: Redactor | None = None,
    ) -> None:
        self.settings = settings or ShieldSettings()
        self.document = document
        self.clock = clock
        self.scanner = scanner or PatternScanner()
        self.overlay = OverlayController(
            document,
            clock,
            redactor=redactor,
            settings=self.settings,
            assets=assets,
            rng=rng,
        )
        self.scheduler = ScanScheduler(
            clock,
            self.scanner.scan,
            self.overlay.update_shield,
            debounce_ms=self.settings.debounce_ms,
            settle_ms=self.settings.settle_ms,
        )
        self.registry = SurfaceRegistry(
            document,
            clock,
            self.scheduler,
            self.overlay,
            startup_sweep_ms=self.settings.startup_sweep_ms,
        )

    @property
    def state(self) -> ShieldState:
        return self.overlay.state

    @property
    def running(self) -> bool:
        return self.registry.running

    def start(self) -> None:
        self.registry.start()
        log.info("Privacy shield started")

    def stop(self) -> None:
        """Detach everything and remove the overlay."""
        self.registry.stop()
        self.scheduler.cancel_all()
        self.overlay.teardown()
        log.info("Privacy shield stopped")
