"""Live-scan coordination and the overlay state machine."""

from __future__ import annotations

from privacy_shield.core.binding import OverlayBinding
from privacy_shield.core.findings import (
    Finding,
    Findings,
    Scanner,
    display_count,
    freeze_findings,
)
from privacy_shield.core.overlay import ALERT_MESSAGES, OverlayController, ShieldState
from privacy_shield.core.positioning import (
    Placement,
    PositionSynchronizer,
    SyncOutcome,
    compute_placement,
    resolve_anchor,
)
from privacy_shield.core.redaction import (
    RangeInsertion,
    RedactionOutcome,
    Redactor,
    ValueAssignment,
    WholeTextReplacement,
    placeholder_token,
)
from privacy_shield.core.registry import SurfaceRegistry
from privacy_shield.core.scheduler import ScanScheduler
from privacy_shield.core.surfaces import (
    ATTACHED_MARKER,
    SurfaceKind,
    is_surface,
    read_text,
    surface_kind,
)

__all__ = [
    "ALERT_MESSAGES",
    "ATTACHED_MARKER",
    "Finding",
    "Findings",
    "OverlayBinding",
    "OverlayController",
    "Placement",
    "PositionSynchronizer",
    "RangeInsertion",
    "RedactionOutcome",
    "Redactor",
    "ScanScheduler",
    "Scanner",
    "ShieldState",
    "SurfaceKind",
    "SurfaceRegistry",
    "SyncOutcome",
    "ValueAssignment",
    "WholeTextReplacement",
    "compute_placement",
    "display_count",
    "freeze_findings",
    "is_surface",
    "placeholder_token",
    "read_text",
    "resolve_anchor",
    "surface_kind",
]
