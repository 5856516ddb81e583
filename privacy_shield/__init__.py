"""Privacy shield: live sensitive-data detection and redaction for editable surfaces."""

from __future__ import annotations

from privacy_shield.assets import AssetResolver, StaticAssetResolver
from privacy_shield.clock import AsyncioClock, Clock, Handle, VirtualClock
from privacy_shield.config import ShieldSettings
from privacy_shield.core import (
    Finding,
    OverlayController,
    RedactionOutcome,
    Redactor,
    ScanScheduler,
    Scanner,
    ShieldState,
    SurfaceKind,
    SurfaceRegistry,
    SyncOutcome,
)
from privacy_shield.exceptions import DomError, ShieldError, SurfaceKindError
from privacy_shield.scanner import PatternScanner
from privacy_shield.shield import PrivacyShield

__version__ = "0.1.0"

__all__ = [
    "AssetResolver",
    "AsyncioClock",
    "Clock",
    "DomError",
    "Finding",
    "Handle",
    "OverlayController",
    "PatternScanner",
    "PrivacyShield",
    "RedactionOutcome",
    "Redactor",
    "ScanScheduler",
    "Scanner",
    "ShieldError",
    "ShieldSettings",
    "ShieldState",
    "StaticAssetResolver",
    "SurfaceKind",
    "SurfaceKindError",
    "SurfaceRegistry",
    "SyncOutcome",
    "VirtualClock",
    "__version__",
]
