"""Exception hierarchy for the privacy shield.

Only programming mistakes are raised. Conditions the shield meets at runtime
(detached surfaces, off-screen anchors, literals split across text nodes,
failing scanners) are handled in place and never reach the host document.
"""

from __future__ import annotations

__all__ = [
    "DomError",
    "ShieldError",
    "SurfaceKindError",
]


class ShieldError(Exception):
    """Base exception for privacy shield errors."""

    pass


class SurfaceKindError(ShieldError):
    """Raised when an element that is not an editable surface is used as one."""

    pass


class DomError(ShieldError):
    """Raised for invalid operations on the headless document tree."""

    pass
