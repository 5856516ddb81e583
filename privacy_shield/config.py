"""Privacy shield configuration."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class ShieldSettings(BaseSettings):
    """Timing and geometry constants for the shield.

    Defaults are the reference values; every field can be overridden through
    ``PRIVACY_SHIELD_*`` environment variables. Times are milliseconds,
    distances are CSS pixels.
    """

    # Quiet period after the last edit before a surface is scanned
    debounce_ms: float = Field(default=300.0, ge=0)
    # Wait after paste/cut/drop so the surface finishes updating itself
    settle_ms: float = Field(default=100.0, ge=0)
    # One-shot sweep for surfaces rendered before observation started
    startup_sweep_ms: float = Field(default=1000.0, ge=0)

    margin: float = Field(default=15.0, ge=0)
    badge_size: float = Field(default=24.0, gt=0)
    popup_offset: float = Field(default=35.0, ge=0)
    z_index: int = 2147483647

    # Status badge shows "<cap>+" above this many findings
    count_cap: int = Field(default=9, ge=1)

    logo_asset: str = "logo.png"

    model_config = {"env_prefix": "PRIVACY_SHIELD_", "extra": "ignore"}
