"""Badge asset lookup."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = ["AssetResolver", "StaticAssetResolver"]


@runtime_checkable
class AssetResolver(Protocol):
    """Resolves packaged asset names to stable URLs."""

    def url_for(self, name: str) -> str:
        ...


class StaticAssetResolver:
    """Serve assets from a fixed base URL (or bare names when none is set)."""

    __slots__ = ("base_url",)

    def __init__(self, base_url: str = "") -> None:
        self.base_url = base_url

    def url_for(self, name: str) -> str:
        if not self.base_url:
            return name
        return f"{self.base_url.rstrip('/')}/{name.lstrip('/')}"
