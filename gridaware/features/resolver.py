"""
Grid Aware – Intensity Resolver
================================
Combines the per-request override (``?grid_intensity=``) with the provider's
live reading into one effective intensity, computed once per request and
carried to every transformer inside a ``RequestContext``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gridaware.exceptions import ProviderError
from gridaware.features.classifier import LIVE, IntensityTier
from gridaware.features.events import EventSink, NullEventSink
from gridaware.features.feature_settings import FeatureSettings
from gridaware.features.grid_provider import GridIntensityProvider, ProviderReading

# Tier used whenever no live signal is available
DEFAULT_TIER = IntensityTier.LOW.value


def normalize_override(raw: Optional[str]) -> Optional[str]:
    """Lower-cased, trimmed override; None when absent or blank."""
    if raw is None:
        return None
    value = str(raw).strip().lower()
    return value or None


@dataclass(frozen=True)
class ResolvedIntensity:
    effective: str
    reading: Optional[ProviderReading] = None
    overridden: bool = False
    error: Optional[ProviderError] = None


class IntensityResolver:
    """Resolve the effective intensity for one request."""

    def __init__(self, provider: GridIntensityProvider, events: Optional[EventSink] = None) -> None:
        self._provider = provider
        self._events = events or NullEventSink()

    async def resolve(
        self,
        override: Optional[str],
        *,
        visitor_ip: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> ResolvedIntensity:
        value = normalize_override(override)

        # Explicit overrides are taken as-is; the provider is not consulted.
        if value is not None and value != LIVE:
            self._events.emit("intensity.override", value=value)
            return ResolvedIntensity(effective=value, overridden=True)

        try:
            reading = await self._provider.fetch(api_key=api_key, visitor_ip=visitor_ip)
        except ProviderError as exc:
            self._events.emit("intensity.fallback", tier=DEFAULT_TIER, code=exc.code, error=exc.message)
            return ResolvedIntensity(effective=DEFAULT_TIER, error=exc)

        return ResolvedIntensity(effective=reading.intensity_level.value, reading=reading)


@dataclass(frozen=True)
class RequestContext:
    """Everything a transformer may read about the current request."""
    effective_intensity: str
    settings: FeatureSettings
    post_id: Optional[int] = None
    reading: Optional[ProviderReading] = None
    override: Optional[str] = None

    @property
    def body_class(self) -> str:
        return f"grid-intensity-{self.effective_intensity}"

    @classmethod
    def from_resolution(
        cls,
        resolved: ResolvedIntensity,
        settings: FeatureSettings,
        post_id: Optional[int] = None,
        override: Optional[str] = None,
    ) -> "RequestContext":
        return cls(
            effective_intensity=resolved.effective,
            settings=settings,
            post_id=post_id,
            reading=resolved.reading,
            override=normalize_override(override),
        )
