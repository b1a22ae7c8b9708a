"""
Grid Aware – Grid Intensity Provider
=====================================
Fetches the current carbon intensity for a visitor (geolocated upstream from
the forwarded IP) or for an explicit zone, with cache-aside TTL caching.

Two Electricity Maps endpoints are supported as interchangeable backends:

  carbon-intensity/latest        numeric ``carbonIntensity`` → classify()
  carbon-intensity-level/latest  categorical ``data[0].level`` → normalize_level()

Both produce the same ``ProviderReading``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from gridaware.exceptions import (
    InvalidResponseError,
    MissingCredentialError,
    NoIntensityDataError,
    TransportError,
    UpstreamApiError,
)
from gridaware.features.classifier import IntensityTier, classify, normalize_level
from gridaware.features.events import EventSink, NullEventSink
from gridaware.features.visitor import DEFAULT_IP, hash_ip, is_local_ip
from gridaware.services.intensity_cache import IntensityCache, MemoryIntensityCache

CACHE_PREFIX = "grid_aware:ci:"
CACHE_TTL_SECONDS = 600
REQUEST_TIMEOUT_SECONDS = 10.0


# ─────────────────────────────────────────────────────────────────────────────
# Reading
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProviderReading:
    """One immutable carbon-intensity observation for a zone."""
    zone: str
    carbon_intensity: Optional[float]   # gCO2eq/kWh, None for level-only backends
    intensity_level: IntensityTier
    timestamp: datetime
    is_fallback_zone: bool = False

    def to_dict(self) -> dict:
        return {
            "zone": self.zone,
            "carbonIntensity": self.carbon_intensity,
            "intensity_level": self.intensity_level.value,
            "datetime": self.timestamp.isoformat(),
            "is_fallback_zone": self.is_fallback_zone,
        }


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, str) and raw:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Backends
# ─────────────────────────────────────────────────────────────────────────────

class IntensityBackend:
    """Endpoint path + payload parser for one upstream API shape."""

    name = "base"
    path = ""

    def parse(self, payload: Dict[str, Any], zone: Optional[str]) -> ProviderReading:
        raise NotImplementedError


class CarbonIntensityBackend(IntensityBackend):
    """Numeric endpoint; the tier is derived locally from thresholds."""

    name = "carbon-intensity"
    path = "/carbon-intensity/latest"

    def parse(self, payload: Dict[str, Any], zone: Optional[str]) -> ProviderReading:
        raw = payload.get("carbonIntensity")
        if raw is None:
            raise NoIntensityDataError()
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise NoIntensityDataError(f"Non-numeric carbon intensity in API response: {raw!r}")

        return ProviderReading(
            zone=str(payload.get("zone") or zone or "??"),
            carbon_intensity=value,
            intensity_level=classify(value),
            timestamp=_parse_timestamp(payload.get("datetime")),
        )


class IntensityLevelBackend(IntensityBackend):
    """Pre-categorized endpoint (vendor levels low|moderate|high)."""

    name = "carbon-intensity-level"
    path = "/carbon-intensity-level/latest"

    def parse(self, payload: Dict[str, Any], zone: Optional[str]) -> ProviderReading:
        entry: Dict[str, Any] = payload
        data = payload.get("data")
        if isinstance(data, list):
            if not data or not isinstance(data[0], dict):
                raise NoIntensityDataError()
            entry = data[0]

        level = entry.get("level")
        if not level:
            raise NoIntensityDataError()

        raw = entry.get("carbonIntensity", payload.get("carbonIntensity"))
        try:
            value = float(raw) if raw is not None else None
        except (TypeError, ValueError):
            value = None

        return ProviderReading(
            zone=str(payload.get("zone") or entry.get("zone") or zone or "??"),
            carbon_intensity=value,
            intensity_level=normalize_level(level),
            timestamp=_parse_timestamp(entry.get("datetime") or payload.get("datetime")),
        )


BACKENDS = {
    CarbonIntensityBackend.name: CarbonIntensityBackend,
    IntensityLevelBackend.name: IntensityLevelBackend,
}


# ─────────────────────────────────────────────────────────────────────────────
# Provider
# ─────────────────────────────────────────────────────────────────────────────

class GridIntensityProvider:
    """
    Cache-aside client for the carbon-intensity API.

    Usage:
        provider = GridIntensityProvider(api_key="...")
        reading = await provider.fetch(visitor_ip="203.0.113.7")
    """

    def __init__(
        self,
        base_url: str = "https://api.electricitymap.org/v3",
        *,
        api_key: str = "",
        backend: Optional[IntensityBackend] = None,
        cache: Optional[IntensityCache] = None,
        fallback_zone: str = "ES",
        ttl_seconds: int = CACHE_TTL_SECONDS,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
        events: Optional[EventSink] = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._api_key = api_key
        self.backend = backend or CarbonIntensityBackend()
        self.cache = cache if cache is not None else MemoryIntensityCache()
        self.fallback_zone = fallback_zone
        self._ttl = ttl_seconds
        self._timeout = timeout_seconds
        self._client = client
        self._events = events or NullEventSink()

    # ── public API ──────────────────────────────────────────

    async def fetch(
        self,
        zone: Optional[str] = None,
        api_key: Optional[str] = None,
        visitor_ip: Optional[str] = None,
    ) -> ProviderReading:
        """Return the current reading for ``zone`` or, if omitted, the visitor.

        Raises a ``ProviderError`` subclass on any failure.
        """
        token = (api_key or self._api_key or "").strip()
        if not token:
            raise MissingCredentialError()

        headers = {"auth-token": token}
        params: Dict[str, str] = {}
        is_fallback = False

        if zone:
            zone = zone.strip().upper()
            params["zone"] = zone
            cache_key = f"{CACHE_PREFIX}zone:{zone}"
        else:
            ip = visitor_ip or DEFAULT_IP
            if is_local_ip(ip):
                # Deterministic zone for development environments
                zone = self.fallback_zone
                params["zone"] = zone
                # Same key as an explicit request for this zone
                cache_key = f"{CACHE_PREFIX}zone:{zone}"
                is_fallback = True
            else:
                # Upstream geolocates from the forwarded address
                headers["X-Forwarded-For"] = ip
                cache_key = f"{CACHE_PREFIX}{hash_ip(ip)}"

        cached = self.cache.get(cache_key)
        if cached is not None:
            self._events.emit("intensity.cache_hit", cache_key=cache_key, zone=cached.zone)
            return replace(cached, is_fallback_zone=True) if is_fallback else cached

        self._events.emit("intensity.cache_miss", cache_key=cache_key, backend=self.backend.name)
        payload = await self._request(headers, params)

        reading = self.backend.parse(payload, zone)
        self.cache.set(cache_key, reading, self._ttl)
        if is_fallback:
            reading = replace(reading, is_fallback_zone=True)
        self._events.emit(
            "intensity.fetched",
            zone=reading.zone,
            level=reading.intensity_level.value,
            carbon_intensity=reading.carbon_intensity,
        )
        return reading

    # ── private helpers ─────────────────────────────────────

    async def _request(self, headers: Dict[str, str], params: Dict[str, str]) -> Dict[str, Any]:
        url = f"{self._base}{self.backend.path}"
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers, params=params, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            self._events.emit("intensity.upstream_error", url=url, error=str(exc))
            raise TransportError(f"Electricity Maps request failed: {exc}") from exc

        if response.status_code != 200:
            self._events.emit("intensity.upstream_error", url=url, status=response.status_code)
            raise UpstreamApiError(
                f"Electricity Maps API error: {self._error_message(response)}",
                status=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError:
            raise InvalidResponseError()
        if not isinstance(payload, dict):
            raise InvalidResponseError()
        return payload

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the API's own ``message`` / ``error``, else the status text."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            for field in ("message", "error"):
                if data.get(field):
                    return str(data[field])
        return response.reason_phrase or str(response.status_code)


def build_provider(app_settings, cache: Optional[IntensityCache] = None, **kwargs) -> GridIntensityProvider:
    """Construct the provider described by ``AppSettings``."""
    backend = BACKENDS[app_settings.intensity_backend]()
    return GridIntensityProvider(
        app_settings.electricity_maps_base_url,
        api_key=app_settings.electricity_maps_api_key,
        backend=backend,
        cache=cache,
        fallback_zone=app_settings.fallback_zone,
        ttl_seconds=app_settings.intensity_cache_ttl,
        timeout_seconds=app_settings.upstream_timeout_s,
        **kwargs,
    )
