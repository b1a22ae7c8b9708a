"""
Grid Aware – Intensity Classifier
==================================
Maps a numeric carbon-intensity reading (gCO2eq/kWh) or a vendor category
onto the three presentation tiers used across the service.
"""

from __future__ import annotations

from enum import Enum

from gridaware.exceptions import InvalidResponseError

# ─────────────────────────────────────────────────────────────────────────────
# Thresholds (gCO2eq/kWh)
# ─────────────────────────────────────────────────────────────────────────────
LOW_UPPER_BOUND = 200      # < 200  → low    (renewable-heavy grids)
MEDIUM_UPPER_BOUND = 500   # < 500  → medium (mixed grids), else high

# Sentinel meaning "ask the provider"
LIVE = "live"

# Electricity Maps level endpoint vocabulary → ours
_VENDOR_LEVELS = {
    "low": "low",
    "moderate": "medium",
    "medium": "medium",
    "high": "high",
}


class IntensityTier(str, Enum):
    """Grid intensity tier, ordered by pollution severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, IntensityTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, IntensityTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, IntensityTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, IntensityTier):
            return NotImplemented
        return self.rank >= other.rank


_RANKS = {IntensityTier.LOW: 0, IntensityTier.MEDIUM: 1, IntensityTier.HIGH: 2}


def classify(carbon_intensity: float) -> IntensityTier:
    """Classify a carbon intensity value.

    Boundaries belong to the upper bucket: 200 → medium, 500 → high.
    """
    if carbon_intensity < LOW_UPPER_BOUND:
        return IntensityTier.LOW
    elif carbon_intensity < MEDIUM_UPPER_BOUND:
        return IntensityTier.MEDIUM
    else:
        return IntensityTier.HIGH


def normalize_level(vendor_level: str) -> IntensityTier:
    """Translate the vendor's categorical level (low|moderate|high)."""
    key = str(vendor_level or "").strip().lower()
    if key not in _VENDOR_LEVELS:
        raise InvalidResponseError(f"Unknown intensity level in API response: {vendor_level!r}")
    return IntensityTier(_VENDOR_LEVELS[key])


def tier_value(tier) -> str:
    """Plain lower-case string for an ``IntensityTier`` or a raw override."""
    if isinstance(tier, IntensityTier):
        return tier.value
    return str(tier or "").strip().lower()
