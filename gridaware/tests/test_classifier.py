"""
Grid Aware – Classifier tests
Run with: pytest gridaware/tests/ -v
"""

import pytest

from gridaware.exceptions import InvalidResponseError
from gridaware.features.classifier import IntensityTier, classify, normalize_level, tier_value


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, IntensityTier.LOW),
        (199, IntensityTier.LOW),
        (199.99, IntensityTier.LOW),
        (200, IntensityTier.MEDIUM),
        (499, IntensityTier.MEDIUM),
        (500, IntensityTier.HIGH),
        (1200, IntensityTier.HIGH),
    ],
)
def test_classify_boundaries(value, expected):
    assert classify(value) == expected


def test_classify_is_monotonic():
    values = [0, 50, 150, 199, 200, 201, 350, 499, 500, 501, 900]
    tiers = [classify(v) for v in values]
    assert all(a <= b for a, b in zip(tiers, tiers[1:]))


def test_tier_ordering():
    assert IntensityTier.LOW < IntensityTier.MEDIUM < IntensityTier.HIGH
    assert max([IntensityTier.MEDIUM, IntensityTier.HIGH, IntensityTier.LOW]) == IntensityTier.HIGH


@pytest.mark.parametrize(
    "vendor, expected",
    [
        ("low", IntensityTier.LOW),
        ("moderate", IntensityTier.MEDIUM),
        ("MODERATE", IntensityTier.MEDIUM),
        (" high ", IntensityTier.HIGH),
    ],
)
def test_normalize_level(vendor, expected):
    assert normalize_level(vendor) == expected


def test_normalize_level_rejects_unknown_vocabulary():
    with pytest.raises(InvalidResponseError):
        normalize_level("extreme")


def test_tier_value_accepts_enum_and_raw_strings():
    assert tier_value(IntensityTier.HIGH) == "high"
    assert tier_value(" Medium ") == "medium"
    assert tier_value(None) == ""
