"""
Grid Aware – Typography Transformer
====================================
At high intensity every font reference in a theme.json-shaped configuration is
redirected to a single system-font stack, so no webfont is downloaded.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from gridaware.features.classifier import IntensityTier, tier_value
from gridaware.features.feature_settings import FeatureSettings

SYSTEM_FONT_STACK = (
    'Helvetica, -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, '
    'Oxygen-Sans, Ubuntu, Cantarell, "Helvetica Neue", sans-serif'
)
SYSTEM_FONT_SLUG = "system"
SYSTEM_FONT_FAMILY = {
    "fontFamily": SYSTEM_FONT_STACK,
    "name": "System Font",
    "slug": SYSTEM_FONT_SLUG,
}
SYSTEM_FONT_PRESET = f"var:preset|font-family|{SYSTEM_FONT_SLUG}"


def _redirect_font_references(node: Any) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "fontFamily" and isinstance(value, str):
                node[key] = SYSTEM_FONT_PRESET
            else:
                _redirect_font_references(value)
    elif isinstance(node, list):
        for item in node:
            _redirect_font_references(item)


def _drop_block_font_families(blocks: Any) -> None:
    """Remove block-scoped font families along with their fontFace sources."""
    if not isinstance(blocks, dict):
        return
    for block in blocks.values():
        typography = block.get("typography") if isinstance(block, dict) else None
        if isinstance(typography, dict):
            typography.pop("fontFamilies", None)


def transform_typography(theme: Dict[str, Any], tier, settings: FeatureSettings) -> Dict[str, Any]:
    """Return the theme configuration for ``tier``.

    Identity unless typography is enabled and the tier is high. The input is
    never mutated.
    """
    if not settings.typography or tier_value(tier) != IntensityTier.HIGH.value:
        return theme

    result = copy.deepcopy(theme) if isinstance(theme, dict) else {}

    theme_settings = result.setdefault("settings", {})
    typography = theme_settings.setdefault("typography", {})
    typography["fontFamilies"] = [dict(SYSTEM_FONT_FAMILY)]
    _drop_block_font_families(theme_settings.get("blocks"))

    styles = result.setdefault("styles", {})
    styles.setdefault("typography", {})["fontFamily"] = SYSTEM_FONT_PRESET
    _redirect_font_references(styles)
    return result
