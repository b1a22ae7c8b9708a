"""
Grid Aware – Typography transformer tests
"""

import copy

import pytest

from gridaware.features.typography_transformer import (
    SYSTEM_FONT_PRESET,
    SYSTEM_FONT_STACK,
    transform_typography,
)

THEME = {
    "settings": {
        "typography": {
            "fontSizes": [{"slug": "small", "size": "13px"}],
            "fontFamilies": [
                {"slug": "inter", "name": "Inter", "fontFamily": "Inter, sans-serif",
                 "fontFace": [{"src": ["file:./fonts/inter.woff2"]}]},
                {"slug": "lora", "name": "Lora", "fontFamily": "Lora, serif"},
                {"slug": "mono", "name": "Fira Code", "fontFamily": "'Fira Code', monospace"},
            ],
        },
        "blocks": {
            "core/heading": {
                "typography": {
                    "fontFamilies": [{"slug": "lobster", "fontFamily": "Lobster",
                                      "fontFace": [{"src": ["file:./fonts/lobster.woff2"]}]}],
                    "fontSizes": [{"slug": "huge", "size": "48px"}],
                }
            }
        },
    },
    "styles": {
        "typography": {"fontFamily": "var:preset|font-family|inter"},
        "elements": {"heading": {"typography": {"fontFamily": "var:preset|font-family|lora"}}},
        "blocks": {"core/code": {"typography": {"fontFamily": "var:preset|font-family|mono"}}},
    },
}


def test_high_collapses_to_system_stack(all_on):
    out = transform_typography(THEME, "high", all_on)

    families = out["settings"]["typography"]["fontFamilies"]
    assert len(families) == 1
    assert families[0]["fontFamily"] == SYSTEM_FONT_STACK
    assert families[0]["slug"] == "system"
    assert families[0]["name"] == "System Font"
    assert SYSTEM_FONT_STACK.endswith("sans-serif")


def test_high_redirects_every_applied_style(all_on):
    out = transform_typography(THEME, "high", all_on)
    styles = out["styles"]

    assert styles["typography"]["fontFamily"] == SYSTEM_FONT_PRESET
    assert styles["elements"]["heading"]["typography"]["fontFamily"] == SYSTEM_FONT_PRESET
    assert styles["blocks"]["core/code"]["typography"]["fontFamily"] == SYSTEM_FONT_PRESET


def test_high_drops_block_scoped_webfonts(all_on):
    out = transform_typography(THEME, "high", all_on)
    heading = out["settings"]["blocks"]["core/heading"]["typography"]

    assert "fontFamilies" not in heading
    assert heading["fontSizes"] == [{"slug": "huge", "size": "48px"}]
    assert "Lobster" not in repr(out)
    assert "woff2" not in repr(out)


def test_high_keeps_unrelated_settings_and_input(all_on):
    before = copy.deepcopy(THEME)
    out = transform_typography(THEME, "high", all_on)

    assert out["settings"]["typography"]["fontSizes"] == THEME["settings"]["typography"]["fontSizes"]
    assert THEME == before


def test_high_on_empty_theme(all_on):
    out = transform_typography({}, "high", all_on)
    assert len(out["settings"]["typography"]["fontFamilies"]) == 1
    assert out["styles"]["typography"]["fontFamily"] == SYSTEM_FONT_PRESET


@pytest.mark.parametrize("tier", ["low", "medium", "live"])
def test_other_tiers_are_identity(tier, all_on):
    assert transform_typography(THEME, tier, all_on) is THEME


def test_disabled_typography_is_identity(all_off):
    assert transform_typography(THEME, "high", all_off) is THEME
