"""
Grid Aware – Page renderer tests
"""

from datetime import datetime, timezone

from bs4 import BeautifulSoup

from gridaware.features.classifier import IntensityTier
from gridaware.features.feature_settings import FeatureSettings
from gridaware.features.grid_provider import ProviderReading
from gridaware.features.page_renderer import (
    IMAGES_OFF_CSS,
    bootstrap_script,
    info_bar_html,
    inline_css,
    render_block,
    render_page,
)
from gridaware.features.resolver import RequestContext

IMAGE_BLOCK = {
    "blockName": "core/image",
    "attrs": {"id": 3},
    "html": '<figure class="wp-block-image"><img src="a.jpg" alt="A" class="wp-image-3"/></figure>',
}
VIDEO_BLOCK = {
    "blockName": "core/embed",
    "attrs": {"url": "https://youtu.be/dQw4w9WgXcQ", "providerNameSlug": "youtube"},
    "html": '<figure><iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ?feature=oembed"></iframe></figure>',
}
PARAGRAPH = {"blockName": "core/paragraph", "attrs": {}, "html": "<p>Hello <img src='x.png'></p>"}


def _context(tier="high", settings=None, override=None, reading=None):
    return RequestContext(
        effective_intensity=tier,
        settings=settings or FeatureSettings(api_key="secret"),
        reading=reading,
        override=override,
    )


def _reading():
    return ProviderReading(
        zone="de",
        carbon_intensity=320.0,
        intensity_level=IntensityTier.MEDIUM,
        timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


def test_blocks_are_dispatched_by_name():
    context = _context("high")
    assert "grid-aware-image-placeholder" in render_block(IMAGE_BLOCK, context)["html"]
    assert "grid-aware-video-placeholder" in render_block(VIDEO_BLOCK, context)["html"]
    assert render_block(PARAGRAPH, context)["html"] == PARAGRAPH["html"]


def test_inner_blocks_are_rendered():
    group = {"blockName": "core/group", "attrs": {}, "html": "<div></div>", "innerBlocks": [IMAGE_BLOCK]}
    rendered = render_block(group, _context("high"))
    assert "grid-aware-image-placeholder" in rendered["innerBlocks"][0]["html"]


def test_render_page_shares_one_context():
    page = render_page([IMAGE_BLOCK, VIDEO_BLOCK, PARAGRAPH], _context("medium"))

    assert page.body_class == "grid-intensity-medium"
    assert page.effective_intensity == "medium"
    assert "grid-aware-image-overlay" in page.blocks[0]["html"]
    assert "grid-aware-video-thumbnail" in page.blocks[1]["html"]
    assert page.needs_image_loader is True
    assert page.needs_video_loader is True
    assert page.uses_lite_youtube is False
    assert page.inline_css == ""
    assert page.settings == {"images": "1", "videos": "1", "typography": "1"}


def test_render_page_low_uses_lite_youtube():
    page = render_page([VIDEO_BLOCK], _context("low"))
    assert page.uses_lite_youtube is True
    assert page.needs_video_loader is False


def test_render_page_typography():
    theme = {"settings": {"typography": {"fontFamilies": [{"slug": "a"}, {"slug": "b"}]}}}
    page = render_page([], _context("high"), typography=theme)
    assert len(page.typography["settings"]["typography"]["fontFamilies"]) == 1
    assert render_page([], _context("high")).typography is None


def test_info_bar_with_reading_and_override():
    markup = info_bar_html(_context("high", override="high", reading=_reading()))
    soup = BeautifulSoup(markup, "html.parser")

    assert soup.find(class_="grid-info-country").get_text() == "DE"
    assert soup.find(class_="grid-info-intensity-label").get_text() == "MEDIUM INTENSITY"
    assert "YOUR GRID INFO" in soup.get_text()
    assert "GRID-AWARE DESIGN" in soup.get_text()

    toggles = soup.find_all("label", class_="grid-intensity-toggle")
    assert [t.get_text() for t in toggles] == ["LOW", "MEDIUM", "HIGH"]
    active = [t for t in toggles if "active" in t["class"]]
    assert len(active) == 1 and active[0].find("input")["value"] == "high"
    assert all(t.find("input")["name"] == "grid_intensity" for t in toggles)


def test_info_bar_without_reading_defaults_to_low_switch():
    soup = BeautifulSoup(info_bar_html(_context("low")), "html.parser")
    assert soup.find(class_="grid-info-country").get_text() == "??"
    assert soup.find(class_="grid-info-intensity-label").get_text() == "UNKNOWN INTENSITY"
    active = soup.find("label", class_="active")
    assert active.find("input")["value"] == "low"


def test_bootstrap_script_never_ships_the_api_key():
    script = bootstrap_script(_context("medium", reading=_reading()))
    assert 'window.gridAwareWPInitialIntensity = "medium";' in script
    assert 'window.gridAwareWPLiveIntensity = "medium";' in script
    assert "window.gridAwareWPSettings = " in script
    assert "secret" not in script


def test_inline_css_only_when_images_are_off():
    assert inline_css(FeatureSettings()) == ""
    assert inline_css(FeatureSettings(images=False)) == IMAGES_OFF_CSS
    assert "filter: none !important" in IMAGES_OFF_CSS
