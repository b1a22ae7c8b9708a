"""
Grid Aware – Video transformer tests
"""

import html
import re
from urllib.parse import parse_qs, urlsplit

import pytest
from bs4 import BeautifulSoup

from gridaware.features.presentation import PresentationOptions, VideoMediumMode
from gridaware.features.video_transformer import (
    extract_video_id,
    lite_youtube_html,
    privacy_rewrite,
    to_nocookie_url,
    transform_video,
)

VIDEO_ID = "dQw4w9WgXcQ"
EMBED = (
    '<figure class="wp-block-embed is-type-video is-provider-youtube wp-block-embed-youtube">'
    '<div class="wp-block-embed__wrapper">'
    '<iframe title="Never Gonna Give You Up" width="640" height="360" '
    f'src="https://www.youtube.com/embed/{VIDEO_ID}?feature=oembed" '
    'frameborder="0" style="border-radius: 4px" allowfullscreen></iframe>'
    "</div></figure>"
)
BLOCK = {
    "blockName": "core/embed",
    "attrs": {
        "url": f"https://www.youtube.com/watch?v={VIDEO_ID}",
        "providerNameSlug": "youtube",
    },
}
NO_LITE = PresentationOptions(lite_youtube=False)


def _original(markup):
    match = re.search(r'data-original-video="([^"]*)"', markup)
    assert match, "data-original-video missing"
    return html.unescape(match.group(1))


# ─────────────────────────────────────────────────────────────────────────────
# URL helpers
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "url",
    [
        f"https://www.youtube.com/watch?v={VIDEO_ID}",
        f"https://youtu.be/{VIDEO_ID}",
        f"https://www.youtube.com/embed/{VIDEO_ID}?feature=oembed",
        f"https://www.youtube.com/shorts/{VIDEO_ID}",
        f"https://www.youtube.com/watch?feature=share&v={VIDEO_ID}",
    ],
)
def test_extract_video_id(url):
    assert extract_video_id(url) == VIDEO_ID


@pytest.mark.parametrize("url", [None, "", "https://vimeo.com/123456", "https://www.youtube.com/watch?v=short"])
def test_extract_video_id_misses(url):
    assert extract_video_id(url) is None


def test_nocookie_oembed_query():
    url = to_nocookie_url(f"https://www.youtube.com/embed/{VIDEO_ID}?feature=oembed")
    parts = urlsplit(url)
    assert parts.netloc == "www.youtube-nocookie.com"
    assert parts.path == f"/embed/{VIDEO_ID}"
    assert parts.query == "feature=oembed&rel=0"


def test_nocookie_other_query_and_no_query():
    assert to_nocookie_url(f"https://www.youtube.com/embed/{VIDEO_ID}?start=30") == (
        f"https://www.youtube-nocookie.com/embed/{VIDEO_ID}?start=30&rel=0"
    )
    assert to_nocookie_url(f"https://www.youtube.com/embed/{VIDEO_ID}") == (
        f"https://www.youtube-nocookie.com/embed/{VIDEO_ID}?rel=0"
    )


def test_nocookie_short_link_and_idempotence():
    once = to_nocookie_url(f"https://youtu.be/{VIDEO_ID}")
    assert once == f"https://www.youtube-nocookie.com/embed/{VIDEO_ID}?rel=0"
    assert to_nocookie_url(once) == once


def test_nocookie_leaves_other_hosts_alone():
    assert to_nocookie_url("https://player.vimeo.com/video/1") == "https://player.vimeo.com/video/1"


def test_privacy_rewrite_touches_only_src():
    out = privacy_rewrite(EMBED)
    iframe = BeautifulSoup(out, "html.parser").find("iframe")

    assert iframe["src"] == f"https://www.youtube-nocookie.com/embed/{VIDEO_ID}?feature=oembed&rel=0"
    assert iframe["title"] == "Never Gonna Give You Up"
    assert iframe.has_attr("allowfullscreen")
    assert not iframe.has_attr("loading")
    assert out.startswith('<figure class="wp-block-embed')


# ─────────────────────────────────────────────────────────────────────────────
# Tiers
# ─────────────────────────────────────────────────────────────────────────────

def test_high_placeholder(all_on):
    out = transform_video(EMBED, BLOCK, "high", all_on)
    soup = BeautifulSoup(out, "html.parser")
    placeholder = soup.find("div", class_="grid-aware-video-placeholder")

    assert placeholder is not None
    assert soup.find("iframe") is None
    assert placeholder["onclick"] == "gridAwareWPLoadVideo(this)"
    assert placeholder["style"] == "--video-width: 640px; border-radius: 4px; "
    assert "Never Gonna Give You Up" in placeholder.get_text()
    assert "LOAD VIDEO" in placeholder.get_text()

    original = _original(out)
    assert "www.youtube-nocookie.com" in original
    assert "www.youtube.com/embed" not in original
    assert original == privacy_rewrite(EMBED)


def test_high_uses_block_title(all_on):
    block = {"attrs": {**BLOCK["attrs"], "title": "Block title"}}
    out = transform_video(EMBED, block, "high", all_on)
    assert "Block title" in BeautifulSoup(out, "html.parser").get_text()


def test_medium_thumbnail(all_on):
    out = transform_video(EMBED, BLOCK, "medium", all_on)
    soup = BeautifulSoup(out, "html.parser")
    thumb = soup.find("div", class_="grid-aware-video-thumbnail")

    assert thumb is not None
    assert thumb.find("img")["src"] == f"https://img.youtube.com/vi/{VIDEO_ID}/maxresdefault.jpg"
    assert thumb.find("img")["alt"] == "Never Gonna Give You Up"
    assert "Load video" in thumb.get_text()
    assert thumb.find("div", class_="placeholder-alt").get_text() == "Never Gonna Give You Up"
    assert soup.find("iframe") is None
    assert "www.youtube-nocookie.com" in _original(out)


def test_medium_thumbnail_without_title_has_no_title_line(all_on):
    fragment = f'<iframe src="https://www.youtube.com/embed/{VIDEO_ID}"></iframe>'
    out = transform_video(fragment, BLOCK, "medium", all_on)
    soup = BeautifulSoup(out, "html.parser")
    assert soup.find("div", class_="grid-aware-video-thumbnail") is not None
    assert soup.find("div", class_="placeholder-alt") is None


def test_medium_without_id_falls_back_to_lazy_iframe(all_on):
    fragment = '<iframe src="https://www.youtube.com/embed?listType=playlist&list=PL123"></iframe>'
    out = transform_video(fragment, {"attrs": {}}, "medium", all_on)
    iframe = BeautifulSoup(out, "html.parser").find("iframe")

    assert iframe["loading"] == "lazy"
    assert iframe["src"] == "https://www.youtube-nocookie.com/embed?listType=playlist&list=PL123&rel=0"


def test_medium_iframe_mode(all_on):
    options = PresentationOptions(video_medium_mode=VideoMediumMode.IFRAME)
    out = transform_video(EMBED, BLOCK, "medium", all_on, presentation=options)
    iframe = BeautifulSoup(out, "html.parser").find("iframe")
    assert iframe["loading"] == "lazy"
    assert "youtube-nocookie" in iframe["src"]


def test_low_lite_youtube(all_on):
    out = transform_video(EMBED, BLOCK, "low", all_on)
    assert out == lite_youtube_html(VIDEO_ID, "Never Gonna Give You Up")
    lite = BeautifulSoup(out, "html.parser").find("lite-youtube")
    assert lite["videoid"] == VIDEO_ID


def test_low_without_lite_youtube(all_on):
    out = transform_video(EMBED, BLOCK, "live", all_on, presentation=NO_LITE)
    iframe = BeautifulSoup(out, "html.parser").find("iframe")

    assert iframe["loading"] == "lazy"
    query = parse_qs(urlsplit(iframe["src"]).query)
    assert query["rel"] == ["0"]
    assert urlsplit(iframe["src"]).netloc == "www.youtube-nocookie.com"


def test_lite_youtube_default_title():
    assert 'title="YouTube video"' in lite_youtube_html(VIDEO_ID)


@pytest.mark.parametrize("tier", ["high", "medium", "low"])
def test_transform_is_idempotent(tier, all_on):
    once = transform_video(EMBED, BLOCK, tier, all_on)
    assert transform_video(once, BLOCK, tier, all_on) == once


@pytest.mark.parametrize("tier", ["high", "medium", "low"])
def test_disabled_videos_are_untouched(tier, all_off):
    assert transform_video(EMBED, BLOCK, tier, all_off) == EMBED


def test_non_youtube_embeds_are_untouched(all_on):
    fragment = '<figure class="wp-block-embed"><iframe src="https://player.vimeo.com/video/1"></iframe></figure>'
    block = {"attrs": {"url": "https://vimeo.com/1", "providerNameSlug": "vimeo"}}
    assert transform_video(fragment, block, "high", all_on) == fragment
