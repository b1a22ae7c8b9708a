"""
Grid Aware – Video Transformer
===============================
YouTube embed blocks only. Every iframe the transformer lets through is
pointed at ``www.youtube-nocookie.com`` with ``rel=0``.

    high    → click-to-load placeholder (original kept in data-original-video)
    medium  → static thumbnail + overlay, or a lazy iframe
    other   → lazy iframe, or a <lite-youtube> element when enabled
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

from gridaware.features.classifier import IntensityTier, tier_value
from gridaware.features.feature_settings import FeatureSettings
from gridaware.features.html_tools import (
    TagCursor,
    escape_attr,
    escape_text,
    parse_fragment,
    rewrite_start_tag,
    splice,
)
from gridaware.features.presentation import (
    DEFAULT_PRESENTATION,
    PresentationOptions,
    VideoMediumMode,
)

MARKER_ATTR = "data-original-video"
NOCOOKIE_HOST = "www.youtube-nocookie.com"
DEFAULT_TITLE = "YouTube video"
THUMBNAIL_ALT = "YouTube video thumbnail"
THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

VIDEO_ID_RE = re.compile(
    r"(?:youtube(?:-nocookie)?\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?|shorts)/|.*[?&]v=)|youtu\.be/)"
    r"([A-Za-z0-9_-]{11})"
)
YOUTUBE_HOST_RE = re.compile(r"youtube(?:-nocookie)?\.com|youtu\.be", re.IGNORECASE)
REL_PARAM_RE = re.compile(r"(?:^|&)rel=")

VIDEO_ICON = (
    '<svg class="placeholder-icon" width="32" height="32" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="1.5" aria-hidden="true">'
    '<rect x="2" y="5" width="20" height="14" rx="3"/><path d="M10 9l5 3-5 3z"/></svg>'
)


# ─────────────────────────────────────────────────────────────────────────────
# URL helpers
# ─────────────────────────────────────────────────────────────────────────────

def extract_video_id(url: Optional[str]) -> Optional[str]:
    """11-character YouTube id from any watch / embed / short / shorts URL."""
    if not url:
        return None
    match = VIDEO_ID_RE.search(url)
    return match.group(1) if match else None


def to_nocookie_url(src: str) -> str:
    """Point a YouTube URL at the cookie-less host and add ``rel=0``.

    Non-YouTube URLs are returned unchanged.
    """
    parts = urlsplit(src)
    host = (parts.hostname or "").lower()

    if host == "youtu.be":
        path = "/embed" + parts.path
    elif host in ("youtube.com", NOCOOKIE_HOST, "youtube-nocookie.com") or host.endswith(".youtube.com"):
        path = parts.path
    else:
        return src

    query = parts.query
    if REL_PARAM_RE.search(query):
        pass
    elif query.startswith("feature=oembed"):
        query = query.replace("feature=oembed", "feature=oembed&rel=0", 1)
    elif query:
        query += "&rel=0"
    else:
        query = "rel=0"

    return urlunsplit((parts.scheme or "https", NOCOOKIE_HOST, path, query, parts.fragment))


def _block_attrs(block_metadata: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not block_metadata:
        return {}
    attrs = block_metadata.get("attrs")
    return attrs if isinstance(attrs, Mapping) else {}


def is_youtube_block(fragment: str, block_metadata: Optional[Mapping[str, Any]] = None) -> bool:
    attrs = _block_attrs(block_metadata)
    provider = str(attrs.get("providerNameSlug") or "").lower()
    if provider == "youtube":
        return True
    if YOUTUBE_HOST_RE.search(str(attrs.get("url") or "")):
        return True
    return bool(YOUTUBE_HOST_RE.search(fragment or ""))


# ─────────────────────────────────────────────────────────────────────────────
# Fragment rewrites
# ─────────────────────────────────────────────────────────────────────────────

def _rewrite_iframes(fragment: str, lazy: bool) -> str:
    soup = parse_fragment(fragment)
    cursor = TagCursor(fragment)
    replacements = []
    for iframe in soup.find_all("iframe"):
        changes = {}
        src = iframe.get("src")
        if src and YOUTUBE_HOST_RE.search(src):
            new_src = to_nocookie_url(src)
            if new_src != src:
                changes["src"] = new_src
        if lazy and not iframe.has_attr("loading"):
            changes["loading"] = "lazy"
        if changes:
            replacements.append(rewrite_start_tag(cursor, iframe, **changes))
    return splice(fragment, replacements) if replacements else fragment


def privacy_rewrite(fragment: str) -> str:
    """Rewrite every YouTube iframe src to the cookie-less host."""
    return _rewrite_iframes(fragment, lazy=False)


def lite_youtube_html(video_id: str, title: Optional[str] = None) -> str:
    title = title or DEFAULT_TITLE
    return (
        f'<lite-youtube videoid="{escape_attr(video_id)}" '
        f'style="width:100%;aspect-ratio:16/9;" title="{escape_attr(title)}"></lite-youtube>'
    )


def placeholder_html(rewritten: str, title: str, style: str) -> str:
    title_html = f'<div class="placeholder-title">{escape_text(title)}</div>' if title else ""
    return (
        f'<div class="grid-aware-video-placeholder" {MARKER_ATTR}="{escape_attr(rewritten)}" '
        f'style="{escape_attr(style)}" onclick="gridAwareWPLoadVideo(this)">'
        f'<div class="placeholder-content">'
        f"{VIDEO_ICON}"
        f"{title_html}"
        f'<div class="placeholder-description">This video hasn\'t been loaded due to the '
        f"<strong>high grid intensity.</strong></div>"
        f'<button class="placeholder-load-btn" type="button">LOAD VIDEO</button>'
        f"</div></div>"
    )


def thumbnail_html(rewritten: str, video_id: str, title: str, style: str) -> str:
    alt = title or THUMBNAIL_ALT
    thumbnail = THUMBNAIL_URL.format(video_id=video_id)
    title_html = f'<div class="placeholder-alt">{escape_text(title)}</div>' if title else ""
    return (
        f'<div class="grid-aware-video-thumbnail" {MARKER_ATTR}="{escape_attr(rewritten)}" '
        f'style="{escape_attr(style)}" onclick="gridAwareWPLoadVideo(this)">'
        f'<img src="{escape_attr(thumbnail)}" alt="{escape_attr(alt)}" loading="lazy" />'
        f'<div class="medium-overlay">'
        f"{title_html}"
        f'<div class="placeholder-description">This video has been loaded in low quality due to the '
        f"<strong>medium grid intensity.</strong></div>"
        f'<button class="placeholder-load-btn" type="button">Load video</button>'
        f"</div></div>"
    )


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

def transform_video(
    fragment: str,
    block_metadata: Optional[Mapping[str, Any]],
    tier,
    settings: FeatureSettings,
    presentation: PresentationOptions = DEFAULT_PRESENTATION,
) -> str:
    if not settings.videos or not fragment or not is_youtube_block(fragment, block_metadata):
        return fragment

    soup = parse_fragment(fragment)
    if soup.find(attrs={MARKER_ATTR: True}) is not None or soup.find("lite-youtube") is not None:
        return fragment

    attrs = _block_attrs(block_metadata)
    iframe = soup.find("iframe")
    src = iframe.get("src") if iframe is not None else None
    video_id = extract_video_id(str(attrs.get("url") or "")) or extract_video_id(src)
    title = str(attrs.get("title") or (iframe.get("title") if iframe is not None else "") or "")
    iframe_style = str(iframe.get("style") or "") if iframe is not None else ""

    level = tier_value(tier)
    if level == IntensityTier.HIGH.value:
        width = re.match(r"\s*(\d+)", str(iframe.get("width") or "")) if iframe is not None else None
        style = f"--video-width: {width.group(1) + 'px' if width else '100%'}; "
        if iframe_style:
            style += iframe_style.rstrip("; ") + "; "
        return placeholder_html(privacy_rewrite(fragment), title, style)

    if level == IntensityTier.MEDIUM.value:
        if video_id and presentation.video_medium_mode == VideoMediumMode.THUMBNAIL:
            style = "--video-width: 100%; "
            if iframe_style:
                style += iframe_style.rstrip("; ") + "; "
            return thumbnail_html(privacy_rewrite(fragment), video_id, title, style)
        return _rewrite_iframes(fragment, lazy=True)

    if video_id and presentation.lite_youtube:
        return lite_youtube_html(video_id, title or None)
    return _rewrite_iframes(fragment, lazy=True)
