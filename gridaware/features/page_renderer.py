"""
Grid Aware – Page Renderer
===========================
Runs every content block of a page through the transformers with one shared
``RequestContext`` and builds the page chrome that goes with it: body class,
grid info bar with the intensity switcher, the bootstrap script read by the
client runtime, and the inline CSS tweaks.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from gridaware.features.classifier import IntensityTier, tier_value
from gridaware.features.feature_settings import FeatureSettings
from gridaware.features.html_tools import escape_attr, escape_text
from gridaware.features.image_transformer import DimensionLookup, transform_image
from gridaware.features.presentation import DEFAULT_PRESENTATION, PresentationOptions
from gridaware.features.resolver import RequestContext
from gridaware.features.typography_transformer import transform_typography
from gridaware.features.video_transformer import is_youtube_block, transform_video

IMAGE_BLOCK = "core/image"
EMBED_BLOCK = "core/embed"

SWITCHER_TIERS = [
    (IntensityTier.LOW.value, "LOW"),
    (IntensityTier.MEDIUM.value, "MEDIUM"),
    (IntensityTier.HIGH.value, "HIGH"),
]

IMAGES_OFF_CSS = (
    ".grid-intensity-medium .wp-block-image img { filter: none !important; }\n"
    ".grid-aware-image-blurred img { filter: none !important; }\n"
    ".grid-intensity-medium .grid-aware-image-blurred img { filter: none !important; }\n"
)


@dataclass
class RenderedPage:
    blocks: List[Dict[str, Any]]
    body_class: str
    effective_intensity: str
    info_bar: str
    bootstrap_script: str
    inline_css: str = ""
    typography: Optional[Dict[str, Any]] = None
    needs_image_loader: bool = False
    needs_video_loader: bool = False
    uses_lite_youtube: bool = False
    settings: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ─────────────────────────────────────────────────────────────────────────────
# Blocks
# ─────────────────────────────────────────────────────────────────────────────

def render_block(
    block: Mapping[str, Any],
    context: RequestContext,
    presentation: PresentationOptions = DEFAULT_PRESENTATION,
    dimensions: Optional[DimensionLookup] = None,
) -> Dict[str, Any]:
    """Transform one block (``{blockName, attrs, html, innerBlocks}``)."""
    name = block.get("blockName")
    html = block.get("html") or ""

    if name == IMAGE_BLOCK:
        html = transform_image(
            html, context.effective_intensity, context.settings,
            presentation=presentation, dimensions=dimensions,
        )
    elif name == EMBED_BLOCK:
        html = transform_video(
            html, block, context.effective_intensity, context.settings,
            presentation=presentation,
        )

    rendered = dict(block)
    rendered["html"] = html
    inner = block.get("innerBlocks") or []
    if inner:
        rendered["innerBlocks"] = [
            render_block(child, context, presentation, dimensions) for child in inner
        ]
    return rendered


def _walk(blocks: List[Mapping[str, Any]]):
    for block in blocks:
        yield block
        yield from _walk(block.get("innerBlocks") or [])


# ─────────────────────────────────────────────────────────────────────────────
# Page chrome
# ─────────────────────────────────────────────────────────────────────────────

def info_bar_html(context: RequestContext) -> str:
    """Grid info bar with the zone, live intensity label and the tier switcher."""
    reading = context.reading
    zone = reading.zone.upper() if reading and reading.zone else "??"
    label = reading.intensity_level.value.upper() if reading else "UNKNOWN"
    current = context.override or IntensityTier.LOW.value

    toggles = []
    for value, text in SWITCHER_TIERS:
        active = value == current
        toggles.append(
            f'<label class="grid-intensity-toggle{" active" if active else ""}">'
            f'<input type="checkbox" name="grid_intensity" value="{value}"'
            f'{" checked" if active else ""} hidden />'
            f"<span>{text}</span></label>"
        )

    return (
        '<div class="grid-intensity-info-bar">'
        '<div class="grid-info-left">'
        '<span class="grid-info-title">YOUR GRID INFO '
        '<span class="info-tooltip" tabindex="0" data-tooltip="Indicates how polluting '
        'power generation is at your location.">&#8505;</span></span>'
        f'<span class="grid-info-country">{escape_text(zone)}</span>'
        f'<span class="grid-info-intensity-label"><strong>{escape_text(label)} INTENSITY</strong></span>'
        "</div>"
        '<div class="grid-info-right">'
        '<span class="grid-design-title">GRID-AWARE DESIGN '
        '<span class="info-tooltip" tabindex="0" data-tooltip="The layout adapts based on the '
        "grid intensity detected at your location. You can also manually select the "
        'consumption mode.">&#8505;</span></span>'
        '<span class="grid-intensity-toggle-bar"><div class="carbon-switcher-wrapper in-bar">'
        '<div class="grid-intensity-toggle-group" role="group" aria-label="Select grid intensity">'
        + "".join(toggles)
        + "</div></div></span></div></div>"
    )


def _js_value(value: Any) -> str:
    # Safe inside a <script> element
    return json.dumps(value).replace("</", "<\\/")


def bootstrap_script(context: RequestContext) -> str:
    reading = context.reading
    live = reading.intensity_level.value if reading else "unknown"
    return (
        f"window.gridAwareWPSettings = {_js_value(context.settings.public_options())}; "
        f"window.gridAwareWPInitialIntensity = {_js_value(context.effective_intensity)}; "
        f"window.gridAwareWPLiveIntensity = {_js_value(live)};"
    )


def inline_css(settings: FeatureSettings) -> str:
    """Neutralise the medium-tier blur when images are excluded."""
    return "" if settings.images else IMAGES_OFF_CSS


# ─────────────────────────────────────────────────────────────────────────────
# Page
# ─────────────────────────────────────────────────────────────────────────────

def render_page(
    blocks: List[Mapping[str, Any]],
    context: RequestContext,
    presentation: PresentationOptions = DEFAULT_PRESENTATION,
    dimensions: Optional[DimensionLookup] = None,
    typography: Optional[Dict[str, Any]] = None,
) -> RenderedPage:
    rendered = [render_block(block, context, presentation, dimensions) for block in blocks]

    level = tier_value(context.effective_intensity)
    deferring = level in (IntensityTier.HIGH.value, IntensityTier.MEDIUM.value)
    all_blocks = list(_walk(blocks))
    has_images = any(b.get("blockName") == IMAGE_BLOCK for b in all_blocks)
    has_videos = any(
        b.get("blockName") == EMBED_BLOCK and is_youtube_block(b.get("html") or "", b)
        for b in all_blocks
    )

    return RenderedPage(
        blocks=rendered,
        body_class=escape_attr(context.body_class),
        effective_intensity=context.effective_intensity,
        info_bar=info_bar_html(context),
        bootstrap_script=bootstrap_script(context),
        inline_css=inline_css(context.settings),
        typography=(
            transform_typography(typography, context.effective_intensity, context.settings)
            if typography is not None else None
        ),
        needs_image_loader=context.settings.images and deferring and has_images,
        needs_video_loader=context.settings.videos and deferring and has_videos,
        uses_lite_youtube=any(
            "<lite-youtube" in (b.get("html") or "") for b in _walk(rendered)
        ),
        settings=context.settings.public_options(),
    )
