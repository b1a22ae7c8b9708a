"""
Grid Aware – Image Transformer
===============================
Rewrites an image block fragment for the effective intensity:

    high    → image replaced by a click-to-load placeholder
    medium  → image wrapped in an overlay / blur container
    other   → image kept, native lazy loading added

The original fragment is always kept, HTML-escaped, in ``data-original-image``
so the client runtime can restore it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from gridaware.features.classifier import IntensityTier, tier_value
from gridaware.features.feature_settings import FeatureSettings
from gridaware.features.html_tools import (
    TagCursor,
    escape_attr,
    escape_text,
    lazy_load,
    parse_fragment,
    splice,
)
from gridaware.features.presentation import (
    DEFAULT_PRESENTATION,
    ImageMediumMode,
    PresentationOptions,
)

MARKER_ATTR = "data-original-image"
ATTACHMENT_CLASS = re.compile(r"wp-image-(\d+)")
NO_ALT_TEXT = "No ALT text was provided"

IMAGE_ICON = (
    '<svg class="placeholder-icon" width="32" height="32" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="1.5" aria-hidden="true">'
    '<rect x="3" y="4" width="18" height="16" rx="2"/>'
    '<circle cx="9" cy="10" r="2"/><path d="M21 17l-5-5-9 8"/></svg>'
)

_MEDIUM_CLASSES = {
    ImageMediumMode.OVERLAY: "grid-aware-image-overlay",
    ImageMediumMode.BLUR: "grid-aware-image-blurred",
}

# attachment_id → (width, height) of the original upload, or None
DimensionLookup = Callable[[int], Optional[Tuple[int, int]]]


@dataclass
class ImageDetails:
    alt: str = ""
    caption: str = ""
    displayed_width: str = "100%"
    aspect_ratio: str = ""
    attachment_id: Optional[int] = None

    @property
    def style(self) -> str:
        style = f"--image-width: {self.displayed_width}; "
        if self.aspect_ratio:
            style += f"--aspect-ratio: {self.aspect_ratio}; "
        return style


def _int_attr(value) -> Optional[int]:
    match = re.match(r"\s*(\d+)", str(value or ""))
    return int(match.group(1)) if match else None


def extract_image_details(fragment: str, dimensions: Optional[DimensionLookup] = None) -> Optional[ImageDetails]:
    """Pull alt, caption and sizing hints out of an image fragment."""
    soup = parse_fragment(fragment)
    img = soup.find("img")
    if img is None:
        return None

    details = ImageDetails(alt=str(img.get("alt") or "").strip())

    figcaption = soup.find("figcaption")
    if figcaption is not None:
        details.caption = figcaption.decode_contents().strip()

    width = _int_attr(img.get("width"))
    height = _int_attr(img.get("height"))
    if width:
        details.displayed_width = f"{width}px"

    match = ATTACHMENT_CLASS.search(" ".join(img.get("class") or [])) or ATTACHMENT_CLASS.search(fragment)
    if match:
        details.attachment_id = int(match.group(1))

    original = dimensions(details.attachment_id) if (dimensions and details.attachment_id) else None
    if original and original[0] and original[1]:
        details.aspect_ratio = f"{original[0]} / {original[1]}"
    elif width and height:
        details.aspect_ratio = f"{width} / {height}"
    return details


# ─────────────────────────────────────────────────────────────────────────────
# Markup builders
# ─────────────────────────────────────────────────────────────────────────────

def placeholder_html(fragment: str, details: ImageDetails) -> str:
    alt = escape_text(details.alt) if details.alt else NO_ALT_TEXT
    caption = f'<div class="placeholder-caption">{details.caption}</div>' if details.caption else ""
    return (
        f'<div class="grid-aware-image-placeholder" {MARKER_ATTR}="{escape_attr(fragment)}" '
        f'style="{escape_attr(details.style)}" onclick="gridAwareWPLoadImage(this)">'
        f'<div class="placeholder-content">'
        f"{IMAGE_ICON}"
        f'<div class="placeholder-alt">{alt}</div>'
        f"{caption}"
        f'<div class="placeholder-description">This image hasn\'t been loaded due to the '
        f"<strong>high grid intensity.</strong></div>"
        f'<button class="placeholder-load-btn" type="button">LOAD IMAGE</button>'
        f"</div></div>"
    )


def medium_html(fragment: str, details: ImageDetails, mode: ImageMediumMode) -> str:
    alt = f'<div class="placeholder-alt">{escape_text(details.alt)}</div>' if details.alt else ""
    return (
        f'<div class="{_MEDIUM_CLASSES[mode]}" {MARKER_ATTR}="{escape_attr(fragment)}" '
        f'onclick="gridAwareWPLoadImage(this)">'
        f"{fragment}"
        f'<div class="medium-overlay">'
        f"{alt}"
        f'<div class="placeholder-description">This image has been loaded in low quality due to the '
        f"<strong>medium grid intensity.</strong></div>"
        f'<button class="placeholder-load-btn" type="button">Load full quality image</button>'
        f"</div></div>"
    )


def _image_elements(soup) -> list:
    """Outermost image elements: each <img>, or the <picture> wrapping it."""
    elements = []
    for img in soup.find_all("img"):
        picture = img.find_parent("picture")
        element = picture if picture is not None else img
        if not any(element is seen for seen in elements):
            elements.append(element)
    return elements


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

def transform_image(
    fragment: str,
    tier,
    settings: FeatureSettings,
    presentation: PresentationOptions = DEFAULT_PRESENTATION,
    dimensions: Optional[DimensionLookup] = None,
) -> str:
    if not settings.images or not fragment:
        return fragment

    soup = parse_fragment(fragment)
    img = soup.find("img")
    # Nothing to do, or already transformed on an earlier pass
    if img is None or soup.find(attrs={MARKER_ATTR: True}) is not None:
        return fragment

    level = tier_value(tier)
    if level == IntensityTier.HIGH.value:
        details = extract_image_details(fragment, dimensions)
        cursor = TagCursor(fragment)
        removed = [cursor.element_span(element) for element in _image_elements(soup)]
        figcaption = soup.find("figcaption")
        if figcaption is not None:
            start, end = cursor.element_span(figcaption)
            removed = [span for span in removed if not (start <= span[0] and span[1] <= end)]
            removed.append((start, end))
        removed.sort()
        # First image (or the caption holding it) becomes the placeholder
        first = removed[0]
        replacements = [(first[0], first[1], placeholder_html(fragment, details))]
        replacements += [(start, end, "") for start, end in removed[1:]]
        return splice(fragment, replacements)

    if level == IntensityTier.MEDIUM.value:
        details = extract_image_details(fragment, dimensions)
        return medium_html(fragment, details, presentation.image_medium_mode)

    return lazy_load(fragment, "img")
