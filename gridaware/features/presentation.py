"""
Presentation variants for medium-tier content. The transformers keep their
extraction, gating and privacy rules fixed; only the markup style switches.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ImageMediumMode(str, Enum):
    OVERLAY = "overlay"   # image visible, always-on overlay with load affordance
    BLUR = "blur"         # image blurred by CSS until loaded


class VideoMediumMode(str, Enum):
    THUMBNAIL = "thumbnail"   # static YouTube thumbnail + overlay
    IFRAME = "iframe"         # lazy, cookie-less iframe


@dataclass(frozen=True)
class PresentationOptions:
    image_medium_mode: ImageMediumMode = ImageMediumMode.OVERLAY
    video_medium_mode: VideoMediumMode = VideoMediumMode.THUMBNAIL
    lite_youtube: bool = True

    @classmethod
    def from_settings(cls, app_settings) -> "PresentationOptions":
        return cls(
            image_medium_mode=ImageMediumMode(app_settings.image_medium_mode),
            video_medium_mode=VideoMediumMode(app_settings.video_medium_mode),
            lite_youtube=app_settings.lite_youtube,
        )


DEFAULT_PRESENTATION = PresentationOptions()
