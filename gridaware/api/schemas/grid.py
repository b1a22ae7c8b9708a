from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class OptionsResponse(BaseModel):
    images: str
    videos: str
    typography: str
    api_key: str = ""


class SettingsUpdate(BaseModel):
    options: Dict[str, Any] = Field(default_factory=dict)
    post_id: Optional[int] = None


class IntensityReading(BaseModel):
    zone: str
    carbonIntensity: Optional[float] = None
    intensity_level: str
    datetime: str
    is_fallback_zone: bool = False


class TestApiRequest(BaseModel):
    api_key: str = ""
    zone: Optional[str] = None


class TestApiResponse(BaseModel):
    success: bool
    message: str
    data: Optional[IntensityReading] = None


class RenderBlock(BaseModel):
    blockName: Optional[str] = None
    attrs: Dict[str, Any] = Field(default_factory=dict)
    html: str = ""
    innerBlocks: List["RenderBlock"] = Field(default_factory=list)


class RenderRequest(BaseModel):
    post_id: Optional[int] = None
    blocks: List[RenderBlock] = Field(default_factory=list)
    typography: Optional[Dict[str, Any]] = None
    # attachment id → [width, height] of the original upload
    attachments: Dict[int, Tuple[int, int]] = Field(default_factory=dict)


class RenderResponse(BaseModel):
    blocks: List[RenderBlock]
    body_class: str
    effective_intensity: str
    info_bar: str
    bootstrap_script: str
    inline_css: str = ""
    typography: Optional[Dict[str, Any]] = None
    needs_image_loader: bool = False
    needs_video_loader: bool = False
    uses_lite_youtube: bool = False
    settings: Dict[str, str] = Field(default_factory=dict)
