"""
Grid Aware – Feature Settings
==============================
The feature switches consumed by the transformers, in the two shapes they
take: the persisted option dict (string booleans "0"/"1" for storage-format
compatibility) and the typed ``FeatureSettings`` value.

Scopes:
  Global        site-wide default
  PageOverride  per content item; each flag present wins over Global, each
                missing flag falls back to Global (see ``merge_options``).
                The api_key lives on Global only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

FLAG_KEYS = ("images", "videos", "typography")

DEFAULT_OPTIONS: Dict[str, str] = {
    "images": "1",
    "videos": "1",
    "typography": "1",
    "api_key": "",
}

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"[\x00-\x1f\x7f]+|\s{2,}")


def _coerce_flag(value: Any) -> Optional[str]:
    """Return "0"/"1" for recognised flag values, else None."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int) and value in (0, 1):
        return str(value)
    if isinstance(value, str) and value in ("0", "1"):
        return value
    return None


def sanitize_text(value: Any) -> str:
    """Strip tags, control characters and surrounding whitespace."""
    text = _TAG_RE.sub("", str(value))
    text = _WS_RE.sub(" ", text)
    return text.strip()


def sanitize_options(new: Any, old: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
    """
    Coerce an incoming options payload into the persisted shape.

    Never fails: invalid or missing flags keep the ``old`` value (or the
    default), a missing api_key keeps the old key.
    """
    new = new if isinstance(new, Mapping) else {}
    old = old if isinstance(old, Mapping) else {}

    sanitized: Dict[str, str] = {}
    for key in FLAG_KEYS:
        flag = _coerce_flag(new.get(key))
        if flag is None:
            flag = _coerce_flag(old.get(key))
        sanitized[key] = flag if flag is not None else DEFAULT_OPTIONS[key]

    if new.get("api_key") is not None:
        sanitized["api_key"] = sanitize_text(new["api_key"])
    else:
        sanitized["api_key"] = sanitize_text(old.get("api_key") or DEFAULT_OPTIONS["api_key"])

    return sanitized


def sanitize_page_options(new: Any, old: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
    """
    Coerce a page override payload. Only flags are kept: those the payload
    validly supplies, plus those already on the page. The api_key is a
    Global-only option and is never stored per page.
    """
    new = new if isinstance(new, Mapping) else {}
    old = old if isinstance(old, Mapping) else {}

    sanitized: Dict[str, str] = {}
    for key in FLAG_KEYS:
        flag = _coerce_flag(new.get(key))
        if flag is None:
            flag = _coerce_flag(old.get(key))
        if flag is not None:
            sanitized[key] = flag
    return sanitized


def merge_options(
    global_options: Optional[Mapping[str, Any]],
    page_options: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Overlay a page override on the global options, flag by flag.

    The api_key always comes from Global.
    """
    merged: Dict[str, Any] = dict(DEFAULT_OPTIONS)
    global_options = global_options or {}
    for key in DEFAULT_OPTIONS:
        if global_options.get(key) is not None:
            merged[key] = global_options[key]
    for key in FLAG_KEYS:
        value = (page_options or {}).get(key)
        if value is not None:
            merged[key] = value
    return merged


@dataclass(frozen=True)
class FeatureSettings:
    """Typed feature switches for one request."""
    images: bool = True
    videos: bool = True
    typography: bool = True
    api_key: str = ""

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "FeatureSettings":
        return cls(
            images=_coerce_flag(options.get("images")) == "1",
            videos=_coerce_flag(options.get("videos")) == "1",
            typography=_coerce_flag(options.get("typography")) == "1",
            api_key=str(options.get("api_key") or "").strip(),
        )

    def to_options(self) -> Dict[str, str]:
        return {
            "images": "1" if self.images else "0",
            "videos": "1" if self.videos else "0",
            "typography": "1" if self.typography else "0",
            "api_key": self.api_key,
        }

    def public_options(self) -> Dict[str, str]:
        """Options safe to ship to the browser (no credential)."""
        options = self.to_options()
        options.pop("api_key")
        return options
