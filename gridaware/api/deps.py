"""
Grid Aware – Shared API Dependencies
=====================================
Process-wide provider singleton plus the per-request wiring that turns an
incoming request into one ``RequestContext``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Request

from gridaware.config import settings
from gridaware.features.events import LoguruEventSink
from gridaware.features.feature_settings import sanitize_text
from gridaware.features.grid_provider import GridIntensityProvider, build_provider
from gridaware.features.presentation import PresentationOptions
from gridaware.features.resolver import IntensityResolver, RequestContext
from gridaware.features.visitor import resolve_visitor_ip
from gridaware.services.settings_store import SettingsStore


@lru_cache(maxsize=1)
def get_provider() -> GridIntensityProvider:
    """Shared provider; its in-memory cache spans requests."""
    return build_provider(settings, events=LoguruEventSink())


def get_presentation() -> PresentationOptions:
    return PresentationOptions.from_settings(settings)


def visitor_ip(request: Request) -> str:
    return resolve_visitor_ip(request.headers, request.client.host if request.client else None)


async def build_request_context(
    request: Request,
    store: SettingsStore,
    provider: GridIntensityProvider,
    override: Optional[str] = None,
    post_id: Optional[int] = None,
) -> RequestContext:
    """Resolve the effective intensity exactly once for this request."""
    feature_settings = await store.effective(post_id)
    api_key = sanitize_text((await store.get_global()).get("api_key") or "")
    resolver = IntensityResolver(provider, events=LoguruEventSink())
    resolved = await resolver.resolve(
        override,
        visitor_ip=visitor_ip(request),
        api_key=api_key or None,
    )
    return RequestContext.from_resolution(resolved, feature_settings, post_id=post_id, override=override)
