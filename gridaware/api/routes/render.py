"""
Grid Aware – Render Route
==========================
  POST /api/v1/render?grid_intensity=   → blocks transformed for the
                                          effective intensity + page chrome
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gridaware.api.deps import build_request_context, get_presentation, get_provider
from gridaware.api.schemas.grid import RenderRequest, RenderResponse
from gridaware.database.session import get_db
from gridaware.features.grid_provider import GridIntensityProvider
from gridaware.features.page_renderer import render_page
from gridaware.features.presentation import PresentationOptions
from gridaware.services.settings_store import SettingsStore

router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
}


@router.post("/render", response_model=RenderResponse, summary="Render blocks for the grid intensity")
async def render(
    payload: RenderRequest,
    request: Request,
    response: Response,
    grid_intensity: Optional[str] = Query(None, description="low | medium | high | live"),
    db: AsyncSession = Depends(get_db),
    provider: GridIntensityProvider = Depends(get_provider),
    presentation: PresentationOptions = Depends(get_presentation),
) -> RenderResponse:
    context = await build_request_context(
        request,
        SettingsStore(db),
        provider,
        override=grid_intensity,
        post_id=payload.post_id,
    )

    page = render_page(
        [block.model_dump() for block in payload.blocks],
        context,
        presentation=presentation,
        dimensions=payload.attachments.get,
        typography=payload.typography,
    )

    # A forced tier must never be served from a shared cache
    if grid_intensity is not None:
        response.headers.update(NO_CACHE_HEADERS)

    return RenderResponse(**page.to_dict())
