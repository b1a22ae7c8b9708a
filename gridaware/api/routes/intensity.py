"""
Grid Aware – Intensity Routes
==============================
  GET  /api/v1/intensity?zone=   → current reading (public)
  POST /api/v1/test-api          → check an API key against the upstream
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from gridaware.api.deps import get_provider, visitor_ip
from gridaware.api.schemas.grid import IntensityReading, TestApiRequest, TestApiResponse
from gridaware.database.session import get_db
from gridaware.exceptions import ProviderError
from gridaware.features.feature_settings import sanitize_text
from gridaware.features.grid_provider import GridIntensityProvider
from gridaware.services.settings_store import SettingsStore

router = APIRouter()


@router.get("/intensity", response_model=IntensityReading, summary="Current grid intensity")
async def get_intensity(
    request: Request,
    zone: Optional[str] = Query(None, description="Zone code, e.g. DE or US-CAL-CISO"),
    db: AsyncSession = Depends(get_db),
    provider: GridIntensityProvider = Depends(get_provider),
) -> IntensityReading:
    stored = await SettingsStore(db).effective()
    try:
        reading = await provider.fetch(
            zone=zone or None,
            api_key=stored.api_key or None,
            visitor_ip=visitor_ip(request),
        )
    except ProviderError as exc:
        logger.warning("Intensity lookup failed | code={} | {}", exc.code, exc.message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict())
    return IntensityReading(**reading.to_dict())


@router.post("/test-api", response_model=TestApiResponse, summary="Test an Electricity Maps API key")
async def test_api_connection(
    payload: TestApiRequest,
    request: Request,
    provider: GridIntensityProvider = Depends(get_provider),
) -> TestApiResponse:
    api_key = sanitize_text(payload.api_key)
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "missing_api_key", "message": "API key is required."},
        )

    try:
        reading = await provider.fetch(
            zone=payload.zone or None,
            api_key=api_key,
            visitor_ip=visitor_ip(request),
        )
    except ProviderError as exc:
        logger.info("API key test failed | code={}", exc.code)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict())

    return TestApiResponse(
        success=True,
        message="API connection successful.",
        data=IntensityReading(**reading.to_dict()),
    )
