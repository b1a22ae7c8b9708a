"""
Grid Aware – Settings Routes
=============================
  GET  /api/v1/settings?post_id=   → effective options (page over global)
  POST /api/v1/settings            → sanitise + persist, echo the effective options
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gridaware.api.schemas.grid import OptionsResponse, SettingsUpdate
from gridaware.database.session import get_db
from gridaware.services.settings_store import SettingsStore

router = APIRouter()


@router.get("", response_model=OptionsResponse, summary="Current feature settings")
async def get_settings(
    post_id: Optional[int] = Query(None, description="Page whose override to apply"),
    db: AsyncSession = Depends(get_db),
) -> OptionsResponse:
    options = await SettingsStore(db).effective_options(post_id)
    return OptionsResponse(**options)


@router.post("", response_model=OptionsResponse, summary="Update feature settings")
async def update_settings(
    payload: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
) -> OptionsResponse:
    store = SettingsStore(db)
    await store.save(payload.options, post_id=payload.post_id)
    await db.commit()
    return OptionsResponse(**await store.effective_options(payload.post_id))
