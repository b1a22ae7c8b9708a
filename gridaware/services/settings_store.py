"""
services/settings_store.py
===========================
Persistence for the Global and PageOverride option scopes, on top of the
async SQLAlchemy session. All merging/sanitising rules live in
``features/feature_settings.py``; this layer only reads and writes rows.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from gridaware.database.session import PageOption, SiteOption
from gridaware.features.feature_settings import (
    DEFAULT_OPTIONS,
    FeatureSettings,
    merge_options,
    sanitize_options,
    sanitize_page_options,
)

GLOBAL_OPTION_NAME = "grid_aware_options"


class SettingsStore:
    """
    Reads and writes feature options.

    Usage:
        store = SettingsStore(session)
        settings = await store.effective(post_id=42)
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── reads ───────────────────────────────────────────────

    async def get_global(self) -> Dict[str, Any]:
        row = await self._global_row()
        if row is None or not isinstance(row.value, dict):
            return dict(DEFAULT_OPTIONS)
        return dict(row.value)

    async def get_page(self, post_id: int) -> Dict[str, Any]:
        """Raw page override (empty dict when the page has none)."""
        row = await self._page_row(post_id)
        if row is None or not isinstance(row.value, dict):
            return {}
        return dict(row.value)

    async def effective_options(self, post_id: Optional[int] = None) -> Dict[str, Any]:
        global_options = await self.get_global()
        if not post_id:
            return merge_options(global_options)
        return merge_options(global_options, await self.get_page(post_id))

    async def effective(self, post_id: Optional[int] = None) -> FeatureSettings:
        return FeatureSettings.from_options(await self.effective_options(post_id))

    # ── writes ──────────────────────────────────────────────

    async def save(self, options: Any, post_id: Optional[int] = None) -> Dict[str, str]:
        """Sanitise and persist one scope.

        Global saves are sanitised against the current Global row. Page saves
        keep only flags, sanitised against the existing page row, so missing
        flags keep following Global. Returns the options exactly as stored.
        """
        if post_id:
            row = await self._page_row(post_id)
            old = row.value if row is not None else None
            sanitized = sanitize_page_options(options, old)
            if row is None:
                self._session.add(PageOption(post_id=post_id, value=sanitized))
            else:
                row.value = dict(sanitized)
            logger.info("Saved page options | post_id={}", post_id)
        else:
            sanitized = sanitize_options(options, await self.get_global())
            row = await self._global_row()
            if row is None:
                self._session.add(SiteOption(name=GLOBAL_OPTION_NAME, value=sanitized))
            else:
                row.value = dict(sanitized)
            logger.info("Saved global options")

        await self._session.flush()
        return sanitized

    async def clear_page(self, post_id: int) -> bool:
        result = await self._session.execute(delete(PageOption).where(PageOption.post_id == post_id))
        await self._session.flush()
        return bool(result.rowcount)

    # ── private helpers ─────────────────────────────────────

    async def _global_row(self) -> Optional[SiteOption]:
        return await self._session.scalar(
            select(SiteOption).where(SiteOption.name == GLOBAL_OPTION_NAME)
        )

    async def _page_row(self, post_id: int) -> Optional[PageOption]:
        return await self._session.scalar(
            select(PageOption).where(PageOption.post_id == post_id)
        )
