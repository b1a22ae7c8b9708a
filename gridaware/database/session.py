"""
Grid Aware – Database Session & Models
=======================================
SQLAlchemy async engine, session factory, and ORM model definitions for the
two settings scopes:

  site_options  → Global scope (one row per option name)
  page_options  → PageOverride scope (one row per content item)

SQLite (aiosqlite) for local development, any async driver in production
(switch via DATABASE_URL in .env).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from gridaware.config import settings
from loguru import logger


# ─────────────────────────────────────────────────────────────────────────────
# Async engine + session factory
# ─────────────────────────────────────────────────────────────────────────────

_engine_kwargs: dict[str, Any] = {"echo": settings.app_debug, "future": True}
if not settings.is_sqlite:
    _engine_kwargs.update(
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

engine = create_async_engine(settings.database_url, **_engine_kwargs)

AsyncSessionFactory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


# ─────────────────────────────────────────────────────────────────────────────
# Base declarative model
# ─────────────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """All ORM models inherit from this base."""


# ─────────────────────────────────────────────────────────────────────────────
# ORM Models
# ─────────────────────────────────────────────────────────────────────────────

class SiteOption(Base):
    """Site-wide option, stored as JSON under a unique name."""

    __tablename__ = "site_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class PageOption(Base):
    """Per-content-item override of the feature options."""

    __tablename__ = "page_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(Integer, unique=True, index=True, nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


# ─────────────────────────────────────────────────────────────────────────────
# Initialise tables
# ─────────────────────────────────────────────────────────────────────────────

async def init_db() -> None:
    """Create all tables (idempotent – safe to call on every startup)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables initialised")


# ─────────────────────────────────────────────────────────────────────────────
# FastAPI dependency
# ─────────────────────────────────────────────────────────────────────────────

async def get_db() -> AsyncSession:  # type: ignore[return]
    """Yield an async DB session; roll back on error, close on exit."""
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
