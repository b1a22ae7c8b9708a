"""
Grid Aware – Application Entry Point
=====================================
Bootstraps the FastAPI server, configures logging via Loguru,
sets up middleware, mounts routers and the client runtime, and wires up
lifespan events.

Run:
    uvicorn gridaware.main:app --reload          # development
    uvicorn gridaware.main:app --workers 4        # production
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from gridaware.api.deps import get_provider
from gridaware.api.middleware.request_logging import RequestLoggingMiddleware
from gridaware.api.routes import health, intensity, render
from gridaware.api.routes import settings as settings_routes
from gridaware.config import settings
from gridaware.database.session import init_db

FRONTEND_DIR = Path(__file__).resolve().parent / "frontend"


# ─────────────────────────────────────────────────────────────────────────────
# Logging setup (Loguru)
# ─────────────────────────────────────────────────────────────────────────────
def _configure_logging() -> None:
    """Remove default Loguru sink, add console + rotating file sink."""
    logger.remove()

    fmt_console = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{line}</cyan> – {message}"
    )
    logger.add(sys.stderr, format=fmt_console, level=settings.log_level, colorize=True)

    logger.add(
        settings.log_file,
        level=settings.log_level,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        encoding="utf-8",
        enqueue=True,
        backtrace=True,
        diagnose=not settings.is_production,
    )

    logger.info(
        "Logging initialised | env={} | level={}",
        settings.app_env,
        settings.log_level,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Lifespan – startup / shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    logger.info("Starting up {}…", settings.app_name)

    await init_db()
    logger.info(
        "Intensity backend={} | fallback zone={} | cache ttl={}s",
        settings.intensity_backend,
        settings.fallback_zone,
        settings.intensity_cache_ttl,
    )
    logger.info("{} is live on {}:{}", settings.app_name, settings.app_host, settings.app_port)

    yield

    logger.info("Graceful shutdown initiated…")
    get_provider().cache.clear()
    logger.info("{} stopped.", settings.app_name)


# ─────────────────────────────────────────────────────────────────────────────
# FastAPI application factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    app = FastAPI(
        title=settings.app_name,
        description=(
            "Grid-aware content delivery: resolves the visitor's grid carbon "
            "intensity and adapts images, videos and typography to it."
        ),
        version="1.0.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── API Routers ───────────────────────────────────────────────────────────
    app.include_router(health.router,          prefix="/api/v1/health",   tags=["Health"])
    app.include_router(settings_routes.router, prefix="/api/v1/settings", tags=["Settings"])
    app.include_router(intensity.router,       prefix="/api/v1",          tags=["Intensity"])
    app.include_router(render.router,          prefix="/api/v1",          tags=["Render"])

    # ── Client runtime ───────────────────────────────────────────────────────
    if FRONTEND_DIR.exists():
        app.mount("/static", StaticFiles(directory=str(FRONTEND_DIR)), name="static")
    else:
        logger.error("Frontend directory not found at {}", FRONTEND_DIR)

    return app


# ── Module-level app instance (used by uvicorn) ──────────────────────────────
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gridaware.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower(),
    )
