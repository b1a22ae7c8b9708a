"""
main.py — Grid Aware Application Entry Point
=============================================
This file launches the FastAPI application located in gridaware/main.py.
Run from the project root with:

    uvicorn gridaware.main:app --reload --host 0.0.0.0 --port 8000

Or simply:
    python main.py
"""

import uvicorn

from gridaware.config import settings
from gridaware.main import app  # noqa: F401  (re-exported for uvicorn)


if __name__ == "__main__":
    uvicorn.run(
        "gridaware.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower(),
    )
