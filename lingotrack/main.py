"""
Main application entry point for the LingoTrack practice tracking backend.

Usage:
    - Direct: python -m lingotrack.main
    - ASGI server: uvicorn lingotrack.main:app
"""

import os
from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lingotrack.api import main_router
from lingotrack.api.dependencies import get_word_tracker, reset_dependencies
from lingotrack.common.logger import app_logger
from lingotrack.config import settings
from lingotrack.database.init_db import close_database, initialize_database
from lingotrack.words.tracker import SessionWordTracker

# Setup module logger
logger = app_logger.getChild("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup and dispose of it on shutdown."""
    logger.info("Application startup sequence initiated.")
    await initialize_database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    yield
    logger.info("Application shutdown sequence initiated.")
    await close_database()
    reset_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Practice streaks and word repetition avoidance",
        version="0.1.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(main_router, prefix="/api")

    @app.get("/health")
    def health(tracker: SessionWordTracker = Depends(get_word_tracker)) -> Dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "word_tracker": tracker.get_stats()}

    logger.info(f"Application created with {len(app.routes)} routes")
    return app


app = create_app()


def main():
    """Run the server."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    reload_enabled = os.getenv("RELOAD", "false").lower() == "true"

    logger.info(f"Starting server on {host}:{port} (reload: {reload_enabled})")
    uvicorn.run("lingotrack.main:app", host=host, port=port, reload=reload_enabled, log_level="info")


if __name__ == "__main__":
    main()
