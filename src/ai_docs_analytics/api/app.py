"""
Application factory for the analytics API.

Run with:
    uvicorn ai_docs_analytics.api.app:create_app --factory
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.settings import Settings, get_settings
from ..storage import StorageBackend
from .deps import backend_from_settings
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    backend: StorageBackend | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings (loaded from config/env if None)
        backend: Storage backend (created from settings if None); a backend
                 passed in is initialized but not closed by the app

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    for error in settings.validate():
        logger.warning(f"Configuration: {error}")

    owns_backend = backend is None
    backend = backend or backend_from_settings(settings)
    backend.initialize()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_backend:
            backend.close()

    app = FastAPI(
        title="AI Docs Analytics",
        description="Visitor classification and analytics for documentation sites",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.backend = backend

    app.include_router(router, tags=["Analytics"])

    logger.info(f"Analytics API ready ({backend.backend_type} backend)")
    return app
