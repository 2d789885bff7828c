"""
Bill Search Server Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and acts as the composition root for
the search service.

Design Goals
------------
- One BillSearchService per application, created in the lifespan
- Explicit dispose on shutdown
- Centralized router registration
- Test-friendly via create_app(search_service=...)
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from . import __version__
from .config import settings
from .core.errors import register_exception_handlers
from .embeddings.embedder import Embedder
from .embeddings.index import VectorIndex
from .embeddings.lifecycle import BillSearchService
from .logging_setup import configure_logging
from .sources.congress import CongressClient

from .api import (
    search_routes,
    health_routes,
)


logger = logging.getLogger("legis.app")


def build_search_service() -> BillSearchService:
    """
    Wire the default service: Congress.gov bills, Gemini (or hashed)
    embeddings, an empty in-memory index.
    """
    return BillSearchService(
        source=CongressClient(),
        embedder=Embedder(),
        index=VectorIndex(),
    )


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(search_service: Optional[BillSearchService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    search_service : Optional[BillSearchService]
        Pre-built service to serve from. When omitted the lifespan builds
        the default one from settings.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    configure_logging(settings.log_level)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting legis-search-server")

        service = search_service or build_search_service()
        app.state.search_service = service

        if not service.embedder.uses_provider:
            logger.warning("No embedding provider key configured; using hashed embeddings")

        if settings.warm_index_on_startup:
            await service.initialize()

        try:
            yield
        finally:
            logger.info("Shutting down legis-search-server")
            await service.dispose()

    app = FastAPI(
        title="legis-search-server",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    register_exception_handlers(app)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(search_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
