"""FastAPI application factory - live context API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from livedex.api.routes import areas, catalog, describe, health, live
from livedex.api.startup_state import CatalogReport, StartupPhase, get_startup_state
from livedex.config import VERSION
from livedex.core.catalog import CatalogError
from livedex.services.descriptions import DescriptionService, create_description_service
from livedex.services.live_context import LiveContextService, create_live_context_service
from livedex.utilities.logging import setup_logging

logger = logging.getLogger(__name__)


def _make_lifespan(
    live_service: LiveContextService | None,
    description_service: DescriptionService | None,
):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        startup_state = get_startup_state()

        # Startup
        setup_logging()
        logger.info("[STARTUP] Starting Livedex %s...", VERSION)

        service = live_service or create_live_context_service()
        descriptions = description_service or create_description_service()

        # Load the catalog; a missing file is not fatal (reload later via API)
        startup_state.set_phase(StartupPhase.LOADING_CATALOG)
        store = service.store
        error = None
        if store.path is not None:
            try:
                store.reload()
            except CatalogError as e:
                logger.warning("[STARTUP] Catalog not loaded: %s", e)
                error = str(e)
        startup_state.record_catalog(CatalogReport.from_store(store, error))

        startup_state.set_phase(StartupPhase.STARTING_FEEDS)
        service.start()
        startup_state.record_feeds(service.feeds_enabled())

        app.state.live = service
        app.state.descriptions = descriptions

        startup_state.set_phase(StartupPhase.READY)
        logger.info("[STARTUP] Livedex ready (%d areas)", len(service.catalog))
        for problem in startup_state.problems:
            logger.warning("[STARTUP] Degraded: %s", problem)

        yield

        # Shutdown
        logger.info("[SHUTDOWN] Stopping Livedex...")
        service.stop()
        descriptions.close()
        app.state.live = None
        app.state.descriptions = None
        logger.info("[SHUTDOWN] Livedex stopped")

    return lifespan


def create_app(
    live_service: LiveContextService | None = None,
    description_service: DescriptionService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        live_service: Prebuilt live context (default: built from Config)
        description_service: Prebuilt description lookups (default: built from Config)
    """
    app = FastAPI(
        title="Livedex API",
        description="Live route and battle context for the game companion",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=_make_lifespan(live_service, description_service),
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(live.router, prefix="/api/v1", tags=["Live"])
    app.include_router(areas.router, prefix="/api/v1", tags=["Areas"])
    app.include_router(catalog.router, prefix="/api/v1", tags=["Catalog"])
    app.include_router(describe.router, prefix="/api/v1", tags=["Descriptions"])

    return app


app = create_app()
