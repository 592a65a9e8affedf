# ============================================================================
# LOGO HISTORY SYNC - MAIN APPLICATION
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - FastAPI application entry point
# PURPOSE: Wire store, catalog client, flag cache and sessions into the API
# CREATED: 14 OCT 2026
# ============================================================================
"""
Logo History Sync Main Application

FastAPI application that:
1. Serves paged logo history per owner (X-Owner-Id header)
2. Keeps session-scoped image caches and selections
3. Syncs catalog flags with the catalog backend

Environment:
    LOGO_STORE              postgres (default) | memory
    DATABASE_URL / POSTGRES_*   connection for the postgres store
    AUTO_BOOTSTRAP_SCHEMA   "true" creates the logos table on startup
    CATALOG_API_URL         catalog backend base URL
    CATALOG_FLAG_STORAGE_PATH   JSON file holding catalog flags

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from __version__ import __version__, BUILD_DATE, EPOCH, CODENAME
from core.config import get_defaults
from repositories import InMemoryLogoStore, PostgresLogoRepository, init_pool, close_pool
from infrastructure import CatalogClient, JsonFileStorage
from services import CatalogFlagCache, SessionRegistry
from api.history_routes import router as history_router, set_history_services

# Configure logging using our structured logging system
from core.logging import configure_logging, get_logger

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Initializes services on startup, cleans up on shutdown.
    """
    logger.info(f"Starting {CODENAME} v{__version__} (Epoch {EPOCH}, Build {BUILD_DATE})")
    defaults = get_defaults()

    store_kind = os.environ.get("LOGO_STORE", "postgres").lower()
    if store_kind == "memory":
        store = InMemoryLogoStore()
        logger.info("Using in-memory logo store")
    else:
        pool = await init_pool()
        logger.info("Database pool initialized")
        store = PostgresLogoRepository(pool)

        # Optional: Bootstrap schema on startup (for development)
        if os.environ.get("AUTO_BOOTSTRAP_SCHEMA", "").lower() == "true":
            logger.info("Auto-bootstrap enabled, deploying schema...")
            try:
                await store.ensure_schema()
            except Exception as e:
                logger.warning(f"Schema bootstrap failed (may already exist): {e}")

    catalog_client = CatalogClient(
        base_url=defaults.catalog.catalog_api_url,
        timeout=defaults.catalog.request_timeout_seconds,
    )
    flag_cache = CatalogFlagCache(
        JsonFileStorage(defaults.catalog.flag_storage_path),
        storage_key=defaults.catalog.storage_key,
    )
    logger.info(f"Catalog backend: {defaults.catalog.catalog_api_url}")

    registry = SessionRegistry(store, catalog_client, flag_cache, defaults=defaults)
    app.state.registry = registry

    # Set services for API routes
    set_history_services(registry)

    yield

    # Shutdown
    logger.info(f"Shutting down {CODENAME}...")
    set_history_services(None)
    if store_kind != "memory":
        await close_pool()
    logger.info(f"{CODENAME} stopped")


# Create FastAPI app
app = FastAPI(
    title=CODENAME,
    description=f"Epoch {EPOCH} paged logo history with lazy image cache and catalog sync",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(history_router, prefix="/api/v1")


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": CODENAME,
        "version": __version__,
        "epoch": EPOCH,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
