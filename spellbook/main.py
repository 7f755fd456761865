"""Main FastAPI application entry point."""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spellbook import logging_client
from spellbook.api import catalog, data, maintenance, sessions
from spellbook.config import settings
from spellbook.dependencies import get_seed_source, init_store
from spellbook.services.data_import import DataImportService

# Initialize logger
logger = logging_client.setup_logger('spellbook')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the document store and import seed data before serving.

    An import failure aborts startup: the app never serves requests
    without its reference data.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.VERSION}")
    try:
        store = await init_store()
        result = await DataImportService(store, get_seed_source()).run()
        logger.info(f"✅ Seed data {result.action} (version {result.version})")
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    logger.info(f"Spellbook backend ready on {settings.HOST}:{settings.PORT}")
    yield
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(data.router, prefix="/api", tags=["data"])
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])
app.include_router(maintenance.router, prefix="/api/maintenance", tags=["maintenance"])


def run():
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "spellbook.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
