"""
FastAPI application entry point for the Contractor Engine API.

Configures CORS, registers the matching and learning routers, and manages the
database pool lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contractor_engine import __version__
from contractor_engine.api import api_router
from contractor_engine.core.config import get_settings
from contractor_engine.core.database import close_db, init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: initialize the database pool.
    Shutdown: close it.

    A database that is down at startup does not stop the app; the pool is
    created lazily on first use and endpoints report 503 until then.
    """
    logger.info("Contractor Engine API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("Contractor Engine API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


app = FastAPI(
    title="Contractor Engine API",
    version=__version__,
    description=(
        "Contractor matching and adaptive learning for event planning. "
        "Ranks service providers for requested categories and learns "
        "service patterns and insights from post-event outcome reports."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancers."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """API name, version and documentation links."""
    return {
        "name": "Contractor Engine API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "contractor_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
