"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from shop.api.v1 import health, orders
from shop.config import settings
from shop.db import dispose_engine
from shop.logging import setup_logging

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    logger.info("Starting Shop Orders API", debug=settings.debug)

    yield

    # Shutdown
    logger.info("Shutting down Shop Orders API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="Shop Orders API",
    description="Order creation with server-issued order and refund numbers",
    version="0.1.0",
    lifespan=lifespan,
)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(orders.router, prefix="/api/v1", tags=["orders"])
