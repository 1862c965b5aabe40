"""
WooCommerce Profit Tracker - Main Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .dependencies import init_dependencies, close_dependencies
from .routes import (
    auth_router, stores_router, sync_router, ads_router, dashboard_router, orders_router
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting WooCommerce Profit Tracker...")
    await init_dependencies()
    logger.info("Application ready")
    yield
    logger.info("Shutting down...")
    await close_dependencies()


# Create app
app = FastAPI(
    title="WooCommerce Profit Tracker",
    description="Profit, ROAS and ad spend across WooCommerce stores",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
app.include_router(auth_router)
app.include_router(stores_router)
app.include_router(sync_router)
app.include_router(ads_router)
app.include_router(dashboard_router)
app.include_router(orders_router)


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "profit_tracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
