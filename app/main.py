"""
FastAPI Main Application
Shared portfolio tracker: portfolios, positions, watchlist and live quotes
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from app.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.database import init_db, close_db
from app.services.quote_service import close_quote_gateway, get_quote_gateway

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of all services
    """
    # ===================
    # STARTUP
    # ===================
    logger.info("=" * 60)
    logger.info("Starting Portfolio Tracker")
    logger.info("=" * 60)

    logger.info("Step 1/2: Initializing database...")
    await init_db()
    logger.info("Database initialized")

    logger.info("Step 2/2: Initializing market data...")
    get_quote_gateway()
    logger.info(f"Quote cache TTL: {settings.QUOTE_CACHE_TTL_SECONDS}s")

    logger.info(f"API Server: http://{settings.API_HOST}:{settings.API_PORT}")
    logger.info(f"API Docs: http://{settings.API_HOST}:{settings.API_PORT}/docs")

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("Shutting down Portfolio Tracker...")
    await close_quote_gateway()
    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Portfolio Tracker",
    description="Shared stock portfolios with live quotes and P&L",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Portfolio Tracker",
        "version": "1.0.0",
        "docs": "/docs"
    }


# Import and include routers
from app.api.routes import admin, health, market_data, portfolio, positions, watchlist  # noqa: E402

app.include_router(health.router, tags=["Health"])
app.include_router(admin.router, prefix="/api/v1", tags=["Admin"])
app.include_router(portfolio.router, prefix="/api/v1/portfolios", tags=["Portfolios"])
app.include_router(positions.router, prefix="/api/v1/positions", tags=["Positions"])
app.include_router(watchlist.router, prefix="/api/v1/watchlist", tags=["Watchlist"])
app.include_router(market_data.router, prefix="/api/v1/prices", tags=["Market Data"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
