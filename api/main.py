"""
FastAPI Backend for GamblShield Discovery.

Serves the single-page dashboard, the registry review endpoints and the
discovery agent controls (manual cycles, autonomous mode).
"""

import logging

from dotenv import load_dotenv

load_dotenv()

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from api.routes import agent, dashboard, sites
from api.services import create_agent, get_agent
from discovery.agent import DiscoveryAgent
from discovery.config import APP_NAME, APP_VERSION, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Starting {APP_NAME} API...")
    discovery_agent = create_agent()
    app.state.agent = discovery_agent

    if settings.agent.autostart:
        logger.info("[STARTUP] Autostart enabled, activating autonomous mode")
        discovery_agent.set_autonomous(True)

    yield
    # Shutdown
    logger.info("Shutting down...")
    await discovery_agent.shutdown()


app = FastAPI(
    title=f"{APP_NAME} API",
    description="Grounded-search discovery of gambling-site signatures",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS - allow a separately hosted frontend (configured via API_CORS_ORIGINS env var)
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

# GZip compression for responses > 500 bytes
app.add_middleware(GZipMiddleware, minimum_size=500)

# Include routers
app.include_router(sites.router, prefix="/api/sites", tags=["sites"])
app.include_router(agent.router, prefix="/api/discovery", tags=["discovery"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "version": APP_VERSION, "service": f"{APP_NAME} API"}


@app.get("/api/stats")
async def stats(agent: DiscoveryAgent = Depends(get_agent)):
    """Registry and agent statistics."""
    return {
        "total_sites": len(agent.registry),
        "by_status": agent.registry.counts_by_status(),
        "cleaned_count": len(agent.registry.cleaned_list()),
        "cycle_count": agent.cycle_count,
        "log_entries": len(agent.activity),
    }
