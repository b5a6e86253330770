"""Waiver Context API - FastAPI application entrypoint."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import load_config, log_config_snapshot
from app.correlation import RequestTracingMiddleware
from app.routers import waiver
from context.service import get_context_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load and validate configuration at startup
_config = load_config()
log_config_snapshot(_config)

# Capture service start time for uptime reporting
_SERVICE_START_TIME = datetime.now(timezone.utc)

app = FastAPI(
    title="Waiver Context",
    description="Market, matchup, weather and player context for waiver decisions",
    version=_config.service_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTracingMiddleware)

app.include_router(waiver.router)


@app.on_event("startup")
async def startup_event():
    """Start the periodic defense rankings refresh."""
    task = get_context_service().start_background_refresh()
    if task is not None:
        logger.info(
            f"Defense refresh scheduled every {_config.defense_refresh_interval_seconds}s"
        )


@app.on_event("shutdown")
async def shutdown_event():
    await get_context_service().stop_background_refresh()


@app.get("/health")
async def health():
    """Health check with service observability."""
    return {
        "status": "healthy",
        "service": _config.service_name,
        "version": _config.service_version,
        "environment": _config.environment,
        "live_data_enabled": _config.live_data_enabled,
        "started_at": _SERVICE_START_TIME.isoformat(),
    }
