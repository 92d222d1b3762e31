from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from app.api import create_router
from app.web import create_router as create_web_router
from logging_config import configure_logging
from services.poller import build_default_poller
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    poller = build_default_poller()
    try:
        # DeviceDiscoveryError propagates here and aborts server startup.
        poller.start()
        logger.info("Started")
        yield
    finally:
        poller.shutdown()
        build_default_poller.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Onewire Exporter",
        description="Prometheus and JSON exporter for 1-Wire temperature sensors.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(GZipMiddleware)
    app.include_router(create_router(settings.telemetry_path, settings.json_path))
    # The index route catches every unmatched path, so it is included last.
    app.include_router(create_web_router(settings.telemetry_path, settings.json_path))
    return app

app = create_app()
