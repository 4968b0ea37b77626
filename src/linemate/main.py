"""
FastAPI service entrypoint.

Responsibilities:
- Create FastAPI app
- Register API routes (health, LINE webhook)
- Bootstrap services on startup (unless injected) and own the temp sweeper lifecycle
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from src.linemate.api.health import router as health_router
from src.linemate.api.line_webhook import router as line_router
from src.linemate.bootstrap import Services, build_services
from src.linemate.config.settings import settings
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    FastAPI application factory.

    Tests inject `services`; otherwise they are built from settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        svc = services or build_services(settings)
        app.state.services = svc
        svc.temp_store.start_sweeper(
            interval_seconds=svc.settings.temp_sweep_interval_seconds,
            max_age_seconds=svc.settings.temp_max_age_seconds,
        )
        logger.info("LineMate service started | env=%s | port=%s", svc.settings.app_env, svc.settings.port)
        try:
            yield
        finally:
            await svc.temp_store.stop_sweeper()
            logger.info("LineMate service stopped")

    app = FastAPI(title="LineMate LINE Relay", lifespan=lifespan)

    app.include_router(health_router)
    app.include_router(line_router)

    return app


# ASGI app for external servers. Startup failures raise out of the lifespan;
# only `python -m src.linemate` maps them to exit code 1.
app = create_app()
