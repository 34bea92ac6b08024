"""
FastAPI application entry point for the solar monitor.

The lifespan loads :class:`MonitorSettings`, wires session -> reader ->
facade, stores the facade and health tracker on ``app.state`` for route
handlers, takes one initial sample, and disconnects on shutdown.

CHANGELOG:
- 2026-10-18: Register dashboard router (STORY-011)
- 2026-10-18: Register solar-data and health routers (STORY-009)
- 2026-10-18: Initial creation (STORY-009)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from solar_monitor.src.api.dashboard import router as dashboard_router
from solar_monitor.src.api.health import router as health_router
from solar_monitor.src.api.solar import router as solar_router
from solar_monitor.src.config import MonitorSettings
from solar_monitor.src.facade import QueryFacade
from solar_monitor.src.health import HealthTracker
from solar_monitor.src.reader import SolarReader
from solar_monitor.src.session import DeviceSession

logger = logging.getLogger(__name__)


def build_facade(settings: MonitorSettings, health: HealthTracker) -> QueryFacade:
    """Build the session, reader and facade described by *settings*.

    Args:
        settings: Validated monitor settings.
        health: Tracker subscribed to session events and sample outcomes.

    Returns:
        QueryFacade: Ready to query; the session is not connected yet.
    """
    session = DeviceSession(
        request_timeout_s=settings.request_timeout_s,
        connect_timeout_s=settings.connect_timeout_s,
    )
    session.add_listener(health.on_session_event)
    reader = SolarReader(
        session,
        host=settings.inverter_host,
        port=settings.inverter_port,
        unit_id=settings.inverter_unit_id,
    )
    return QueryFacade(reader, settings.tariff, health=health)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build the monitor, warm up, disconnect on exit.

    Startup:
        - Validates settings (a ValidationError aborts startup).
        - Attempts one sample; failure is logged, not fatal.

    Shutdown:
        - Disconnects the Modbus session.
    """
    settings = MonitorSettings()
    health = HealthTracker(settings.health_path or None)
    facade = build_facade(settings, health)
    app.state.settings = settings
    app.state.health = health
    app.state.facade = facade

    await facade.warm_up()
    logger.info("Solar monitor API ready")
    try:
        yield
    finally:
        facade.close()
        logger.info("Solar monitor API shutting down")


app = FastAPI(
    title="Huawei Solar Monitor",
    description="Live inverter readings and daily savings.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(dashboard_router)
app.include_router(health_router)
app.include_router(solar_router)
