"""
GET /api/solar-data endpoint returning a fresh reading with costs.

Every request triggers one sampling cycle through the QueryFacade on
``app.state``.  A failed cycle is reported as HTTP 503 with the failing
stage, never as a zero reading.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-009)

TODO:
- None
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from solar_monitor.src.errors import SampleError, SampleFailure

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["solar"])

_STAGE_NAMES: dict[SampleFailure, str] = {
    SampleFailure.CONNECTION_UNAVAILABLE: "connection",
    SampleFailure.PARTIAL_READ: "read",
}


@router.get("/solar-data")
async def solar_data(request: Request) -> dict:
    """Return the current inverter reading and derived costs.

    Args:
        request: The incoming FastAPI request.

    Returns:
        dict: ``active_power_w``, ``daily_energy_wh``, ``voltage_v``,
        ``sampled_at`` and ``costs`` (rounded to two decimals).

    Raises:
        HTTPException: 503 if the inverter could not be sampled.
    """
    facade = request.app.state.facade
    try:
        snapshot = await facade.query()
    except SampleError as exc:
        logger.warning("Solar data request failed: %s", exc)
        raise HTTPException(
            status_code=503,
            detail={
                "error": "Failed to fetch data",
                "stage": _STAGE_NAMES[exc.stage],
                "reason": exc.reason,
            },
        ) from exc

    return snapshot.to_payload()
