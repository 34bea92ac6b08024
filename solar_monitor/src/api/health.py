"""
Health check endpoint for the solar monitor API.

GET /health returns the HealthTracker snapshot with HTTP 200.  It does not
touch the inverter, so it stays cheap for Docker HEALTHCHECK.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-010)

TODO:
- None
"""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    """Return the current monitor health.

    Returns:
        dict: ``status``, ``connection_state``, ``last_sample_ts``,
        ``last_error`` and ``consecutive_failures``.
    """
    return request.app.state.health.snapshot()
