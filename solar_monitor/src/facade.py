"""
Query facade: one fresh sample plus derived costs per call.

Sits between the HTTP routes and :class:`SolarReader`.  Each :meth:`query`
triggers a new sampling cycle; the last successful snapshot is kept for
callers that want it without touching the inverter.  Failures propagate as
:class:`SampleError` and are never turned into a zero reading.

CHANGELOG:
- 2026-10-18: Keep serving samples when the health file cannot be written
- 2026-10-18: Initial creation (STORY-008)

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from solar_monitor.src.costs import estimate
from solar_monitor.src.errors import SampleError
from solar_monitor.src.models import SolarSnapshot

if TYPE_CHECKING:
    from solar_monitor.src.health import HealthTracker
    from solar_monitor.src.models import Tariff
    from solar_monitor.src.reader import SolarReader

logger = logging.getLogger(__name__)


class QueryFacade:
    """Serve readings with costs on demand.

    Args:
        reader: The sampler to query.
        tariff: Prices used for cost estimation.
        health: Optional tracker updated with every sampling outcome.
    """

    def __init__(
        self,
        reader: SolarReader,
        tariff: Tariff,
        *,
        health: HealthTracker | None = None,
    ) -> None:
        self._reader = reader
        self._tariff = tariff
        self._health = health
        self._latest: SolarSnapshot | None = None

    @property
    def latest(self) -> SolarSnapshot | None:
        """Most recent successful snapshot, or None if there was none yet."""
        return self._latest

    async def query(self) -> SolarSnapshot:
        """Sample the inverter and attach cost estimates.

        Raises:
            SampleError: If the sampling cycle failed.
        """
        try:
            reading = await self._reader.sample()
        except SampleError as exc:
            if self._health is not None:
                try:
                    self._health.record_failure(exc)
                except OSError:
                    logger.warning("Failed to write health file", exc_info=True)
            raise

        snapshot = SolarSnapshot(reading=reading, costs=estimate(reading, self._tariff))
        self._latest = snapshot
        if self._health is not None:
            try:
                self._health.record_sample()
            except OSError:
                logger.warning("Failed to write health file", exc_info=True)
        return snapshot

    async def warm_up(self) -> None:
        """Try to open the session ahead of the first query.

        A failure is logged only; the next query reconnects on its own.
        """
        try:
            await self.query()
        except SampleError as exc:
            logger.warning("Initial sample failed (%s); will retry on demand", exc)

    def close(self) -> None:
        """Disconnect the underlying session."""
        self._reader.session.disconnect()
