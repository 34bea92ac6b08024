"""
One sampling cycle: connect if needed, read every register group, decode.

:class:`SolarReader` produces a complete :class:`Reading` per call or raises
:class:`SampleError`.  It owns the lock that serialises cycles on the shared
:class:`DeviceSession`, performs at most one implicit reconnect per call and
never retries reads; polling cadence and retries belong to the caller.

A Reading is only assembled when every group was read on the same
connection: any read failure or a connection change mid-cycle aborts the
cycle.

CHANGELOG:
- 2026-10-18: Return raw words and the decoded Reading from one cycle for --raw
- 2026-10-18: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from solar_monitor.src.errors import (
    ConnectError,
    ReadError,
    SampleError,
    SampleFailure,
)
from solar_monitor.src.models import Reading
from solar_monitor.src.registers import (
    ACTIVE_POWER,
    DAILY_ENERGY,
    PHASE_VOLTAGE,
    READ_ORDER,
    decode,
)

if TYPE_CHECKING:
    from solar_monitor.src.session import DeviceSession

logger = logging.getLogger(__name__)


class SolarReader:
    """Serialised sampler over a single :class:`DeviceSession`.

    Args:
        session: The session to read through.  Owned by the caller, who is
            responsible for disconnecting it on shutdown.
        host: Inverter IP address or hostname.
        port: Modbus TCP port.
        unit_id: Modbus unit id of the inverter.
    """

    def __init__(
        self,
        session: DeviceSession,
        *,
        host: str,
        port: int = 502,
        unit_id: int = 1,
    ) -> None:
        self._session = session
        self._host = host
        self._port = port
        self._unit_id = unit_id
        self._lock = asyncio.Lock()

    @property
    def session(self) -> DeviceSession:
        return self._session

    async def sample(self) -> Reading:
        """Run one sampling cycle.

        Concurrent callers queue on an internal lock; only one register
        sequence is ever in flight on the session.

        Returns:
            A freshly assembled :class:`Reading`.

        Raises:
            SampleError: ``CONNECTION_UNAVAILABLE`` if the implicit connect
                failed (no reads were attempted), ``PARTIAL_READ`` if any
                register group could not be read.  The underlying
                :class:`ConnectError` / :class:`ReadError` is chained.
        """
        _, reading = await self.sample_with_raw()
        return reading

    async def sample_with_raw(self) -> tuple[dict[str, list[int]], Reading]:
        """Run one cycle and return the raw words per register name with the
        Reading decoded from exactly those words.

        Same connect / abort rules as :meth:`sample`.
        """
        async with self._lock:
            await self._ensure_connected()
            raw = await self._read_groups()
            return raw, self._assemble(raw)

    def _assemble(self, raw: dict[str, list[int]]) -> Reading:
        reading = Reading(
            active_power_w=decode(ACTIVE_POWER, raw[ACTIVE_POWER.name]),
            daily_energy_wh=decode(DAILY_ENERGY, raw[DAILY_ENERGY.name]),
            voltage_v=decode(PHASE_VOLTAGE, raw[PHASE_VOLTAGE.name]),
            sampled_at=datetime.now(tz=UTC),
        )
        logger.info(
            "Sample OK: power=%sW energy=%sWh voltage=%sV",
            reading.active_power_w,
            reading.daily_energy_wh,
            reading.voltage_v,
        )
        return reading

    async def _ensure_connected(self) -> None:
        if self._session.is_connected:
            return
        try:
            await self._session.connect(self._host, self._port, self._unit_id)
        except ConnectError as exc:
            logger.warning(
                "Inverter %s:%d unavailable (%s)", self._host, self._port, exc.reason
            )
            raise SampleError(
                SampleFailure.CONNECTION_UNAVAILABLE,
                f"Inverter connection unavailable: {exc}",
            ) from exc

    async def _read_groups(self) -> dict[str, list[int]]:
        """Read every group on one connection, or raise PARTIAL_READ."""
        generation = self._session.generation
        raw: dict[str, list[int]] = {}

        for reg in READ_ORDER:
            try:
                raw[reg.name] = await self._session.read_registers(
                    reg.address, reg.word_count
                )
            except ReadError as exc:
                logger.warning(
                    "Read of '%s' (address=%d, count=%d) failed: %s; "
                    "aborting cycle after %d of %d groups",
                    reg.name,
                    reg.address,
                    reg.word_count,
                    exc.kind,
                    len(raw),
                    len(READ_ORDER),
                )
                raise SampleError(
                    SampleFailure.PARTIAL_READ,
                    f"Reading '{reg.name}' failed: {exc}",
                ) from exc

        if self._session.generation != generation:
            raise SampleError(
                SampleFailure.PARTIAL_READ,
                "Session reconnected during sampling cycle",
            )

        return raw
