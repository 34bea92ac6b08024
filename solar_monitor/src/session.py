"""
Modbus TCP session to a single Huawei inverter.

Owns one ``AsyncModbusTcpClient`` and an explicit connection state machine:

    DISCONNECTED --connect--> CONNECTING --ok--> CONNECTED
                                         --err-> FAILED
    CONNECTED --transport error / timeout--> FAILED
    any --disconnect--> DISCONNECTED

Transport and protocol failures are raised as typed exceptions
(:class:`ConnectError`, :class:`ReadError`) and never swallowed here.  Every
state transition and every successful request is logged and delivered to
registered listeners.  Register values are not cached.

The session does not serialise callers itself; :class:`SolarReader` holds
the lock around a whole sampling cycle.

CHANGELOG:
- 2026-10-18: Close the transport after a request timeout (late replies desync TIDs)
- 2026-10-18: Initial creation (STORY-006)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from pymodbus.client import AsyncModbusTcpClient
from pymodbus.exceptions import ModbusException

from solar_monitor.src.errors import (
    ConnectError,
    ConnectFailure,
    ReadError,
    ReadFailure,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_REQUEST_TIMEOUT_S: float = 5.0
"""Upper bound for a single register-read request."""

DEFAULT_CONNECT_TIMEOUT_S: float = 5.0
"""Upper bound for opening the TCP transport."""

CLIENT_TIMEOUT_GRACE_S: float = 1.0
"""Padding added to the pymodbus client timeout on top of the request timeout."""

MAX_READ_COUNT: int = 125
"""Largest register count allowed in one FC03 request."""


# ---------------------------------------------------------------------------
# State and events
# ---------------------------------------------------------------------------


class ConnectionState(StrEnum):
    """Lifecycle state of the Modbus session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class EventKind(StrEnum):
    """Kind of observable session event."""

    STATE_CHANGED = "state_changed"
    READ_OK = "read_ok"


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """An observable session event.

    Attributes:
        kind: What happened.
        state: Session state after the event.
        detail: Human-readable context (target, address range, cause).
    """

    kind: EventKind
    state: ConnectionState
    detail: str = ""


SessionListener = Callable[[SessionEvent], None]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class DeviceSession:
    """Single logical Modbus TCP session to one inverter.

    Args:
        request_timeout_s: Timeout for each register-read request.
        connect_timeout_s: Timeout for opening the transport.
    """

    def __init__(
        self,
        *,
        request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
    ) -> None:
        self._request_timeout_s = request_timeout_s
        self._connect_timeout_s = connect_timeout_s
        self._client: AsyncModbusTcpClient | None = None
        self._unit_id: int = 1
        self._target: str = ""
        self._state = ConnectionState.DISCONNECTED
        self._generation: int = 0
        self._listeners: list[SessionListener] = []

    # -- Introspection -----------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def generation(self) -> int:
        """Counter incremented on every successful connect.

        Two reads that observe the same generation were served by the same
        transport connection.
        """
        return self._generation

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callable that receives every :class:`SessionEvent`."""
        self._listeners.append(listener)

    # -- Lifecycle ---------------------------------------------------------

    async def connect(self, host: str, port: int = 502, unit_id: int = 1) -> None:
        """Open the transport and bind the Modbus unit id.

        No-op while already connected.

        Raises:
            ConnectError: On transport failure; the state becomes FAILED.
        """
        if self._state is ConnectionState.CONNECTED:
            return

        self._drop_client()
        self._target = f"{host}:{port}"
        self._unit_id = unit_id
        self._set_state(ConnectionState.CONNECTING, f"connecting to {self._target}")

        # retries=0: a failed request surfaces immediately, retry is the caller's call.
        # The client timeout is padded so asyncio.wait_for owns the deadlines.
        client = AsyncModbusTcpClient(
            host,
            port=port,
            timeout=self._request_timeout_s + CLIENT_TIMEOUT_GRACE_S,
            retries=0,
        )
        try:
            ok = await asyncio.wait_for(client.connect(), timeout=self._connect_timeout_s)
        except TimeoutError:
            raise self._fail_connect(
                client, ConnectFailure.TIMEOUT, "connect timed out"
            ) from None
        except ConnectionRefusedError as exc:
            raise self._fail_connect(
                client, ConnectFailure.REFUSED, f"refused: {exc}"
            ) from exc
        except (OSError, ModbusException) as exc:
            raise self._fail_connect(
                client, ConnectFailure.UNREACHABLE, f"unreachable: {exc}"
            ) from exc

        if not ok:
            raise self._fail_connect(
                client, ConnectFailure.UNREACHABLE, "connect returned False"
            )

        self._client = client
        self._generation += 1
        self._set_state(
            ConnectionState.CONNECTED,
            f"connected to {self._target} unit_id={unit_id}",
        )

    def disconnect(self) -> None:
        """Release the transport.  Safe to call in any state."""
        self._drop_client()
        if self._state is not ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.DISCONNECTED, "disconnected")

    # -- Reads -------------------------------------------------------------

    async def read_registers(self, address: int, count: int) -> list[int]:
        """Read *count* holding registers starting at *address*.

        Returns:
            The register values as unsigned 16-bit integers.

        Raises:
            ValueError: If *address* or *count* is outside the protocol range.
            ReadError: ``NOT_CONNECTED`` without any I/O when the session is
                not connected; ``DEVICE_REJECTED`` on a Modbus exception
                response; ``TIMEOUT`` or ``LINK_LOST`` on transport failure,
                after which the session is FAILED.
        """
        if not 0 <= address <= 0xFFFF:
            raise ValueError(f"Register address out of range: {address}")
        if not 1 <= count <= MAX_READ_COUNT:
            raise ValueError(f"Register count out of range: {count}")
        if self._state is not ConnectionState.CONNECTED or self._client is None:
            raise ReadError(ReadFailure.NOT_CONNECTED)

        span = f"address={address}, count={count}"
        try:
            response = await asyncio.wait_for(
                self._client.read_holding_registers(
                    address,
                    count=count,
                    device_id=self._unit_id,
                ),
                timeout=self._request_timeout_s,
            )
        except TimeoutError:
            self._fail_link(f"request timed out ({span})")
            raise ReadError(
                ReadFailure.TIMEOUT,
                f"Read timed out after {self._request_timeout_s}s ({span})",
            ) from None
        except (OSError, ModbusException) as exc:
            self._fail_link(f"link lost ({span}): {exc}")
            raise ReadError(ReadFailure.LINK_LOST, f"Link lost ({span})") from exc

        if response.isError():
            code = getattr(response, "exception_code", None)
            logger.warning(
                "Modbus exception response (%s, exception_code=%s)", span, code
            )
            raise ReadError(ReadFailure.DEVICE_REJECTED, exception_code=code)

        registers = list(response.registers)
        if len(registers) < count:
            self._fail_link(f"short reply ({span}, got {len(registers)})")
            raise ReadError(
                ReadFailure.LINK_LOST,
                f"Short reply: expected {count} words, got {len(registers)}",
            )

        words = [word & 0xFFFF for word in registers[:count]]
        self._emit(SessionEvent(EventKind.READ_OK, self._state, span))
        logger.debug("Read OK (%s): %s", span, words)
        return words

    # -- Internals ---------------------------------------------------------

    def _set_state(self, state: ConnectionState, detail: str) -> None:
        previous = self._state
        self._state = state
        logger.info("Session %s -> %s: %s", previous, state, detail)
        self._emit(SessionEvent(EventKind.STATE_CHANGED, state, detail))

    def _emit(self, event: SessionEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.warning("Session listener failed for %s", event, exc_info=True)

    def _fail_connect(
        self,
        client: AsyncModbusTcpClient,
        reason: ConnectFailure,
        detail: str,
    ) -> ConnectError:
        """Close *client*, move to FAILED and build the error to raise."""
        client.close()
        self._set_state(ConnectionState.FAILED, f"{self._target} {detail}")
        return ConnectError(reason, f"Connect to {self._target} failed: {detail}")

    def _fail_link(self, detail: str) -> None:
        self._drop_client()
        self._set_state(ConnectionState.FAILED, detail)

    def _drop_client(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            client.close()
