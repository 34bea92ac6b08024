"""
Typed failures raised by the Modbus session and the sampling cycle.

Every failure the monitor can hit at runtime is one of these exceptions,
carrying an enum that says which kind of failure it was.  Callers can catch
:class:`MonitorError` to handle all of them, or a specific subclass.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

from enum import StrEnum


class ConnectFailure(StrEnum):
    """Why a transport connection could not be established."""

    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    REFUSED = "refused"


class ReadFailure(StrEnum):
    """Why a register read did not return data."""

    NOT_CONNECTED = "not_connected"
    DEVICE_REJECTED = "device_rejected"
    LINK_LOST = "link_lost"
    TIMEOUT = "timeout"


class SampleFailure(StrEnum):
    """Which stage of a sampling cycle failed."""

    CONNECTION_UNAVAILABLE = "connection_unavailable"
    PARTIAL_READ = "partial_read"


class MonitorError(Exception):
    """Base exception for all monitor failures."""


class UnknownQuantityError(MonitorError, LookupError):
    """A logical quantity was requested that the register map does not define."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown quantity '{name}'")


class ConnectError(MonitorError):
    """Failed to open the transport to the inverter."""

    def __init__(self, reason: ConnectFailure, message: str = "") -> None:
        self.reason = reason
        super().__init__(message or f"Connect failed: {reason}")


class ReadError(MonitorError):
    """A register read failed.

    Attributes:
        kind: The failure category.
        exception_code: Modbus exception code when ``kind`` is
            :attr:`ReadFailure.DEVICE_REJECTED`, otherwise ``None``.
    """

    def __init__(
        self,
        kind: ReadFailure,
        message: str = "",
        *,
        exception_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.exception_code = exception_code
        if not message:
            message = f"Read failed: {kind}"
            if exception_code is not None:
                message += f" (exception code {exception_code})"
        super().__init__(message)


class SampleError(MonitorError):
    """A sampling cycle did not produce a Reading.

    The underlying :class:`ConnectError` or :class:`ReadError` is available
    as ``__cause__``.
    """

    def __init__(self, stage: SampleFailure, message: str = "") -> None:
        self.stage = stage
        super().__init__(message or f"Sample failed: {stage}")

    @property
    def reason(self) -> str:
        """Short machine-readable reason taken from the chained cause."""
        cause = self.__cause__
        if isinstance(cause, ConnectError):
            return str(cause.reason)
        if isinstance(cause, ReadError):
            return str(cause.kind)
        return str(self.stage)
