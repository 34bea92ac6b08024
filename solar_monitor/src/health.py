"""
Health tracker for the monitor.

Keeps a small in-memory status built from session events and sampling
outcomes:
- connection_state: latest DeviceSession state.
- last_sample_ts: ISO timestamp of the most recent successful sample.
- last_error: message of the most recent failed sample, cleared on success.
- consecutive_failures: failed samples since the last success.

The status is served by ``GET /health`` and, when a path is configured,
rewritten to a JSON file on every change so Docker HEALTHCHECK can inspect it.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-010)

TODO:
- None
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from solar_monitor.src.session import ConnectionState, EventKind

if TYPE_CHECKING:
    from solar_monitor.src.session import SessionEvent


class HealthTracker:
    """Tracks monitor health and optionally mirrors it to a JSON file.

    Args:
        path: Filesystem path for the health JSON file, or None to keep the
            status in memory only.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None
        self._connection_state = ConnectionState.DISCONNECTED
        self._last_sample_ts: str | None = None
        self._last_error: str | None = None
        self._consecutive_failures: int = 0

    def on_session_event(self, event: SessionEvent) -> None:
        """Session listener: follow connection state changes."""
        if event.kind is EventKind.STATE_CHANGED:
            self._connection_state = event.state
            self._write()

    def record_sample(self) -> None:
        """Record a successful sample."""
        self._last_sample_ts = datetime.now(tz=UTC).isoformat()
        self._last_error = None
        self._consecutive_failures = 0
        self._write()

    def record_failure(self, error: Exception) -> None:
        """Record a failed sample.

        Args:
            error: The exception that ended the sampling cycle.
        """
        self._last_error = str(error)
        self._consecutive_failures += 1
        self._write()

    def snapshot(self) -> dict:
        """Return the current status as a JSON-serialisable dict."""
        return {
            "status": "ok" if self._consecutive_failures == 0 else "degraded",
            "connection_state": str(self._connection_state),
            "last_sample_ts": self._last_sample_ts,
            "last_error": self._last_error,
            "consecutive_failures": self._consecutive_failures,
        }

    def _write(self) -> None:
        """Write the health JSON file with current state."""
        if self.path is not None:
            self.path.write_text(json.dumps(self.snapshot()))
