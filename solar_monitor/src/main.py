"""
Process entrypoint for the solar monitor.

Configures structured JSON logging, validates settings, logs a config
summary and serves the FastAPI app with uvicorn.  There is no background
poll loop: each dashboard or API request samples the inverter once.

CHANGELOG:
- 2026-10-18: Initial creation: JSON logging and uvicorn entrypoint (STORY-012)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import uvicorn

if TYPE_CHECKING:
    from solar_monitor.src.config import MonitorSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on the root logger.

    pymodbus logs every transport hiccup at ERROR; the session already
    reports those as typed failures, so its logger only passes CRITICAL.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("pymodbus").setLevel(logging.CRITICAL)


# ---------------------------------------------------------------------------
# Startup config logging
# ---------------------------------------------------------------------------


def log_config_summary(settings: MonitorSettings) -> None:
    """Log the effective configuration at startup.

    Args:
        settings: Validated monitor settings.
    """
    logger.info(
        "Solar monitor starting with config: "
        "inverter_host=%s, inverter_port=%s, inverter_unit_id=%s, "
        "request_timeout_s=%s, connect_timeout_s=%s, "
        "purchase_rate=%s, sale_rate=%s, api_host=%s, api_port=%s, "
        "health_path=%s",
        settings.inverter_host,
        settings.inverter_port,
        settings.inverter_unit_id,
        settings.request_timeout_s,
        settings.connect_timeout_s,
        settings.purchase_rate,
        settings.sale_rate,
        settings.api_host,
        settings.api_port,
        settings.health_path or "-",
    )


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    """Synchronous entrypoint for the monitor service."""
    from solar_monitor.src.config import MonitorSettings

    settings = MonitorSettings()
    configure_logging(settings.log_level)
    log_config_summary(settings)

    uvicorn.run(
        "solar_monitor.src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
