"""
Monitor configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Invalid values are rejected at startup, before any connection is opened.

CHANGELOG:
- 2026-10-18: Add HEALTH_PATH for the optional health file (STORY-010)
- 2026-10-18: Initial creation, adapted from EdgeSettings (STORY-001)

TODO:
- None
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings

from solar_monitor.src.models import Tariff


class MonitorSettings(BaseSettings):
    """Solar monitor configuration.

    All values are loaded from environment variables. ``INVERTER_HOST`` is
    required; everything else has a default.

    Attributes:
        inverter_host: Inverter (or SDongle) IP address / hostname.
        inverter_port: Modbus TCP port (default 502).
        inverter_unit_id: Modbus unit id (default 1).
        request_timeout_s: Timeout per register-read request.
        connect_timeout_s: Timeout for opening the TCP connection.
        purchase_rate: Grid purchase price in EUR/kWh.
        sale_rate: Grid feed-in price in EUR/kWh.
        api_host: Interface the HTTP API binds to.
        api_port: Port the HTTP API listens on.
        log_level: Root log level name.
        health_path: Optional path of a JSON health file; empty disables it.
    """

    inverter_host: str
    inverter_port: int = 502
    inverter_unit_id: int = 1
    request_timeout_s: float = 5.0
    connect_timeout_s: float = 5.0
    purchase_rate: float = 0.25
    sale_rate: float = 0.12
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    log_level: str = "INFO"
    health_path: str = ""

    @field_validator("inverter_host")
    @classmethod
    def inverter_host_must_not_be_empty(cls, v: str) -> str:
        """Reject blank hostnames."""
        v = v.strip()
        if not v:
            raise ValueError("INVERTER_HOST must not be empty")
        return v

    @field_validator("inverter_port", "api_port")
    @classmethod
    def port_must_be_valid(cls, v: int) -> int:
        """Validate TCP port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("inverter_unit_id")
    @classmethod
    def unit_id_must_be_valid(cls, v: int) -> int:
        """Validate Modbus unit id is in valid range (1-247)."""
        if v < 1 or v > 247:
            raise ValueError("INVERTER_UNIT_ID must be between 1 and 247")
        return v

    @field_validator("request_timeout_s", "connect_timeout_s")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        """Timeouts bound every blocking call, so zero is not allowed."""
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("purchase_rate", "sale_rate")
    @classmethod
    def rate_must_be_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("tariff rates must be >= 0")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL '{v}' is not a logging level")
        return level

    @property
    def tariff(self) -> Tariff:
        """Tariff built from the configured rates."""
        return Tariff(purchase_rate=self.purchase_rate, sale_rate=self.sale_rate)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
