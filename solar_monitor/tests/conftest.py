"""
Shared test fixtures for the solar monitor tests.

Provides environment variable fixtures for MonitorSettings and a factory for
mocked pymodbus ``AsyncModbusTcpClient`` instances that serve holding
registers from an in-memory table.  All monitor env vars are cleaned before
each test to ensure isolation.

CHANGELOG:
- 2026-10-18: Add mock Modbus client factory (STORY-006)
- 2026-10-18: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

# All MonitorSettings environment variable names, used for cleanup.
_ALL_MONITOR_ENV_VARS = (
    "INVERTER_HOST",
    "INVERTER_PORT",
    "INVERTER_UNIT_ID",
    "REQUEST_TIMEOUT_S",
    "CONNECT_TIMEOUT_S",
    "PURCHASE_RATE",
    "SALE_RATE",
    "API_HOST",
    "API_PORT",
    "LOG_LEVEL",
    "HEALTH_PATH",
)

# Raw words served by the default mock client: 50 x100 W, 120 x100 Wh, 23 x10 V.
DEFAULT_REGISTERS: dict[int, list[int]] = {
    32080: [0, 50],
    32106: [0, 120],
    32066: [23],
}


@pytest.fixture(autouse=True)
def _clean_monitor_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all monitor env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_MONITOR_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every MonitorSettings environment variable.

    Returns the dict of env var names to values for assertion convenience.
    """
    env = {
        "INVERTER_HOST": "192.168.1.100",
        "INVERTER_PORT": "1502",
        "INVERTER_UNIT_ID": "2",
        "REQUEST_TIMEOUT_S": "3.5",
        "CONNECT_TIMEOUT_S": "7",
        "PURCHASE_RATE": "0.30",
        "SALE_RATE": "0.08",
        "API_HOST": "127.0.0.1",
        "API_PORT": "8080",
        "LOG_LEVEL": "debug",
        "HEALTH_PATH": "/tmp/monitor-health.json",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def env_vars_required_only(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set only INVERTER_HOST; everything else falls back to defaults."""
    env = {"INVERTER_HOST": "10.0.0.50"}
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


def make_response(
    registers: list[int] | None = None,
    *,
    is_error: bool = False,
    exception_code: int | None = None,
) -> MagicMock:
    """Create a mock pymodbus response PDU."""
    resp = MagicMock()
    resp.isError.return_value = is_error
    resp.registers = registers or []
    resp.exception_code = exception_code
    return resp


@pytest.fixture()
def make_mock_client() -> Callable[..., MagicMock]:
    """Factory for mocked AsyncModbusTcpClient instances.

    Keyword Args:
        registers: Address -> words table served by read_holding_registers.
        connect_ok: Return value of connect().
        connect_side_effect: Exception (or async callable) for connect().
        read_errors: Address -> exception raised when that address is read.
        rejected: Address -> Modbus exception code returned for that address.
    """

    def _factory(
        *,
        registers: dict[int, list[int]] | None = None,
        connect_ok: bool = True,
        connect_side_effect: object = None,
        read_errors: dict[int, BaseException] | None = None,
        rejected: dict[int, int] | None = None,
    ) -> MagicMock:
        table = DEFAULT_REGISTERS if registers is None else registers
        read_errors = read_errors or {}
        rejected = rejected or {}

        client = MagicMock()
        if connect_side_effect is not None:
            client.connect = AsyncMock(side_effect=connect_side_effect)
        else:
            client.connect = AsyncMock(return_value=connect_ok)
        client.close = MagicMock()

        async def _read_holding_registers(
            address: int, *, count: int = 1, device_id: int = 1
        ) -> MagicMock:
            if address in read_errors:
                raise read_errors[address]
            if address in rejected:
                return make_response(is_error=True, exception_code=rejected[address])
            if address not in table:
                return make_response(is_error=True, exception_code=2)
            return make_response(table[address][:count])

        client.read_holding_registers = AsyncMock(side_effect=_read_holding_registers)
        return client

    return _factory
