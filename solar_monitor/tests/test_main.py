"""
Tests for the process entrypoint and the read-once CLI.

Covers JSON logging setup, the startup config summary, the uvicorn launch
and the CLI's success / failure output against a mocked Modbus client.

CHANGELOG:
- 2026-10-18: Cover read-once CLI (STORY-013)
- 2026-10-18: Initial creation (STORY-012)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Generator
from unittest.mock import MagicMock, patch

import pytest
from solar_monitor.src.cli import main as cli_main
from solar_monitor.src.cli import parse_args, read_once
from solar_monitor.src.config import MonitorSettings
from solar_monitor.src.main import (
    JsonFormatter,
    configure_logging,
    log_config_summary,
    main,
)
from solar_monitor.src.models import Tariff

CLIENT_PATH = "solar_monitor.src.session.AsyncModbusTcpClient"


@pytest.fixture()
def _restore_root_logger() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    pymodbus_level = logging.getLogger("pymodbus").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("pymodbus").setLevel(pymodbus_level)


# ===========================================================================
# Logging
# ===========================================================================


class TestLogging:
    def test_json_formatter_emits_json(self) -> None:
        record = logging.LogRecord(
            "solar_monitor.test", logging.INFO, __file__, 1, "hello %s", ("x",), None
        )
        entry = json.loads(JsonFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "solar_monitor.test"
        assert entry["msg"] == "hello x"
        assert "ts" in entry

    def test_json_formatter_includes_exception(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "t", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        entry = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad" in entry["exception"]

    @pytest.mark.usefixtures("_restore_root_logger")
    def test_configure_logging_installs_json_handler(self) -> None:
        configure_logging("DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("pymodbus").level == logging.CRITICAL

    def test_config_summary_logged(
        self,
        env_vars_required_only: dict[str, str],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="solar_monitor.src.main"):
            log_config_summary(MonitorSettings())

        assert "inverter_host=10.0.0.50" in caplog.text
        assert "purchase_rate=0.25" in caplog.text


# ===========================================================================
# Service entrypoint
# ===========================================================================


class TestMain:
    @pytest.mark.usefixtures("_restore_root_logger")
    def test_main_runs_uvicorn_with_settings(
        self, env_vars_required_only: dict[str, str]
    ) -> None:
        with patch("solar_monitor.src.main.uvicorn.run") as mock_run:
            main()

        mock_run.assert_called_once_with(
            "solar_monitor.src.api.main:app",
            host="0.0.0.0",
            port=3000,
            log_config=None,
        )

    def test_main_fails_without_host(self) -> None:
        from pydantic import ValidationError

        with patch("solar_monitor.src.main.uvicorn.run") as mock_run:
            with pytest.raises(ValidationError):
                main()
        mock_run.assert_not_called()


# ===========================================================================
# Read-once CLI
# ===========================================================================


class TestReadOnceCli:
    def test_parse_args_defaults(self) -> None:
        args = parse_args(["--host", "10.0.0.5"])
        assert args.host == "10.0.0.5"
        assert args.port == 502
        assert args.unit_id == 1
        assert args.raw is False

    @pytest.mark.asyncio
    async def test_prints_reading_json(
        self,
        make_mock_client: Callable[..., MagicMock],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        client = make_mock_client()
        with patch(CLIENT_PATH, return_value=client):
            status = await read_once(
                host="10.0.0.5",
                port=502,
                unit_id=1,
                timeout_s=1.0,
                tariff=Tariff(purchase_rate=0.25, sale_rate=0.12),
                raw=False,
            )

        assert status == 0
        data = json.loads(capsys.readouterr().out)
        assert data["active_power_w"] == 5000
        assert data["costs"]["daily_savings"] == 3.0
        client.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_raw_output_lists_registers(
        self,
        make_mock_client: Callable[..., MagicMock],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        client = make_mock_client()
        with patch(CLIENT_PATH, return_value=client):
            status = await read_once(
                host="10.0.0.5",
                port=502,
                unit_id=1,
                timeout_s=1.0,
                tariff=Tariff(purchase_rate=0.25, sale_rate=0.12),
                raw=True,
            )

        out = capsys.readouterr().out
        assert status == 0
        assert "active_power" in out
        assert "0x0032" in out
        assert "-> 5000 W" in out
        # Raw table and JSON come from the same single cycle
        assert client.read_holding_registers.await_count == 3
        payload = json.loads(out[out.index("{"):])
        assert payload["active_power_w"] == 5000

    @pytest.mark.asyncio
    async def test_failure_returns_1(
        self,
        make_mock_client: Callable[..., MagicMock],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with patch(CLIENT_PATH, return_value=make_mock_client(connect_ok=False)):
            status = await read_once(
                host="10.0.0.5",
                port=502,
                unit_id=1,
                timeout_s=1.0,
                tariff=Tariff(purchase_rate=0.25, sale_rate=0.12),
                raw=False,
            )

        assert status == 1
        assert "connection_unavailable" in capsys.readouterr().err

    def test_cli_main_exits_with_status(
        self, make_mock_client: Callable[..., MagicMock]
    ) -> None:
        with patch(CLIENT_PATH, return_value=make_mock_client(connect_ok=False)):
            with pytest.raises(SystemExit) as exc_info:
                cli_main(["--host", "10.0.0.5", "--timeout", "0.5"])

        assert exc_info.value.code == 1
