"""
Read-once diagnostic CLI.

Connects to the inverter, runs a single sampling cycle and prints the
reading with cost estimates as JSON.  ``--raw`` also prints the undecoded
16-bit words per register, useful when checking scale factors against the
device datasheet.

Usage:
    solar-monitor-read --host 192.168.x.x
    solar-monitor-read --host 192.168.x.x --port 502 --unit-id 1 --raw

CHANGELOG:
- 2026-10-18: Print raw words and the reading from the same cycle
- 2026-10-18: Initial creation, adapted from scan_registers.py (STORY-013)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from solar_monitor.src.costs import estimate
from solar_monitor.src.errors import SampleError
from solar_monitor.src.models import SolarSnapshot, Tariff
from solar_monitor.src.reader import SolarReader
from solar_monitor.src.registers import READ_ORDER, decode
from solar_monitor.src.session import DeviceSession


async def read_once(
    *,
    host: str,
    port: int,
    unit_id: int,
    timeout_s: float,
    tariff: Tariff,
    raw: bool,
) -> int:
    """Sample the inverter once and print the result.

    Returns:
        Process exit status: 0 on success, 1 on failure.
    """
    session = DeviceSession(request_timeout_s=timeout_s, connect_timeout_s=timeout_s)
    reader = SolarReader(session, host=host, port=port, unit_id=unit_id)
    try:
        words, reading = await reader.sample_with_raw()
    except SampleError as exc:
        print(f"Sample failed ({exc.stage}, {exc.reason}): {exc}", file=sys.stderr)
        return 1
    finally:
        session.disconnect()

    if raw:
        print("Raw registers:")
        for reg in READ_ORDER:
            value = words[reg.name]
            hex_words = " ".join(f"0x{w:04X}" for w in value)
            print(
                f"  {reg.name:<14} addr {reg.address:5d}  {hex_words:<14}"
                f"  -> {decode(reg, value)} {reg.unit}"
            )
    snapshot = SolarSnapshot(reading=reading, costs=estimate(reading, tariff))
    print(json.dumps(snapshot.to_payload(), indent=2))
    return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        description="Read the Huawei inverter once and print the decoded values"
    )
    p.add_argument("--host", required=True, help="Inverter IP address or hostname")
    p.add_argument("--port", type=int, default=502, help="Modbus TCP port (default 502)")
    p.add_argument(
        "--unit-id", type=int, default=1, dest="unit_id",
        help="Modbus unit id (default 1)",
    )
    p.add_argument(
        "--timeout", type=float, default=5.0,
        help="Connect and per-request timeout in seconds (default 5)",
    )
    p.add_argument("--purchase-rate", type=float, default=0.25, dest="purchase_rate")
    p.add_argument("--sale-rate", type=float, default=0.12, dest="sale_rate")
    p.add_argument(
        "--raw", action="store_true",
        help="Also print the raw register words before decoding",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Synchronous entrypoint."""
    args = parse_args(argv)
    tariff = Tariff(purchase_rate=args.purchase_rate, sale_rate=args.sale_rate)
    status = asyncio.run(
        read_once(
            host=args.host,
            port=args.port,
            unit_id=args.unit_id,
            timeout_s=args.timeout,
            tariff=tariff,
            raw=args.raw,
        )
    )
    sys.exit(status)


if __name__ == "__main__":
    main()
