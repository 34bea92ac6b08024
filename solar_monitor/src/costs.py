"""
Pure cost estimator: daily energy yield -> savings and resale value.

No I/O, no clock, no rounding.  Same inputs always give the same output.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-005)

TODO:
- None
"""

from __future__ import annotations

from solar_monitor.src.models import CostEstimate, Reading, Tariff

WH_PER_KWH: int = 1000


def estimate(reading: Reading, tariff: Tariff) -> CostEstimate:
    """Derive financial metrics from a reading's daily energy.

    Args:
        reading: The decoded inverter reading.
        tariff: Purchase and sale prices in EUR/kWh.

    Returns:
        Savings if the energy had been bought from the grid, and revenue if
        it had been sold to the grid, for today's yield.
    """
    kwh = reading.daily_energy_wh / WH_PER_KWH
    return CostEstimate(
        daily_savings=kwh * tariff.purchase_rate,
        potential_revenue=kwh * tariff.sale_rate,
        energy_produced_kwh=kwh,
    )
