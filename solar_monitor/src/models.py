"""
Pydantic models for inverter readings and derived cost figures.

All values are in engineering units after scaling.  ``sampled_at`` is
injected by the reader at assembly time, not taken from registers.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Reading(BaseModel):
    """A single decoded snapshot of the inverter.

    Attributes:
        active_power_w: Active output power in watts.
        daily_energy_wh: Energy produced today in watt-hours.
        voltage_v: Grid phase voltage in volts.
        sampled_at: Time the reading was assembled (UTC).
    """

    model_config = ConfigDict(frozen=True)

    active_power_w: float
    daily_energy_wh: float
    voltage_v: float
    sampled_at: datetime


class Tariff(BaseModel):
    """Energy prices in EUR/kWh."""

    model_config = ConfigDict(frozen=True)

    purchase_rate: float = Field(ge=0)
    sale_rate: float = Field(ge=0)


class CostEstimate(BaseModel):
    """Financial figures derived from a Reading's daily energy.

    Values are stored unrounded; :meth:`rounded` is for display only.
    """

    model_config = ConfigDict(frozen=True)

    daily_savings: float
    potential_revenue: float
    energy_produced_kwh: float

    def rounded(self) -> dict[str, float]:
        """Return the figures rounded to two decimals for display."""
        return {
            "daily_savings": round(self.daily_savings, 2),
            "potential_revenue": round(self.potential_revenue, 2),
            "energy_produced_kwh": round(self.energy_produced_kwh, 2),
        }


class SolarSnapshot(BaseModel):
    """A reading together with the costs derived from it."""

    model_config = ConfigDict(frozen=True)

    reading: Reading
    costs: CostEstimate

    def to_payload(self) -> dict:
        """Serialise to the JSON shape served by ``GET /api/solar-data``."""
        return {
            "active_power_w": self.reading.active_power_w,
            "daily_energy_wh": self.reading.daily_energy_wh,
            "voltage_v": self.reading.voltage_v,
            "sampled_at": self.reading.sampled_at.isoformat(),
            "costs": self.costs.rounded(),
        }
