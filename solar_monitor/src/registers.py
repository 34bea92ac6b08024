"""
Huawei SUN2000 Modbus TCP register map -- single source of truth.

Defines the holding registers (function code 0x03) read by the monitor, with
their addresses, word counts and multiplicative scale factors.  Values are
treated as unsigned 16-bit words; multi-word values are big-endian, most
significant word first.

The scale factors (x100 for power and energy, x10 for voltage) are fixed
constants taken from the register layout the deployed dashboard was
validated against.  They are not derived from any pattern; check them
against the datasheet of the target firmware before changing.

CHANGELOG:
- 2026-10-18: Combine two-word registers MSW-first instead of using word 0 only
- 2026-10-18: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from solar_monitor.src.errors import UnknownQuantityError

# ---------------------------------------------------------------------------
# Data definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RegisterDef:
    """Definition of a single logical quantity on the inverter.

    Attributes:
        name: Unique logical name used as lookup key.
        address: Holding register start address (unsigned 16-bit).
        word_count: Number of 16-bit words the quantity occupies (1 or 2).
        scale: Multiplicative factor applied to the raw unsigned integer to
            obtain the engineering value.  Integer so that decoding is exact.
        unit: Engineering unit string (e.g. ``"W"``, ``"Wh"``, ``"V"``).
        description: Free-text description of the register.
    """

    name: str
    address: int
    word_count: int
    scale: int
    unit: str
    description: str = ""

    def __post_init__(self) -> None:  # noqa: D105
        if not 0 <= self.address <= 0xFFFF:
            msg = f"Register '{self.name}': address {self.address} is not a u16"
            raise ValueError(msg)
        if self.word_count not in (1, 2):
            msg = (
                f"Register '{self.name}': word_count must be 1 or 2, "
                f"got {self.word_count}"
            )
            raise ValueError(msg)
        if self.address + self.word_count - 1 > 0xFFFF:
            msg = f"Register '{self.name}': address range exceeds 0xFFFF"
            raise ValueError(msg)

    @property
    def addresses(self) -> range:
        """All register addresses covered by this definition."""
        return range(self.address, self.address + self.word_count)


# ---------------------------------------------------------------------------
# Register table
# ---------------------------------------------------------------------------

ACTIVE_POWER = RegisterDef(
    name="active_power",
    address=32080,
    word_count=2,
    scale=100,
    unit="W",
    description="Inverter active output power",
)

DAILY_ENERGY = RegisterDef(
    name="daily_energy",
    address=32106,
    word_count=2,
    scale=100,
    unit="Wh",
    description="Energy yield of the current day",
)

PHASE_VOLTAGE = RegisterDef(
    name="phase_voltage",
    address=32066,
    word_count=1,
    scale=10,
    unit="V",
    description="Grid phase voltage",
)

READ_ORDER: tuple[RegisterDef, ...] = (ACTIVE_POWER, DAILY_ENERGY, PHASE_VOLTAGE)
"""Register groups in the order a sampling cycle reads them."""


def _check_no_overlap(defs: Sequence[RegisterDef]) -> None:
    """Reject tables where two quantities share a register address."""
    owners: dict[int, str] = {}
    for reg in defs:
        for addr in reg.addresses:
            other = owners.get(addr)
            if other is not None:
                msg = f"Register address {addr} aliased by '{other}' and '{reg.name}'"
                raise ValueError(msg)
            owners[addr] = reg.name


_check_no_overlap(READ_ORDER)

REGISTER_MAP: dict[str, RegisterDef] = {reg.name: reg for reg in READ_ORDER}
"""Flat lookup of every register by logical name."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def spec_for(name: str) -> RegisterDef:
    """Return the register definition for a logical quantity.

    Raises:
        UnknownQuantityError: If *name* is not in the register table.  This
            is a configuration bug, not a runtime condition.
    """
    try:
        return REGISTER_MAP[name]
    except KeyError:
        raise UnknownQuantityError(name) from None


def combine_words(words: Sequence[int]) -> int:
    """Concatenate unsigned 16-bit words, most significant word first."""
    value = 0
    for word in words:
        value = (value << 16) | (word & 0xFFFF)
    return value


def decode(reg: RegisterDef, words: Sequence[int]) -> int:
    """Decode raw words for *reg* into its engineering value.

    The result is exactly ``raw * reg.scale``; no rounding happens here.

    Raises:
        ValueError: If the number of words does not match ``reg.word_count``.
    """
    if len(words) != reg.word_count:
        msg = (
            f"Register '{reg.name}': expected {reg.word_count} word(s), "
            f"got {len(words)}"
        )
        raise ValueError(msg)
    return combine_words(words) * reg.scale
