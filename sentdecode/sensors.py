"""Interpretation of SENT frames from specific sensors."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

THROTTLE_OPEN_VALUE = 435
THROTTLE_CLOSED_VALUE = 3665


@dataclass(frozen=True)
class Si7215Reading:
    """Magnetic field (0.1 mT units) and rolling counter of an Si7215."""

    magnetic_field: int
    counter: int


@dataclass(frozen=True)
class GmReading:
    """Status and the two pressure signals of a GM fuel pressure sensor."""

    status: int
    sig0: int
    sig1: int

    @property
    def pressure(self) -> int:
        """Pressure in 0.001 atm."""
        return gm_pressure(self.sig0, self.sig1)


def _frame(nibbles: Sequence[int]) -> Sequence[int]:
    if len(nibbles) < 7:
        raise ValueError("a frame needs a status nibble and six data nibbles")
    return nibbles


def decode_si7215(nibbles: Sequence[int]) -> Si7215Reading | None:
    """Decode an Si7215 frame, or return None if its check nibble disagrees."""
    n = _frame(nibbles)
    if (~n[6]) & 0x0F != n[1]:
        return None
    field = ((n[1] << 8) | (n[2] << 4) | n[3]) - 2048
    counter = (n[4] << 4) | n[5]
    return Si7215Reading(field, counter)


def decode_gm(nibbles: Sequence[int]) -> GmReading:
    """Decode a GM frame: sig0 is MSB first, sig1 is LSB first."""
    n = _frame(nibbles)
    sig0 = (n[1] << 8) | (n[2] << 4) | n[3]
    sig1 = n[4] | (n[5] << 4) | (n[6] << 8)
    return GmReading(n[0], sig0, sig1)


def gm_pressure(sig0: int, sig1: int) -> int:
    """Pressure in 0.001 atm, assuming 10 units per atm on each signal."""
    return (sig0 - 198 + 10 + sig1 - 202 + 10) * 100 // 2


def throttle_percent(value: int) -> int:
    """Throttle opening in percent, wrapped to a byte as the firmware does."""
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"sensor value out of range: {value!r}")
    span = THROTTLE_CLOSED_VALUE - THROTTLE_OPEN_VALUE
    travel = (value - THROTTLE_OPEN_VALUE) * 100
    fraction = abs(travel) // span
    if travel < 0:
        fraction = -fraction
    return (100 - fraction) & 0xFF