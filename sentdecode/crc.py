"""Four-bit CRCs used by SENT frames."""

from __future__ import annotations

from collections.abc import Iterable

CRC_SEED = 0x05

_CRC_TABLE = (0, 13, 7, 10, 14, 3, 9, 4, 1, 12, 6, 11, 15, 2, 8, 5)


def _checked(nibbles: Iterable[int]) -> list[int]:
    values = list(nibbles)
    for value in values:
        if not 0 <= value <= 0x0F:
            raise ValueError(f"nibble out of range: {value!r}")
    return values


def crc4(nibbles: Iterable[int]) -> int:
    """CRC over every nibble given, as used by the Si7215 (status included)."""
    crc = CRC_SEED
    for nibble in _checked(nibbles):
        crc = _CRC_TABLE[crc ^ nibble]
    return crc


def crc4_gm(nibbles: Iterable[int]) -> int:
    """CRC over the data nibbles only, as used by GM sensors.

    The table is applied before each nibble is mixed in, followed by one
    extra round with a zero input.
    """
    crc = CRC_SEED
    for nibble in _checked(nibbles):
        crc = (_CRC_TABLE[crc] ^ nibble) & 0x0F
    return _CRC_TABLE[crc]