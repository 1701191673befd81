"""Pulse capture front end and the mailbox that feeds the channel decoders."""

from __future__ import annotations

from collections import deque

from .decoder import DEFAULT_TICK_CLOCKS, SentChannel
from .sensors import GmReading, Si7215Reading, decode_gm, decode_si7215

_U16 = 0xFFFF
_U32 = 0xFFFFFFFF

ICU_FREQUENCY = 72_000_000
MAILBOX_SLOTS_PER_CHANNEL = 4
ICU_CHANNELS = 4


def encode_pulse(channel: int, clocks: int) -> int:
    """Pack a channel number and a pulse period into one mailbox message."""
    if not 0 <= channel <= 0xFF:
        raise ValueError(f"channel out of range: {channel!r}")
    if not 0 <= clocks <= _U16:
        raise ValueError(f"pulse period out of range: {clocks!r}")
    return (channel << 16) | clocks


def decode_pulse(message: int) -> tuple[int, int]:
    """Unpack a mailbox message into (channel, clocks)."""
    return (message >> 16) & 0xFF, message & _U16


def capture_period(previous: int, current: int) -> int:
    """Period between two free-running 32-bit counter samples, cut to 16 bits.

    A counter that did not advance is treated as a full wrap.
    """
    for value in (previous, current):
        if not 0 <= value <= _U32:
            raise ValueError(f"counter value out of range: {value!r}")
    if current > previous:
        period = current - previous
    else:
        period = _U32 - previous + current
    return period & _U16


def icu_period(channel: int, period: int) -> int:
    """Pulse period handed to the decoder for a timer capture on ``channel``.

    The first two inputs run at the CPU clock; the third and fourth inputs
    are captured at twice the rate, so their periods are halved.
    """
    if not 0 <= channel < ICU_CHANNELS:
        raise ValueError(f"no capture input for channel {channel!r}")
    if not 0 <= period <= _U32:
        raise ValueError(f"capture period out of range: {period!r}")
    if channel >= 2:
        period >>= 1
    return period & _U16


class SentHub:
    """Collects pulses from several SENT lines and decodes them in order.

    Pulses are queued with :meth:`post`, as an interrupt handler would, and
    decoded with :meth:`process`. The latest Si7215 and GM readings of each
    channel are kept in ``si7215`` and ``gm``.
    """

    def __init__(
        self,
        channel_count: int = 2,
        capacity: int | None = None,
        nominal_tick_clocks: int = DEFAULT_TICK_CLOCKS,
    ) -> None:
        if channel_count < 1:
            raise ValueError("a hub needs at least one channel")
        self.channels = [SentChannel(nominal_tick_clocks) for _ in range(channel_count)]
        self.capacity = (
            capacity if capacity is not None else MAILBOX_SLOTS_PER_CHANNEL * channel_count
        )
        if self.capacity < 1:
            raise ValueError("mailbox capacity must be positive")
        self.si7215 = [Si7215Reading(0, 0)] * channel_count
        self.gm = [GmReading(0, 0, 0)] * channel_count
        self.dropped = 0
        self._mailbox: deque[int] = deque()

    def post(self, channel: int, clocks: int) -> bool:
        """Queue one pulse; returns False (and counts a drop) if the mailbox is full."""
        if not 0 <= channel < len(self.channels):
            raise ValueError(f"no such channel: {channel!r}")
        message = encode_pulse(channel, clocks)
        if len(self._mailbox) >= self.capacity:
            self.dropped += 1
            return False
        self._mailbox.append(message)
        return True

    def process(self) -> list[tuple[int, tuple[int, ...]]]:
        """Decode every queued pulse; returns the (channel, nibbles) of each good frame."""
        frames: list[tuple[int, tuple[int, ...]]] = []
        while self._mailbox:
            channel, clocks = decode_pulse(self._mailbox.popleft())
            nibbles = self.channels[channel].feed(clocks)
            if nibbles is None:
                continue
            reading = decode_si7215(nibbles)
            if reading is not None:
                self.si7215[channel] = reading
            self.gm[channel] = decode_gm(nibbles)
            frames.append((channel, nibbles))
        return frames