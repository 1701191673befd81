"""SENT pulse decoder: fast-channel frames and slow serial messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .crc import crc4, crc4_gm

OFFSET_INTERVAL = 12
SYNC_INTERVAL = 56 - OFFSET_INTERVAL
MIN_INTERVAL = 12
MAX_INTERVAL = 15

MSG_DATA_SIZE = 6
MSG_PAYLOAD_SIZE = 1 + MSG_DATA_SIZE + 1

SLOW_MAILBOXES = 16

CPU_CLOCK_MHZ = 72
DEFAULT_TICK_CLOCKS = 27 * CPU_CLOCK_MHZ // 10  # 2.7 us tick

_SYNC_TICKS = SYNC_INTERVAL + OFFSET_INTERVAL
_U32 = 0xFFFFFFFF


class SentState(IntEnum):
    """Position of the decoder within a SENT frame."""

    INIT = 0
    SYNC = 1
    STATUS = 2
    SIG1_DATA1 = 3
    SIG1_DATA2 = 4
    SIG1_DATA3 = 5
    SIG2_DATA1 = 6
    SIG2_DATA2 = 7
    SIG2_DATA3 = 8
    CRC = 9


@dataclass(frozen=True)
class SlowMessage:
    """One slow-channel message held in a mailbox."""

    id: int
    data: int


@dataclass
class ChannelStats:
    """Error and traffic counters of one channel."""

    pulses: int = 0
    short_interval_errors: int = 0
    long_interval_errors: int = 0
    sync_errors: int = 0
    crc_errors: int = 0
    frames: int = 0


class SentChannel:
    """Decodes the pulse periods of one SENT line, measured in CPU clocks."""

    def __init__(
        self,
        nominal_tick_clocks: int = DEFAULT_TICK_CLOCKS,
        clock_mhz: int = CPU_CLOCK_MHZ,
    ) -> None:
        self.nominal_tick_clocks = nominal_tick_clocks
        self.clock_mhz = clock_mhz
        self.state = SentState.INIT
        self.tick_clocks = 0
        self.stats = ChannelStats()
        self.slow_16bit = False
        self._nibbles = [0] * MSG_PAYLOAD_SIZE
        self._mailboxes = [SlowMessage(0, 0)] * SLOW_MAILBOXES
        self._mailbox_flags = 0
        self._shift2 = 0
        self._shift3 = 0

    @property
    def nibbles(self) -> tuple[int, ...]:
        """The nibbles of the frame most recently received (status to CRC)."""
        return tuple(self._nibbles)

    def _sync_window(self) -> tuple[int, int]:
        sync_clocks = _SYNC_TICKS * self.nominal_tick_clocks
        return sync_clocks * 80 // 100, sync_clocks * 120 // 100

    def _calibrate(self, clocks: int) -> None:
        self.tick_clocks = (clocks + _SYNC_TICKS // 2) // _SYNC_TICKS

    def _interval(self, clocks: int) -> int:
        if self.tick_clocks == 0:
            # Not calibrated yet: no pulse can be measured.
            return -OFFSET_INTERVAL
        return (clocks + self.tick_clocks // 2) // self.tick_clocks - OFFSET_INTERVAL

    def feed(self, clocks: int) -> tuple[int, ...] | None:
        """Process one pulse period.

        Returns the frame's nibbles when the pulse completes a frame with a
        valid CRC, otherwise None. Errors are counted in ``stats``.
        """
        self.stats.pulses += 1

        if self.state == SentState.INIT:
            low, high = self._sync_window()
            if low <= clocks <= high:
                self._calibrate(clocks)
                self.state = SentState.STATUS
                return None

        interval = self._interval(clocks)
        if interval < 0:
            self.stats.short_interval_errors += 1
            self.state = SentState.INIT
            return None

        if self.state == SentState.INIT:
            return None

        if self.state == SentState.SYNC:
            if interval == SYNC_INTERVAL:
                self._calibrate(clocks)
                self.state = SentState.STATUS
            else:
                self.stats.sync_errors += 1
                if interval > SYNC_INTERVAL:
                    self.stats.long_interval_errors += 1
                else:
                    self.stats.short_interval_errors += 1
                self.state = SentState.INIT
            return None

        if interval > MAX_INTERVAL:
            self.stats.long_interval_errors += 1
            self.state = SentState.INIT
            return None

        self._nibbles[self.state - SentState.STATUS] = interval
        if self.state != SentState.CRC:
            self.state = SentState(self.state + 1)
            return None

        self.stats.frames += 1
        self.state = SentState.SYNC
        received = self._nibbles[MSG_PAYLOAD_SIZE - 1]
        if received in (
            crc4(self._nibbles[: MSG_PAYLOAD_SIZE - 1]),
            crc4_gm(self._nibbles[1 : MSG_PAYLOAD_SIZE - 1]),
        ):
            self._decode_slow_channel()
            return self.nibbles

        self.stats.crc_errors += 1
        self._shift2 = 0
        self._shift3 = 0
        return None

    def _store(self, slot: int, message: SlowMessage) -> None:
        self._mailboxes[slot] = message
        self._mailbox_flags |= 1 << slot

    def _decode_slow_channel(self) -> None:
        status = self._nibbles[0]
        self._shift2 = ((self._shift2 << 1) | ((status >> 2) & 1)) & _U32
        self._shift3 = ((self._shift3 << 1) | ((status >> 3) & 1)) & _U32
        shift2, shift3 = self._shift2, self._shift3

        # Short serial message: bit 3 reads 1000 0000 0000 0000.
        if shift3 & 0xFFFF == 0x8000:
            message_id = (shift2 >> 12) & 0x0F
            self._store(message_id, SlowMessage(message_id, (shift2 >> 4) & 0xFF))

        # Enhanced serial message: bit 3 reads 11 1111 0xxx xx0x xxx0.
        if shift3 & 0x3F821 == 0x3F000:
            self.slow_16bit = bool(shift3 & (1 << 10))
            if not self.slow_16bit:
                message_id = ((shift3 >> 1) & 0x0F) | ((shift3 >> 2) & 0xF0)
                message = SlowMessage(message_id, shift2 & 0x0FFF)
                for slot, held in enumerate(self._mailboxes):
                    if not self._mailbox_flags & (1 << slot) or held.id == message_id:
                        self._store(slot, message)
                        return
            else:
                data = (shift2 & 0x0FFF) | (((shift3 >> 1) & 0x0F) << 12)
                message_id = (shift3 >> 6) & 0x0F
                self._store(message_id, SlowMessage(message_id, data))

    def slow_messages(self) -> dict[int, SlowMessage]:
        """Filled mailboxes, keyed by mailbox slot in ascending order."""
        return {
            slot: message
            for slot, message in enumerate(self._mailboxes)
            if self._mailbox_flags & (1 << slot)
        }

    def tick_time_ns(self) -> int:
        """The measured tick length in nanoseconds."""
        return self.tick_clocks * 1000 // self.clock_mhz

    def error_percent(self) -> int:
        """Sync errors as a whole percentage of all pulses seen."""
        if self.stats.pulses == 0:
            return 0
        return 100 * self.stats.sync_errors // self.stats.pulses