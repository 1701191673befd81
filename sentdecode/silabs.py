"""Tick-domain SENT decoder for Silabs Si7215 sensors."""

from __future__ import annotations

from .crc import crc4_gm
from .decoder import MAX_INTERVAL, MIN_INTERVAL, OFFSET_INTERVAL, SYNC_INTERVAL, SentState


class SilabsChannel:
    """Decodes one SENT line whose pulse lengths are already given in ticks.

    The first signal (12 bits) becomes ``value`` once a frame passes its CRC.
    The second signal carries an 8-bit rolling counter that is checked for
    continuity.
    """

    def __init__(self) -> None:
        self.state = SentState.INIT
        self.value = 0
        self.status = 0
        self.rolling_counter = 0
        self.previous_rolling_counter = 0
        self.pulses = 0
        self.min_interval_errors = 0
        self.max_interval_errors = 0
        self.sync_errors = 0
        self.status_errors = 0
        self.rolling_errors = 0
        self.crc_errors = 0
        self._pending = 0
        self._data: list[int] = []

    def _reject_long(self) -> None:
        self.max_interval_errors += 1
        self.state = SentState.SYNC

    def feed(self, ticks: int) -> int | None:
        """Process one pulse length in ticks.

        Returns the new sensor value when the pulse completes a frame with a
        valid CRC, otherwise None.
        """
        if not 0 <= ticks <= 0xFFFF:
            raise ValueError(f"pulse length out of range: {ticks!r}")

        if ticks < MIN_INTERVAL:
            self.min_interval_errors += 1
            self.state = SentState.SYNC
            return None

        interval = ticks - OFFSET_INTERVAL
        state = self.state

        if state == SentState.INIT:
            self.pulses += 1
            if interval == SYNC_INTERVAL:
                self.state = SentState.STATUS
            return None

        if state == SentState.SYNC:
            self.pulses += 1
            if interval == SYNC_INTERVAL:
                self._pending = 0
                self.state = SentState.STATUS
            else:
                self.sync_errors += 1
            return None

        if interval > MAX_INTERVAL:
            self.max_interval_errors += 1
            self.state = SentState.SYNC
            return None

        if state == SentState.STATUS:
            self.status = interval
            if interval:
                self.status_errors += 1
            self._data = []
            self.state = SentState.SIG1_DATA1
            return None

        if state == SentState.CRC:
            self.state = SentState.SYNC
            if self.rolling_counter != (self.previous_rolling_counter + 1) & 0xFF:
                self.rolling_errors += 1
            self.previous_rolling_counter = self.rolling_counter
            if interval == crc4_gm(self._data):
                self.value = self._pending
                return self.value
            self.crc_errors += 1
            return None

        self._data.append(interval)
        if state == SentState.SIG1_DATA1:
            self._pending = interval << 8
        elif state == SentState.SIG1_DATA2:
            self._pending |= interval << 4
        elif state == SentState.SIG1_DATA3:
            self._pending |= interval
        elif state == SentState.SIG2_DATA1:
            self.rolling_counter = (interval << 4) & 0xFF
        elif state == SentState.SIG2_DATA2:
            self.rolling_counter |= interval
        self.state = SentState(state + 1)
        return None