"""Text status reports, as printed on the diagnostic serial port."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterable, Iterator, Sequence

from .decoder import SentChannel
from .hub import SentHub
from .sensors import GmReading, throttle_percent
from .silabs import SilabsChannel

BUFFER_SIZE = 300
TEMPERATURE_IDS = frozenset({16, 22})

_U32 = 0xFFFFFFFF


def _frame_summary(channel: SentChannel) -> str:
    n = channel.nibbles
    stats = channel.stats
    rate = stats.crc_errors * 100 // stats.frames if stats.frames else 0
    data = ":".join(f"{value:x}" for value in n[1:7])
    return (
        f"nibbles: ST={n[0]:x} D={data} CRC={n[7]:x}"
        f" Errs Short: {stats.short_interval_errors:06d}"
        f" Long: {stats.long_interval_errors:06d}"
        f" Sync: {stats.sync_errors:06d}"
        f" CRC: {stats.crc_errors:06d} ({rate:03d} %)."
        f" Frames: {stats.frames:06d}\r\n"
    )


def format_raw_report(channel: SentChannel, gm: GmReading) -> str:
    """Nibbles, error counters and the GM sensor reading of one channel."""
    pressure = gm.pressure & _U32
    whole, fraction = divmod(pressure, 1000)
    return _frame_summary(channel) + (
        f" GM: St {gm.status:x}, Sig0 {gm.sig0:04d}, Sig1 {gm.sig1:04d},"
        f" {whole}.{fraction:03d} Atm Tick = {channel.tick_time_ns():04d} nS.\r\n"
    )


def format_slow_messages(channel: SentChannel) -> str:
    """One line per filled slow-channel mailbox; some IDs look like temperatures."""
    lines = []
    for message in channel.slow_messages().values():
        line = f"  msg {message.id}: 0x{message.data:04x} ({message.data})"
        if message.id in TEMPERATURE_IDS:
            degrees, rest = divmod(message.data, 32)
            line += f", T = {degrees}.{rest * 3125:05d}C ?"
        lines.append(line + "\r\n")
    return "".join(lines)


def format_throttle_report(channel: SentChannel, open_value: int, closed_value: int) -> str:
    """Nibbles and counters followed by the electronic throttle summary."""
    stats = channel.stats
    return _frame_summary(channel) + (
        f"ETB {open_value:04d} {closed_value:04d} pos={throttle_percent(open_value):03d}"
        f" err {stats.short_interval_errors:06d} {stats.long_interval_errors:06d}"
        f" s_e={stats.sync_errors:06d} c_err={stats.crc_errors:06d}"
        f" sync={stats.pulses:06d} rate={channel.error_percent():04d}\r\n"
    )


def format_silabs_report(channels: Sequence[SilabsChannel]) -> str:
    """Sensor values of every channel and the error counters summed over them."""
    if not channels:
        raise ValueError("no channels to report")
    values = " ".join(f"{channel.value:04d}" for channel in channels)
    totals = (
        sum(channel.min_interval_errors for channel in channels),
        sum(channel.max_interval_errors for channel in channels),
        sum(channel.sync_errors for channel in channels),
        sum(channel.crc_errors for channel in channels),
        sum(channel.pulses for channel in channels),
    )
    counters = " ".join(f"{total:06d}" for total in totals)
    return f"{values} err {counters}\r\n"


def _parse_pulses(lines: Iterable[str]) -> Iterator[tuple[int, int]]:
    for number, line in enumerate(lines, start=1):
        text = line.split("#", 1)[0].strip()
        if not text:
            continue
        fields = text.split()
        try:
            values = [int(field, 0) for field in fields]
        except ValueError:
            raise ValueError(f"line {number}: not a number: {text!r}") from None
        if len(values) == 1:
            yield 0, values[0]
        elif len(values) == 2:
            yield values[0], values[1]
        else:
            raise ValueError(f"line {number}: expected '[channel] period'")


def _read_lines(source: str) -> list[str]:
    if source == "-":
        return sys.stdin.readlines()
    with open(source, encoding="utf-8") as handle:
        return handle.readlines()


def _run(args: argparse.Namespace, pulses: Iterable[tuple[int, int]]) -> str:
    if args.mode == "silabs":
        channels = [SilabsChannel() for _ in range(4)]
        for channel, ticks in pulses:
            if not 0 <= channel < len(channels):
                raise ValueError(f"no such channel: {channel}")
            channels[channel].feed(ticks)
        return format_silabs_report(channels)

    hub = SentHub()
    for channel, clocks in pulses:
        hub.post(channel, clocks)
        hub.process()
    first = hub.channels[0]
    if args.mode == "throttle":
        return format_throttle_report(first, args.open_value, args.closed_value)
    return format_raw_report(first, hub.gm[0]) + format_slow_messages(first)


def main(argv: Sequence[str] | None = None) -> int:
    """Decode pulse periods from a file or stdin and print a status report."""
    parser = argparse.ArgumentParser(
        prog="sentdecode",
        description="Decode SENT pulse periods and print a status report.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="file with one pulse per line, '[channel] period'; '-' reads stdin",
    )
    parser.add_argument("--mode", choices=("raw", "throttle", "silabs"), default="raw")
    parser.add_argument("--open", type=int, default=0, dest="open_value")
    parser.add_argument("--closed", type=int, default=0, dest="closed_value")
    args = parser.parse_args(argv)

    try:
        pulses = list(_parse_pulses(_read_lines(args.input)))
        text = _run(args, pulses)
    except (OSError, ValueError) as exc:
        print(f"sentdecode: {exc}", file=sys.stderr)
        return 2

    sys.stdout.write(text[: BUFFER_SIZE - 1])
    return 0