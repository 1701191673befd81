import pytest

from sentdecode.crc import crc4, crc4_gm
from sentdecode.decoder import DEFAULT_TICK_CLOCKS, SentChannel
from sentdecode.report import (
    format_raw_report,
    format_silabs_report,
    format_slow_messages,
    format_throttle_report,
    main,
)
from sentdecode.sensors import GmReading, throttle_percent
from sentdecode.silabs import SilabsChannel

TICK = DEFAULT_TICK_CLOCKS
DATA = [1, 2, 3, 4, 5, 6]


def frame_pulses(status, data):
    nibbles = [status, *data]
    return [56 * TICK] + [(12 + n) * TICK for n in [*nibbles, crc4(nibbles)]]


def channel_with_frames(statuses, data=DATA):
    channel = SentChannel()
    for status in statuses:
        for clocks in frame_pulses(status, data):
            channel.feed(clocks)
    return channel


def statuses_for(shift3, shift2, length):
    return [
        (((shift3 >> i) & 1) << 3) | (((shift2 >> i) & 1) << 2)
        for i in reversed(range(length))
    ]


def test_raw_report_first_line():
    channel = channel_with_frames([0])
    crc = crc4([0, *DATA])
    report = format_raw_report(channel, GmReading(0, 0, 0))
    assert report.startswith(
        f"nibbles: ST=0 D=1:2:3:4:5:6 CRC={crc:x}"
        " Errs Short: 000000 Long: 000000 Sync: 000000 CRC: 000000 (000 %)."
        " Frames: 000001\r\n"
    )


def test_raw_report_gm_line():
    channel = channel_with_frames([0])
    report = format_raw_report(channel, GmReading(status=3, sig0=198, sig1=202))
    gm_line = report.split("\r\n")[1] + "\r\n"
    assert gm_line == (
        f" GM: St 3, Sig0 0198, Sig1 0202, 1.000 Atm"
        f" Tick = {channel.tick_time_ns():04d} nS.\r\n"
    )


def test_raw_report_negative_pressure_wraps_unsigned():
    report = format_raw_report(SentChannel(), GmReading(0, 0, 0))
    gm_line = report.split("\r\n")[1]
    assert "-" not in gm_line
    assert "Atm" in gm_line


def test_raw_report_without_frames():
    report = format_raw_report(SentChannel(), GmReading(0, 0, 0))
    assert "(000 %). Frames: 000000" in report
    assert report.count("\r\n") == 2


def test_short_slow_message():
    channel = channel_with_frames(statuses_for(0x8000, 0x5A30, 16))
    assert format_slow_messages(channel) == "  msg 5: 0x00a3 (163)\r\n"


def test_enhanced_slow_message_temperature():
    channel = channel_with_frames(statuses_for(0x3F040, 0x2A1, 18))
    assert format_slow_messages(channel) == "  msg 16: 0x02a1 (673), T = 21.03125C ?\r\n"


def test_no_slow_messages():
    assert format_slow_messages(channel_with_frames([0])) == ""


def test_throttle_report():
    channel = channel_with_frames([0])
    report = format_throttle_report(channel, 435, 3665)
    first, second = report.split("\r\n")[:2]
    assert first.startswith("nibbles: ST=0")
    assert second == (
        f"ETB 0435 3665 pos={throttle_percent(435):03d} err 000000 000000"
        f" s_e=000000 c_err=000000 sync={channel.stats.pulses:06d} rate=0000"
    )


def test_throttle_report_rejects_bad_value():
    with pytest.raises(ValueError):
        format_throttle_report(SentChannel(), -1, 0)


def test_silabs_report():
    channels = [SilabsChannel() for _ in range(4)]
    data = [1, 2, 3, 0, 1, 0]
    for ticks in [56, 12, *(12 + n for n in data), 12 + crc4_gm(data)]:
        channels[0].feed(ticks)
    assert format_silabs_report(channels) == (
        f"{0x123:04d} 0000 0000 0000 err 000000 000000 000000 000000 000001\r\n"
    )


def test_silabs_report_needs_channels():
    with pytest.raises(ValueError):
        format_silabs_report([])


def write_pulses(tmp_path, lines):
    path = tmp_path / "pulses.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def test_main_raw(tmp_path, capsys):
    path = write_pulses(tmp_path, [str(c) for c in frame_pulses(0, DATA)])
    assert main([path]) == 0
    out = capsys.readouterr().out
    assert out.startswith("nibbles: ST=0 D=1:2:3:4:5:6")
    assert " GM: St 0," in out


def test_main_throttle(tmp_path, capsys):
    path = write_pulses(tmp_path, [f"0 {c}" for c in frame_pulses(0, DATA)])
    assert main([path, "--mode", "throttle", "--open", "435", "--closed", "3665"]) == 0
    assert "ETB 0435 3665" in capsys.readouterr().out


def test_main_silabs(tmp_path, capsys):
    data = [1, 2, 3, 0, 1, 0]
    ticks = [56, 12, *(12 + n for n in data), 12 + crc4_gm(data)]
    path = write_pulses(tmp_path, ["# channel ticks", *(f"1 {t}" for t in ticks)])
    assert main([path, "--mode", "silabs"]) == 0
    out = capsys.readouterr().out
    assert out.startswith(f"0000 {0x123:04d} 0000 0000 err")


def test_main_rejects_bad_line(tmp_path, capsys):
    path = write_pulses(tmp_path, ["1 2 3"])
    assert main([path]) == 2
    assert "line 1" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.txt")]) == 2
    assert "sentdecode:" in capsys.readouterr().err