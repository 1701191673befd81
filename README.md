# sentdecode

Decoding of SENT (SAE J2716) sensor data from measured pulse lengths.

A SENT frame is a sync pulse of 56 ticks followed by a status nibble, six
data nibbles and a CRC nibble, each nibble sent as a pulse of 12 to 27
ticks. This package turns a stream of pulse lengths into validated frames
and goes on to decode:

- the slow serial channel carried in bits 2 and 3 of the status nibble
  (short and enhanced serial message formats, 12-bit and 16-bit variants);
- the Si7215 magnetic field and rolling counter;
- the two signals of a GM fuel pressure sensor and a pressure estimate;
- a throttle position as a percentage.

A frame is accepted if its CRC nibble matches either the standard CRC-4
over status and data, or the GM variant over the data nibbles only.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Decoding a channel

`sentdecode.decoder.SentChannel` takes pulse periods measured in timer
clocks (72 MHz by default, with a nominal tick of 194 clocks). The first
pulse within ±20 % of a 56-tick sync calibrates the tick length; each
later sync recalibrates it.

```python
from sentdecode.decoder import SentChannel
from sentdecode.sensors import decode_gm, decode_si7215

channel = SentChannel()
for clocks in pulse_lengths:
    nibbles = channel.feed(clocks)
    if nibbles is not None:
        print(decode_gm(nibbles), decode_si7215(nibbles))

print(channel.slow_messages())   # {slot: SlowMessage(id, data), ...}
print(channel.stats)             # ChannelStats counters
print(channel.tick_time_ns(), channel.error_percent())
```

`feed` returns the eight nibbles (status, six data, CRC) when a pulse
completes a frame with a valid CRC, and `None` otherwise; errors are
counted in `channel.stats`. `channel.state` is a `SentState` and
`channel.nibbles` holds the most recent frame.

Checksums are available directly:

```python
from sentdecode.crc import crc4, crc4_gm
```

Both raise `ValueError` for a value outside 0–15.

## Sensors

`sentdecode.sensors` holds:

- `decode_si7215(nibbles)` – an `Si7215Reading(magnetic_field, counter)`,
  or `None` when the last data nibble is not the inverse of the first;
- `decode_gm(nibbles)` – a `GmReading(status, sig0, sig1)`, whose
  `pressure` property is in 0.001 atm;
- `gm_pressure(sig0, sig1)` – the same estimate from the raw signals;
- `throttle_percent(value)` – opening in percent between the open (435)
  and closed (3665) sensor positions, wrapped to a byte.

## Several inputs

`sentdecode.hub.SentHub` queues pulses tagged with a channel number
(`post`, which returns `False` and counts a drop when the mailbox is full)
and decodes the queue in order (`process`, which returns the
`(channel, nibbles)` of each good frame). The latest readings per channel
are kept in `si7215` and `gm`.

Helpers for the capture side: `encode_pulse` / `decode_pulse` pack and
unpack mailbox messages, `capture_period` turns two samples of a
free-running 32-bit counter into a 16-bit period, and `icu_period` halves
the period for capture inputs 2 and 3.

`sentdecode.silabs.SilabsChannel` is a separate decoder for pulse lengths
already expressed in ticks; it keeps the 12-bit first signal as `value`
and checks the 8-bit rolling counter in the second signal.

## Reports

`sentdecode.report` formats status lines: `format_raw_report`
(nibbles, error counters, GM reading), `format_slow_messages` (IDs 16 and
22 are also shown as temperatures), `format_throttle_report` and
`format_silabs_report`.

The `sentdecode` command reads pulses from a file, or from standard input
when the file is `-` or left out, and prints one report:

```
sentdecode pulses.txt
sentdecode --mode throttle --open 500 --closed 3600 pulses.txt
sentdecode --mode silabs ticks.txt
```

Each line holds `[channel] period`; the channel defaults to 0, numbers may
be written in any Python integer base prefix, and `#` starts a comment.
In `raw` mode (the default) and `throttle` mode the periods are timer
clocks for two channels and channel 0 is reported; in `silabs` mode they
are ticks for four channels. Output is cut to 299 characters. Bad input
exits with status 2.

## What it does not do

The package works on pulse lengths that have already been measured. It
does not read timer captures or GPIO edges itself, does not talk to a
serial port, and the command prints a single report rather than
refreshing it periodically.