"""Decoding of SENT sensor pulse streams into frames, slow-channel messages, sensor values and status reports."""

__version__ = "0.1.0"
__all__ = ["crc", "decoder", "sensors", "silabs", "hub", "report"]