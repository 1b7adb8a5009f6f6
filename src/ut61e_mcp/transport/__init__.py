"""Transport layer: byte sources for the meter's serial output."""

from __future__ import annotations

from typing import Protocol

from .hid_uart import HidUartConnection
from .serial_port import SerialConnection


class ByteSource(Protocol):
    """Anything that yields the next received byte, or ``None`` on timeout."""

    def read_byte(self) -> int | None: ...
