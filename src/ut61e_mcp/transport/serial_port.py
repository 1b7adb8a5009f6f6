"""RS-232 / USB-serial connection for the UT61E's opto-isolated cable.

The cable draws its power from the handshake lines, so DTR must be
asserted and RTS cleared after opening the port.
"""

from __future__ import annotations

import logging

import serial

from ..protocol.framing import FRAME_SIZE

logger = logging.getLogger(__name__)

BAUD_RATE = 19200
READ_TIMEOUT = 0.05


class SerialConnection:
    """Byte source reading the meter through a serial port.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        byte = conn.read_byte()
        conn.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = BAUD_RATE,
        timeout: float = READ_TIMEOUT,
    ) -> None:
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout
        self._ser: serial.Serial | None = None
        self._pending = bytearray()

    @property
    def port(self) -> str:
        return self._port

    @property
    def connected(self) -> bool:
        return self._ser is not None and self._ser.is_open

    def open(self) -> str:
        """Open and configure the port.

        Returns:
            The port name.

        Raises:
            ConnectionError: If the port cannot be opened.
        """
        try:
            ser = serial.Serial(
                port=self._port,
                baudrate=self._baudrate,
                bytesize=serial.SEVENBITS,
                parity=serial.PARITY_ODD,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._timeout,
            )
        except serial.SerialException as e:
            raise ConnectionError(f"Could not open {self._port}: {e}") from e

        ser.dtr = True
        ser.rts = False
        ser.reset_input_buffer()
        self._ser = ser
        self._pending.clear()
        logger.info("Connected via %s (%d baud)", self._port, self._baudrate)
        return self._port

    def close(self) -> None:
        """Close the port."""
        if self._ser is None:
            return

        try:
            self._ser.close()
        except serial.SerialException as e:
            logger.warning("Error closing %s: %s", self._port, e)
        finally:
            self._ser = None
            self._pending.clear()
            logger.info("Disconnected")

    def read(self, size: int = FRAME_SIZE) -> bytes:
        """Read up to ``size`` bytes, returning ``b""`` on timeout.

        Raises:
            ConnectionError: If not connected.
        """
        if not self.connected:
            raise ConnectionError("Not connected to device")

        if not self._pending:
            # Take whatever is already buffered, waiting for at least one byte
            waiting = self._ser.in_waiting
            self._pending.extend(self._ser.read(max(1, waiting)))

        data = bytes(self._pending[:size])
        del self._pending[:size]
        return data

    def read_byte(self) -> int | None:
        """Return the next byte, or ``None`` on timeout."""
        data = self.read(1)
        return data[0] if data else None
