"""USB connection through the Silicon Labs CP2110 HID-to-UART bridge.

The UT61E's USB cable presents as a HID device (0x10C4:0xEA80). The
bridge is driven entirely with HID reports:

- Feature 0x41: UART enable
- Feature 0x50: UART config (baud u32 BE, parity, flow, data bits, stop bits)
- Feature 0x43: purge FIFOs
- Input/output reports 0x01-0x3F: the report ID is the number of
  UART data bytes that follow
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..protocol.framing import FRAME_SIZE

logger = logging.getLogger(__name__)

VENDOR_ID = 0x10C4
PRODUCT_ID = 0xEA80
READ_TIMEOUT_MS = 50
HID_REPORT_SIZE = 64
MAX_DATA_REPORT_ID = 0x3F

REPORT_UART_ENABLE = 0x41
REPORT_PURGE_FIFOS = 0x43
REPORT_UART_CONFIG = 0x50

PURGE_TX = 0x01
PURGE_RX = 0x02

BAUD_RATE = 19200
PARITY_NONE = 0x00
PARITY_ODD = 0x01
PARITY_EVEN = 0x02
FLOW_CONTROL_NONE = 0x00
DATA_BITS_7 = 0x02
DATA_BITS_8 = 0x03
STOP_BITS_SHORT = 0x00


@dataclass
class UartConfig:
    """CP2110 line settings. Defaults match the UT61E: 19200 7O1."""

    baud_rate: int = BAUD_RATE
    parity: int = PARITY_ODD
    flow_control: int = FLOW_CONTROL_NONE
    data_bits: int = DATA_BITS_7
    stop_bits: int = STOP_BITS_SHORT

    def to_report(self) -> bytes:
        """Build the 0x50 feature report."""
        return (
            bytes([REPORT_UART_CONFIG])
            + self.baud_rate.to_bytes(4, "big")
            + bytes([self.parity, self.flow_control, self.data_bits, self.stop_bits])
        )


@dataclass
class DeviceInfo:
    """Basic device identification from USB descriptors."""

    vendor_id: int = VENDOR_ID
    product_id: int = PRODUCT_ID
    manufacturer: str = ""
    product: str = ""
    serial: str = ""


class HidUartConnection:
    """Byte source reading the meter through a CP2110 bridge.

    Usage::

        conn = HidUartConnection()
        conn.open()
        byte = conn.read_byte()
        conn.close()
    """

    def __init__(
        self,
        vendor_id: int = VENDOR_ID,
        product_id: int = PRODUCT_ID,
        config: UartConfig | None = None,
        timeout_ms: int = READ_TIMEOUT_MS,
    ) -> None:
        self._vendor_id = vendor_id
        self._product_id = product_id
        self._config = config or UartConfig()
        self._timeout_ms = timeout_ms
        self._device = None
        self._connected = False
        self._pending = bytearray()
        self._device_info = DeviceInfo(vendor_id=vendor_id, product_id=product_id)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def device_info(self) -> DeviceInfo:
        return self._device_info

    def open(self) -> DeviceInfo:
        """Open the bridge, configure the UART and flush stale data.

        Returns:
            DeviceInfo with USB descriptor information.

        Raises:
            ConnectionError: If the device cannot be found or opened.
        """
        import hid

        device = hid.device()
        try:
            device.open(self._vendor_id, self._product_id)
        except (IOError, OSError) as e:
            raise ConnectionError(
                f"Could not open CP2110 bridge "
                f"({self._vendor_id:#06x}:{self._product_id:#06x}). "
                f"Ensure the cable is connected and you have permissions. "
                f"Last error: {e}"
            ) from e

        try:
            device.set_nonblocking(False)
            device.send_feature_report([REPORT_UART_ENABLE, 0x01])
            device.send_feature_report(list(self._config.to_report()))
            device.send_feature_report([REPORT_PURGE_FIFOS, PURGE_TX | PURGE_RX])
        except (IOError, OSError) as e:
            device.close()
            raise ConnectionError(f"Could not configure CP2110 UART: {e}") from e

        self._device = device
        self._connected = True
        self._pending.clear()

        self._device_info = DeviceInfo(
            vendor_id=self._vendor_id,
            product_id=self._product_id,
            manufacturer=device.get_manufacturer_string() or "",
            product=device.get_product_string() or "",
            serial=device.get_serial_number_string() or "",
        )

        logger.info(
            "Connected via CP2110: %s %s (%d baud)",
            self._device_info.manufacturer,
            self._device_info.product,
            self._config.baud_rate,
        )
        return self._device_info

    def close(self) -> None:
        """Close the HID device."""
        if not self._connected:
            return

        try:
            self._device.close()
        except Exception as e:
            logger.warning("Error closing device: %s", e)
        finally:
            self._device = None
            self._connected = False
            self._pending.clear()
            logger.info("Disconnected")

    def read(self, size: int = FRAME_SIZE, timeout_ms: int | None = None) -> bytes:
        """Read up to ``size`` UART bytes.

        Returns:
            The bytes received, or ``b""`` if the read timed out.

        Raises:
            ConnectionError: If not connected.
        """
        if not self._connected:
            raise ConnectionError("Not connected to device")

        if not self._pending:
            timeout = self._timeout_ms if timeout_ms is None else timeout_ms
            report = self._device.read(HID_REPORT_SIZE, timeout)
            if report:
                self._pending.extend(parse_input_report(bytes(report)))

        data = bytes(self._pending[:size])
        del self._pending[:size]
        return data

    def read_byte(self) -> int | None:
        """Return the next UART byte, or ``None`` on timeout."""
        data = self.read(1)
        return data[0] if data else None


def parse_input_report(report: bytes) -> bytes:
    """Extract the UART payload from a CP2110 interrupt-in report.

    Reports with an ID outside 0x01-0x3F carry no UART data.
    """
    if not report:
        return b""
    count = report[0]
    if not 1 <= count <= MAX_DATA_REPORT_ID:
        logger.debug("Ignoring non-data report 0x%02X", count)
        return b""
    return report[1:1 + count]
