"""MCP server entry point for the UNI-T UT61E multimeter.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .protocol.errors import DecodeError, ReadExhaustedError
from .protocol.framing import FRAME_SIZE
from .protocol.parser import decode_frame
from .protocol.tables import MEASUREMENT_TYPES, RANGE_TABLES
from .reader import MeterReader
from .transport.hid_uart import HidUartConnection
from .transport.serial_port import SerialConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "ut61e",
    instructions="MCP server for the UNI-T UT61E digital multimeter",
)

MAX_READINGS = 100

# Global connection state
_connection: HidUartConnection | SerialConnection | None = None
_reader: MeterReader | None = None


def _get_reader() -> MeterReader:
    """Get the reader for the active connection, raising if not connected."""
    if _connection is None or not _connection.connected or _reader is None:
        raise RuntimeError(
            "Not connected to meter. Use the 'connect' tool first."
        )
    return _reader


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(backend: str = "hid", port: str | None = None) -> dict[str, Any]:
    """Open a connection to the meter.

    Args:
        backend: "hid" for the CP2110 USB cable, "serial" for an RS-232 cable.
        port: Serial port name, required for the serial backend.
    """
    global _connection, _reader
    if _connection is not None and _connection.connected:
        return {"connected": True, "message": "Already connected"}

    if backend == "hid":
        conn = HidUartConnection()
        info = conn.open()
        result: dict[str, Any] = {
            "connected": True,
            "backend": "hid",
            "manufacturer": info.manufacturer,
            "product": info.product,
        }
    elif backend == "serial":
        if not port:
            return {"error": "A port is required for the serial backend"}
        conn = SerialConnection(port)
        result = {"connected": True, "backend": "serial", "port": conn.open()}
    else:
        return {"error": f"Unknown backend: {backend!r}"}

    _connection = conn
    _reader = MeterReader(conn)
    return result


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the meter."""
    global _connection, _reader
    if _connection is not None:
        _connection.close()
    _connection = None
    _reader = None
    return {"disconnected": True}


# ─── MEASUREMENT TOOLS ───────────────────────────────────────────────

@mcp.tool()
def read_measurement() -> dict[str, Any]:
    """Read the next measurement from the meter.

    Returns the decoded flags, mode, range, raw and normalized values.
    """
    reader = _get_reader()
    try:
        reading = reader.read_reading()
    except ReadExhaustedError as e:
        return {"error": str(e)}
    except DecodeError as e:
        return {"error": str(e), "frame": e.frame.hex(" ")}
    return reading.to_dict()


@mcp.tool()
def read_measurements(count: int = 5) -> dict[str, Any]:
    """Read several consecutive measurements.

    Frames that fail to decode are skipped.

    Args:
        count: Number of readings (1-100, default 5).
    """
    if not 1 <= count <= MAX_READINGS:
        return {"error": f"Count must be 1-{MAX_READINGS}"}

    reader = _get_reader()
    readings = []
    try:
        for reading in reader.iter_readings(count):
            readings.append(reading.to_dict())
    except ReadExhaustedError as e:
        return {"readings": readings, "error": str(e)}
    except DecodeError as e:
        return {"readings": readings, "error": str(e), "frame": e.frame.hex(" ")}
    return {"readings": readings}


@mcp.tool()
def decode_frame_hex(hex_data: str) -> dict[str, Any]:
    """Decode a captured 14-byte frame given as hex, no meter required.

    Args:
        hex_data: Frame bytes as hex, e.g. "30 30 31 32 33 34 3b 30 30 30 38 30 0d 0a".
    """
    try:
        data = bytes.fromhex(hex_data)
    except ValueError:
        return {"error": "Invalid hex data"}
    if len(data) != FRAME_SIZE:
        return {"error": f"Frame must be {FRAME_SIZE} bytes, got {len(data)}"}

    try:
        return decode_frame(data).to_dict()
    except DecodeError as e:
        return {"error": str(e)}


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("ut61e://modes")
def modes_resource() -> str:
    """Measurement types and the ranges each one reports."""
    modes = []
    for code, mode in enumerate(MEASUREMENT_TYPES):
        if mode is None:
            continue
        ranges = []
        if mode.family is not None:
            ranges = [
                {"code": i, "label": entry.label, "units": entry.units}
                for i, entry in enumerate(RANGE_TABLES[mode.family])
                if entry is not None
            ]
        modes.append({"code": code, "mode": mode.label, "ranges": ranges})
    return json.dumps(modes, indent=2)


# ─── PROMPTS ─────────────────────────────────────────────────────────

@mcp.prompt()
def log_session(count: int = 20) -> str:
    """Guide a short measurement logging session.

    Args:
        count: Number of readings to collect.
    """
    return f"""Connect to the meter using the connect tool, then collect {count} readings
with read_measurements. Report:
- The measurement mode and range in use
- Minimum, maximum and mean of the normalized values
- Any readings flagged as overload (ol), under-range (ul) or low battery
- Whether HOLD, MAX/MIN or relative (delta) mode was active

Disconnect when finished."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
