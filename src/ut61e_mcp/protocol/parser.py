"""Frame decoding: status flags, range lookup, digits and unit normalization."""

from __future__ import annotations

from ..models.reading import Reading
from .errors import (
    NoRangeTableError,
    UnitTableError,
    UnknownModeError,
    UnknownRangeError,
)
from .framing import FRAME_SIZE, Frame
from .tables import RangeFamily, lookup_mode, lookup_range

# Byte offsets
OFF_RANGE = 0
OFF_DIGITS = 1
DIGIT_COUNT = 5
OFF_MODE = 6
OFF_INFO = 7
OFF_REL = 8
OFF_LIMIT = 9
OFF_KIND = 10
OFF_HOLD = 11

RANGE_MASK = 0b00000111
DIGIT_MASK = 0b00001111
MODE_MASK = 0b00001111

# Byte 7
PERCENT = 0b00001000
NEG = 0b00000100
LOW_BAT = 0b00000010
OL = 0b00000001

# Byte 8
DELTA = 0b00000010

# Byte 9
UL = 0b00001000
MAX = 0b00000100
MIN = 0b00000010

# Byte 10
DC = 0b00001000
AC = 0b00000100
AUTO = 0b00000010
HZ = 0b00000001

# Byte 11
HOLD = 0b00000010

# units -> (multiplier, canonical units)
NORMALIZED_UNITS: dict[str, tuple[float, str]] = {
    "V": (1.0, "V"),
    "mV": (1e-3, "V"),
    "A": (1.0, "A"),
    "mA": (1e-3, "A"),
    "uA": (1e-6, "A"),
    "Ohm": (1.0, "Ohm"),
    "kOhm": (1e3, "Ohm"),
    "MOhm": (1e6, "Ohm"),
    "nF": (1e-9, "F"),
    "uF": (1e-6, "F"),
    "mF": (1e-3, "F"),
    "Hz": (1.0, "Hz"),
    "kHz": (1e3, "Hz"),
    "MHz": (1e6, "Hz"),
    "%": (1.0, "%"),
}


def normalize(value: float, units: str) -> tuple[float, str]:
    """Convert a value to volts, amperes, ohms, farads or hertz.

    Percent passes through unchanged.

    Raises:
        UnitTableError: If ``units`` is not a unit the range tables use.
    """
    try:
        multiplier, norm_units = NORMALIZED_UNITS[units]
    except KeyError:
        raise UnitTableError(f"Unexpected units: {units!r}") from None
    return value * multiplier, norm_units


def decode_digits(data: bytes) -> int:
    """Read the five digit nibbles, most significant first."""
    value = 0
    for n in range(OFF_DIGITS, OFF_DIGITS + DIGIT_COUNT):
        value = value * 10 + (data[n] & DIGIT_MASK)
    return value


def decode_frame(frame: Frame | bytes) -> Reading:
    """Decode a complete 14-byte frame into a ``Reading``.

    Args:
        frame: A ``Frame`` from ``FrameStream`` or raw 14-byte data.

    Returns:
        The decoded reading.

    Raises:
        ValueError: If the data is not 14 bytes long.
        UnknownModeError: If the measurement type code is unused.
        NoRangeTableError: If the mode has no range table to read against.
        UnknownRangeError: If the range code is unused in the selected table.
    """
    data = bytes(frame)
    if len(data) != FRAME_SIZE:
        raise ValueError(f"Frame must be {FRAME_SIZE} bytes, got {len(data)}")

    percent = bool(data[OFF_INFO] & PERCENT)
    minus = bool(data[OFF_INFO] & NEG)
    hz = bool(data[OFF_KIND] & HZ)

    mode_code = data[OFF_MODE] & MODE_MASK
    mode = lookup_mode(mode_code)
    if mode is None:
        raise UnknownModeError(
            f"Unknown measurement type 0x{mode_code:X}", data, mode_code
        )

    # Percent and Hz flags take precedence over the mode's own table
    if percent:
        family = RangeFamily.PERCENT
    elif hz:
        family = RangeFamily.FREQUENCY
    elif mode.family is None:
        raise NoRangeTableError(
            f"Measurement type {mode.label!r} has no range table", data, mode_code
        )
    else:
        family = mode.family

    range_code = data[OFF_RANGE] & RANGE_MASK
    entry = lookup_range(family, range_code)
    if entry is None:
        raise UnknownRangeError(
            f"Unknown range {range_code} for {family.value}", data, range_code
        )

    value = decode_digits(data) * entry.scale
    if minus:
        value = -value

    norm_value, norm_units = normalize(value, entry.units)

    return Reading(
        percent=percent,
        minus=minus,
        low_battery=bool(data[OFF_INFO] & LOW_BAT),
        ol=bool(data[OFF_INFO] & OL),
        delta=bool(data[OFF_REL] & DELTA),
        ul=bool(data[OFF_LIMIT] & UL),
        max=bool(data[OFF_LIMIT] & MAX),
        min=bool(data[OFF_LIMIT] & MIN),
        dc=bool(data[OFF_KIND] & DC),
        ac=bool(data[OFF_KIND] & AC),
        auto=bool(data[OFF_KIND] & AUTO),
        hz=hz,
        hold=bool(data[OFF_HOLD] & HOLD),
        mode=mode.label,
        range=entry.label,
        units=entry.units,
        value=value,
        norm_value=norm_value,
        norm_units=norm_units,
    )
