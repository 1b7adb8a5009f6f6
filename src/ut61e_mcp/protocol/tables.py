"""Static measurement and range tables.

The range code (byte 0, bits 2:0) indexes a range table selected by the
measurement type (byte 6, bits 3:0). Empty slots are codes the meter
never sends for that function.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional


class RangeEntry(NamedTuple):
    """One display range: label as shown on the LCD, units, digit scale."""

    label: str
    units: str
    scale: float


class RangeFamily(Enum):
    """Range table identifiers, one per measurement family."""

    VOLTAGE = "voltage"
    RESISTANCE = "resistance"
    CAPACITANCE = "capacitance"
    FREQUENCY = "frequency"
    CURRENT_UA = "current_ua"
    CURRENT_MA = "current_ma"
    CURRENT_A = "current_a"
    PERCENT = "percent"


class MeasurementType(NamedTuple):
    """A measurement function and the range family it reads against."""

    label: str
    family: Optional[RangeFamily]


RangeTable = tuple[Optional[RangeEntry], ...]

RANGE_TABLE_SIZE = 8
MEASUREMENT_TABLE_SIZE = 16

RANGE_TABLES: dict[RangeFamily, RangeTable] = {
    RangeFamily.VOLTAGE: (
        RangeEntry("2.2000", "V", 0.0001),
        RangeEntry("22.000", "V", 0.001),
        RangeEntry("220.00", "V", 0.01),
        RangeEntry("1000.0", "V", 0.1),
        RangeEntry("220.00", "mV", 0.01),
        None,
        None,
        None,
    ),
    RangeFamily.RESISTANCE: (
        RangeEntry("220.00", "Ohm", 0.01),
        RangeEntry("2.2000", "kOhm", 0.0001),
        RangeEntry("22.000", "kOhm", 0.001),
        RangeEntry("220.00", "kOhm", 0.01),
        RangeEntry("2.2000", "MOhm", 0.0001),
        RangeEntry("22.000", "MOhm", 0.001),
        RangeEntry("220.00", "MOhm", 0.01),
        None,
    ),
    RangeFamily.CAPACITANCE: (
        RangeEntry("22.000", "nF", 0.001),
        RangeEntry("220.00", "nF", 0.01),
        RangeEntry("2.2000", "uF", 0.0001),
        RangeEntry("22.000", "uF", 0.001),
        RangeEntry("220.00", "uF", 0.01),
        RangeEntry("2.2000", "mF", 0.0001),
        RangeEntry("22.000", "mF", 0.001),
        RangeEntry("220.00", "mF", 0.01),
    ),
    RangeFamily.FREQUENCY: (
        RangeEntry("220.00", "Hz", 0.01),
        RangeEntry("2200.0", "Hz", 0.1),
        None,
        RangeEntry("22.000", "kHz", 0.001),
        RangeEntry("220.00", "kHz", 0.01),
        RangeEntry("2.2000", "MHz", 0.0001),
        RangeEntry("22.000", "MHz", 0.001),
        RangeEntry("220.00", "MHz", 0.01),
    ),
    RangeFamily.CURRENT_UA: (
        RangeEntry("220.00", "uA", 0.01),
        RangeEntry("2200.0", "uA", 0.1),
        None, None, None, None, None, None,
    ),
    RangeFamily.CURRENT_MA: (
        RangeEntry("22.000", "mA", 0.001),
        RangeEntry("220.00", "mA", 0.01),
        None, None, None, None, None, None,
    ),
    RangeFamily.CURRENT_A: (
        RangeEntry("10.000", "A", 0.001),
        None, None, None, None, None, None, None,
    ),
    RangeFamily.PERCENT: (
        RangeEntry("100.0", "%", 0.01),
        RangeEntry("100.0", "%", 0.01),
        None,
        RangeEntry("100.0", "%", 0.01),
        RangeEntry("100.0", "%", 0.01),
        RangeEntry("100.0", "%", 0.01),
        RangeEntry("100.0", "%", 0.01),
        None,
    ),
}

# Indexed by the measurement type code; 7, 8, 10 and 12 are unused
MEASUREMENT_TYPES: tuple[Optional[MeasurementType], ...] = (
    MeasurementType("A", RangeFamily.CURRENT_A),
    MeasurementType("Diode", RangeFamily.VOLTAGE),
    MeasurementType("Hz/%", RangeFamily.FREQUENCY),
    MeasurementType("Ohm", RangeFamily.RESISTANCE),
    MeasurementType("deg", None),
    MeasurementType("Buzzer", RangeFamily.RESISTANCE),
    MeasurementType("Cap", RangeFamily.CAPACITANCE),
    None,
    None,
    MeasurementType("A", RangeFamily.CURRENT_A),
    None,
    MeasurementType("V/mV", RangeFamily.VOLTAGE),
    None,
    MeasurementType("uA", RangeFamily.CURRENT_UA),
    MeasurementType("ADP", None),
    MeasurementType("mA", RangeFamily.CURRENT_MA),
)


def lookup_mode(code: int) -> MeasurementType | None:
    """Return the measurement type for a 4-bit code, or ``None``."""
    return MEASUREMENT_TYPES[code & 0x0F]


def lookup_range(family: RangeFamily, code: int) -> RangeEntry | None:
    """Return the range entry for a 3-bit code within ``family``, or ``None``."""
    return RANGE_TABLES[family][code & 0x07]
