"""Decoded meter reading."""

from __future__ import annotations

from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Reading:
    """One decoded measurement with its status flags."""

    percent: bool
    minus: bool
    low_battery: bool
    # Overload, or an open/reversed diode
    ol: bool
    delta: bool
    # Frequency below the range floor, or duty cycle under 10%
    ul: bool
    max: bool
    min: bool
    dc: bool
    ac: bool
    auto: bool
    hz: bool
    hold: bool
    mode: str
    range: str
    units: str
    value: float
    norm_value: float
    norm_units: str

    @property
    def display(self) -> str:
        """Value as the meter's LCD would show it."""
        if self.ol:
            return f"OL {self.units}"
        decimals = len(self.range.split(".")[1]) if "." in self.range else 0
        return f"{self.value:.{decimals}f} {self.units}"

    def to_dict(self) -> dict:
        """Plain dict of every field plus the display text."""
        d = asdict(self)
        d["display"] = self.display
        return d
