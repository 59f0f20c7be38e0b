"""
Per-division scale tables.

Captures store the horizontal (time) and vertical (voltage) scale as a small
index into a fixed table. Each entry is a mantissa plus a decimal exponent, so
that the label shown on the scope ("500mV", "2us") survives round-trips
exactly while the physical coefficient is still available as a float32.

Usage:
    from scopecap.scales import resolve_time_scale, resolve_voltage_scale

    ts = resolve_time_scale(5)       # Scale(mantissa=1.0, exponent=0, unit=Unit.SECOND)
    str(ts)                          # "1s"
    ts.coefficient                   # np.float32(1.0)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from scopecap.errors import ScaleIndexOutOfRange

__all__ = [
    "Unit",
    "Scale",
    "TIME_SCALES",
    "VOLTAGE_SCALES",
    "resolve",
    "resolve_time_scale",
    "resolve_voltage_scale",
]


class Unit(Enum):
    """Physical unit of a scale. Values are the JSON names."""

    VOLT = "Volt"
    SECOND = "Second"

    @property
    def symbol(self) -> str:
        return "V" if self is Unit.VOLT else "s"


# Decimal exponent -> SI prefix
_PREFIXES = {0: "", -3: "m", -6: "u", -9: "n"}


@dataclass(frozen=True)
class Scale:
    """One calibrated per-division step: ``mantissa * 10**exponent`` units."""

    mantissa: float
    exponent: int
    unit: Unit

    def __post_init__(self):
        if self.exponent not in _PREFIXES:
            raise AssertionError(f"Unexpected scale exponent {self.exponent}")

    @property
    def coefficient(self) -> np.float32:
        """Physical value of one division as float32.

        Computed in float32 as ``mantissa * (1 / 10**-exponent)``; the power
        itself is exact, the reciprocal and the product each round once.
        """
        power = np.float32(10 ** abs(self.exponent))
        if self.exponent < 0:
            power = np.float32(1.0) / power
        return np.float32(self.mantissa) * power

    def __str__(self) -> str:
        return f"{self.mantissa:g}{_PREFIXES[self.exponent]}{self.unit.symbol}"


def _decades(unit: Unit, top: tuple[float, ...], exponents: tuple[int, ...]) -> tuple[Scale, ...]:
    """Expand a 1-2-5 progression over the given exponents."""
    return tuple(Scale(m, e, unit) for e in exponents for m in top)


# 50s, 20s, ... 1s, 500ms ... 1ms, 500us ... 1us, 500ns ... 1ns
TIME_SCALES: tuple[Scale, ...] = (
    _decades(Unit.SECOND, (50.0, 20.0, 10.0, 5.0, 2.0, 1.0), (0,))
    + _decades(Unit.SECOND, (500.0, 200.0, 100.0, 50.0, 20.0, 10.0, 5.0, 2.0, 1.0), (-3, -6, -9))
)

VOLTAGE_SCALES: tuple[Scale, ...] = (
    Scale(5.0, 0, Unit.VOLT),
    Scale(2.5, 0, Unit.VOLT),
    Scale(1.0, 0, Unit.VOLT),
    Scale(500.0, -3, Unit.VOLT),
    Scale(200.0, -3, Unit.VOLT),
    Scale(100.0, -3, Unit.VOLT),
    Scale(50.0, -3, Unit.VOLT),
)

_TABLE_NAMES = {id(TIME_SCALES): "time", id(VOLTAGE_SCALES): "voltage"}


def resolve(
    table: tuple[Scale, ...],
    index: int,
    field: str = "scale",
    offset: Optional[int] = None,
) -> Scale:
    """Look up a scale code. Out-of-range codes raise, never default."""
    if index < 0 or index >= len(table):
        raise ScaleIndexOutOfRange(field, _TABLE_NAMES.get(id(table), "scale"), index, len(table), offset)
    return table[index]


def resolve_time_scale(index: int, field: str = "time_scale", offset: Optional[int] = None) -> Scale:
    return resolve(TIME_SCALES, index, field, offset)


def resolve_voltage_scale(index: int, field: str = "channel_scale", offset: Optional[int] = None) -> Scale:
    return resolve(VOLTAGE_SCALES, index, field, offset)
