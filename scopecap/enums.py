"""
Closed-set device settings stored as small integer codes.

Codes are contiguous from 0 in declaration order. A code outside the set is a
decode failure; there is no fallback member.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, TypeVar

from scopecap.errors import UnknownEnumCode

__all__ = [
    "SettingCode",
    "Coupling",
    "Attenuation",
    "ScrollSpeed",
    "TriggerType",
    "TriggerEdge",
    "TriggerChannel",
    "Trigger50",
    "decode",
]


class SettingCode(IntEnum):
    """Base for the header setting enums."""

    @property
    def json_name(self) -> str:
        """Name used for this setting in parsed-mode JSON output."""
        return _JSON_NAMES[type(self)][self.value]


class Coupling(SettingCode):
    """Channel input coupling."""

    DC = 0
    AC = 1


class Attenuation(SettingCode):
    """Probe attenuation setting. Reported only, not applied to voltages."""

    X1 = 0
    X10 = 1
    X100 = 2

    @property
    def factor(self) -> int:
        return 10**self.value


class ScrollSpeed(SettingCode):
    FAST = 0
    SLOW = 1


class TriggerType(SettingCode):
    AUTO = 0
    SINGLE = 1
    NORMAL = 2


class TriggerEdge(SettingCode):
    RISING = 0
    FALLING = 1


class TriggerChannel(SettingCode):
    CHANNEL1 = 0
    CHANNEL2 = 1


class Trigger50(SettingCode):
    """50% trigger level shortcut state."""

    ON = 0
    OFF = 1


# Stable output names, indexed by code
_JSON_NAMES: dict[type, tuple[str, ...]] = {
    Coupling: ("DC", "AC"),
    Attenuation: ("OneX", "TenX", "OneHundredX"),
    ScrollSpeed: ("Fast", "Slow"),
    TriggerType: ("Auto", "Single", "Normal"),
    TriggerEdge: ("Rising", "Falling"),
    TriggerChannel: ("Channel1", "Channel2"),
    Trigger50: ("On", "Off"),
}


E = TypeVar("E", bound=IntEnum)


def decode(enum_cls: type[E], raw_code: int, field: str, offset: Optional[int] = None) -> E:
    """Map a raw code to its enum member or raise UnknownEnumCode."""
    try:
        return enum_cls(raw_code)
    except ValueError:
        raise UnknownEnumCode(field, raw_code, offset, enum_cls.__name__) from None
