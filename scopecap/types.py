"""
Core data types - raw CaptureFile and the normalized record built from it.

The raw types hold integer device codes exactly as stored; the normalized
types hold resolved scales, enum members and physical units.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Optional

import numpy as np

from scopecap.enums import (
    Attenuation,
    Coupling,
    ScrollSpeed,
    Trigger50,
    TriggerChannel,
    TriggerEdge,
    TriggerType,
)
from scopecap.scales import Scale


@dataclass(frozen=True)
class Measurements:
    """Per-channel summary statistics as raw device codes.

    Exactly one frequency encoding is populated: ``frequency_high`` and
    ``frequency_low`` for split 16-bit layouts, ``frequency`` for 32-bit ones.
    """

    vmax: int
    vmin: int
    vavg: int
    vrms: int
    vpp: int
    vp: int
    cycle_ns: int
    time_plus_ns: int
    time_minus_ns: int
    duty_plus_percentage: int
    duty_minus_percentage: int
    frequency_high: Optional[int] = None
    frequency_low: Optional[int] = None
    frequency: Optional[int] = None

    def to_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(frozen=True)
class Header:
    """Capture settings block. Scale and enum fields hold raw codes."""

    channel1_scale: int
    channel1_coupling: int
    channel1_probe: int
    channel2_scale: int
    channel2_coupling: int
    channel2_probe: int
    time_scale: int
    scroll_speed: int
    trigger_type: int
    trigger_edge: int
    trigger_channel: int
    channel1_offset: int
    channel2_offset: int
    screen_brightness: int
    grid_brightness: int
    trigger_50: int
    channel1_measurements: Measurements
    channel2_measurements: Measurements

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            d[f.name] = value.to_dict() if isinstance(value, Measurements) else value
        return d


@dataclass(frozen=True)
class CaptureFile:
    """Canonical decode result: header plus the four raw sample runs.

    channel11/channel21 are the 1500-point coarse traces of channel 1/2,
    channel12/channel22 the 750-point fine traces.
    """

    header: Header
    channel11: np.ndarray
    channel21: np.ndarray
    channel12: np.ndarray
    channel22: np.ndarray

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "channel11": self.channel11.tolist(),
            "channel21": self.channel21.tolist(),
            "channel12": self.channel12.tolist(),
            "channel22": self.channel22.tolist(),
        }


@dataclass(frozen=True)
class Point:
    """One sample in physical units (float32 seconds, float32 volts)."""

    time: np.float32
    voltage: np.float32


@dataclass(frozen=True)
class ProcessedMeasurements:
    """Measurements in physical units: volts, Hz, nanoseconds, percent."""

    vmax: np.float32
    vmin: np.float32
    vavg: np.float32
    vrms: np.float32
    vpp: np.float32
    vp: np.float32
    frequency: int
    cycle_ns: int
    time_plus_ns: int
    time_minus_ns: int
    duty_plus_percentage: int
    duty_minus_percentage: int


@dataclass(frozen=True)
class Trigger:
    trigger_type: TriggerType
    edge: TriggerEdge
    channel: TriggerChannel
    trigger_50: Trigger50


@dataclass(frozen=True)
class Display:
    screen_brightness: int
    grid_brightness: int


@dataclass(frozen=True)
class Channel:
    """One channel of the normalized record."""

    scale: Scale
    coupling: Coupling
    attenuation: Attenuation
    measurements: ProcessedMeasurements
    points: tuple[Point, ...]


@dataclass(frozen=True)
class NormalizedCapture:
    """Fully resolved capture, ready for plotting or analysis."""

    trigger: Trigger
    time_scale: Scale
    scroll_speed: ScrollSpeed
    display: Display
    channel1: Channel
    channel2: Channel
