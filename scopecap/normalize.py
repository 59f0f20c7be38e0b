"""
Conversion of a raw CaptureFile into physical units.

Point series follow the scope's screen convention of 50 points per division:

    time[i]    = i * time_scale / 50
    voltage[i] = (sample[i] - offset) * voltage_scale / 50

All arithmetic is float32. Probe attenuation is reported alongside each
channel but is not applied to the voltages.
"""

from __future__ import annotations

import logging

import numpy as np

from scopecap.enums import (
    Attenuation,
    Coupling,
    ScrollSpeed,
    Trigger50,
    TriggerChannel,
    TriggerEdge,
    TriggerType,
    decode,
)
from scopecap.layout import LayoutProfile, MeasurementLayout, header_field_offset
from scopecap.scales import Scale, resolve_time_scale, resolve_voltage_scale
from scopecap.types import (
    CaptureFile,
    Channel,
    Display,
    Measurements,
    NormalizedCapture,
    Point,
    ProcessedMeasurements,
    Trigger,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DIVISION_POINTS",
    "VOLTAGE_MEASUREMENT_DIVISOR",
    "parse_frequency",
    "process_voltage_measurement",
    "generate_points",
    "process_measurements",
    "normalize",
]

DIVISION_POINTS = np.float32(50.0)
VOLTAGE_MEASUREMENT_DIVISOR = np.float32(1024.0)


def parse_frequency(high: int, low: int) -> int:
    """Join the two 16-bit halves of a split frequency field."""
    return (high << 16) | low


def process_voltage_measurement(code: int) -> np.float32:
    """Convert an amplitude statistic from device code to volts."""
    return np.float32(code) / VOLTAGE_MEASUREMENT_DIVISOR


def generate_points(samples: np.ndarray, voltage_scale: Scale, time_scale: Scale, offset: int) -> tuple[Point, ...]:
    """Map raw sample codes to (time, voltage) points in index order."""
    index = np.arange(len(samples), dtype=np.float32)
    times = index * time_scale.coefficient / DIVISION_POINTS
    codes = np.asarray(samples).astype(np.float32)
    voltages = (codes - np.float32(offset)) * voltage_scale.coefficient / DIVISION_POINTS
    return tuple(Point(t, v) for t, v in zip(times, voltages))


def process_measurements(raw: Measurements, layout: MeasurementLayout) -> ProcessedMeasurements:
    """Convert one raw measurement block.

    Raises:
        ValueError: ``raw`` was not decoded with ``layout``
    """
    if layout is MeasurementLayout.SPLIT16:
        if raw.frequency_high is None or raw.frequency_low is None:
            raise ValueError("Measurements carry no split16 frequency; capture was decoded with another layout")
        frequency = parse_frequency(raw.frequency_high, raw.frequency_low)
    else:
        if raw.frequency is None:
            raise ValueError("Measurements carry no native32 frequency; capture was decoded with another layout")
        frequency = raw.frequency
    return ProcessedMeasurements(
        vmax=process_voltage_measurement(raw.vmax),
        vmin=process_voltage_measurement(raw.vmin),
        vavg=process_voltage_measurement(raw.vavg),
        vrms=process_voltage_measurement(raw.vrms),
        vpp=process_voltage_measurement(raw.vpp),
        vp=process_voltage_measurement(raw.vp),
        frequency=frequency,
        cycle_ns=raw.cycle_ns,
        time_plus_ns=raw.time_plus_ns,
        time_minus_ns=raw.time_minus_ns,
        duty_plus_percentage=raw.duty_plus_percentage,
        duty_minus_percentage=raw.duty_minus_percentage,
    )


def normalize(
    capture: CaptureFile,
    profile: LayoutProfile,
    *,
    legacy_channel2_points: bool = False,
) -> NormalizedCapture:
    """Resolve every code in ``capture`` and derive the point series.

    Args:
        capture: Raw decode result
        profile: Layout the capture was decoded with
        legacy_channel2_points: Build channel 2 points from channel 1's coarse
            trace, as older releases of this tool did. Off by default.

    Raises:
        ScaleIndexOutOfRange, UnknownEnumCode: a header code has no mapping
        ValueError: capture was decoded with a different measurement layout
    """
    h = capture.header

    def at(field: str) -> tuple[str, int]:
        return field, header_field_offset(profile, field)

    time_scale = resolve_time_scale(h.time_scale, *at("time_scale"))
    channel1_scale = resolve_voltage_scale(h.channel1_scale, *at("channel1_scale"))
    channel2_scale = resolve_voltage_scale(h.channel2_scale, *at("channel2_scale"))

    trigger = Trigger(
        trigger_type=decode(TriggerType, h.trigger_type, *at("trigger_type")),
        edge=decode(TriggerEdge, h.trigger_edge, *at("trigger_edge")),
        channel=decode(TriggerChannel, h.trigger_channel, *at("trigger_channel")),
        trigger_50=decode(Trigger50, h.trigger_50, *at("trigger_50")),
    )

    channel2_samples = capture.channel21
    if legacy_channel2_points:
        logger.debug("Using channel 1 coarse trace for channel 2 points (legacy)")
        channel2_samples = capture.channel11

    layout = profile.measurement_layout
    channel1 = Channel(
        scale=channel1_scale,
        coupling=decode(Coupling, h.channel1_coupling, *at("channel1_coupling")),
        attenuation=decode(Attenuation, h.channel1_probe, *at("channel1_probe")),
        measurements=process_measurements(h.channel1_measurements, layout),
        points=generate_points(capture.channel11, channel1_scale, time_scale, h.channel1_offset),
    )
    channel2 = Channel(
        scale=channel2_scale,
        coupling=decode(Coupling, h.channel2_coupling, *at("channel2_coupling")),
        attenuation=decode(Attenuation, h.channel2_probe, *at("channel2_probe")),
        measurements=process_measurements(h.channel2_measurements, layout),
        points=generate_points(channel2_samples, channel2_scale, time_scale, h.channel2_offset),
    )

    logger.debug(f"Normalized capture: time scale {time_scale}, ch1 {channel1_scale}, ch2 {channel2_scale}")
    return NormalizedCapture(
        trigger=trigger,
        time_scale=time_scale,
        scroll_speed=decode(ScrollSpeed, h.scroll_speed, *at("scroll_speed")),
        display=Display(screen_brightness=h.screen_brightness, grid_brightness=h.grid_brightness),
        channel1=channel1,
        channel2=channel2,
    )
