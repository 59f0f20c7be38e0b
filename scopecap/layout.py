"""
Declarative description of the on-disk capture layouts.

Capture files from different firmware generations share one logical record
but differ along four independent axes:

    field_width         8-bit or 16-bit header settings and sample codes
    byte_order          little-endian or platform-native
    code_resolution     scale/enum codes checked while reading (INLINE) or
                        left as raw codes for the normalizer (DEFERRED)
    measurement_layout  frequency as two 16-bit halves with 16-bit durations
                        (SPLIT16) or as 32-bit fields throughout (NATIVE32)

A LayoutProfile fixes one value per axis plus the absolute offsets of the
relocated blocks. The field order itself lives in HEADER_FIELDS,
MEASUREMENT_FIELDS and SAMPLE_RUNS and is shared by every profile; pads are
counted in slots of the field's own width, so an 8-bit layout is the 16-bit
one with every slot halved.

Layout of the 16-bit header (byte offsets, pads in brackets):

    0    [4]  channel1_scale     @4
    6    [2]  channel1_coupling  @8,  channel1_probe @10
    12   [2]  channel2_scale     @14
    16   [2]  channel2_coupling  @18, channel2_probe @20
              time_scale @22, scroll_speed @24, trigger_type @26,
              trigger_edge @28, trigger_channel @30
    32   [52] channel1_offset    @84, channel2_offset @86
    88   [32] screen_brightness  @120, grid_brightness @122, trigger_50 @124
    208       channel1 measurements (48 bytes)
    256       channel2 measurements (48 bytes)
    1000      samples: 1500 + 1500 + 750 + 750 codes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import partial
from typing import Callable, Optional

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
from scopecap.scales import resolve_time_scale, resolve_voltage_scale

__all__ = [
    "FieldWidth",
    "ByteOrder",
    "CodeResolution",
    "MeasurementLayout",
    "LayoutOffsets",
    "LayoutProfile",
    "FieldSpec",
    "HEADER_FIELDS",
    "MEASUREMENT_FIELDS",
    "SAMPLE_RUNS",
    "PROFILES",
    "DEFAULT_PROFILE",
    "get_profile",
    "expected_size",
    "header_field_offset",
]


class FieldWidth(IntEnum):
    """Size in bytes of header settings and sample codes."""

    BYTE = 1
    WORD = 2


class ByteOrder(Enum):
    """Byte order, valued by its struct/numpy prefix."""

    LITTLE = "<"
    NATIVE = "="


class CodeResolution(Enum):
    DEFERRED = "deferred"
    INLINE = "inline"


class MeasurementLayout(Enum):
    SPLIT16 = "split16"
    NATIVE32 = "native32"


@dataclass(frozen=True)
class FieldSpec:
    """One field of the layout, read in declaration order.

    Attributes:
        name: Attribute name on the decoded record
        pad_slots: Unused slots skipped before the field, in units of its size
        size: Field size in bytes; None means the profile field width
        codec: Callable(code, field, offset) that resolves a scale/enum code
        seek: LayoutOffsets attribute to jump to before reading
        block: Field is a nested measurement block
        count: Field is a run of this many codes
    """

    name: str
    pad_slots: int = 0
    size: Optional[int] = None
    codec: Optional[Callable[..., object]] = None
    seek: Optional[str] = None
    block: bool = False
    count: Optional[int] = None


def _enum(enum_cls) -> Callable[..., object]:
    return partial(decode, enum_cls)


HEADER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("channel1_scale", pad_slots=2, codec=resolve_voltage_scale),
    FieldSpec("channel1_coupling", pad_slots=1, codec=_enum(Coupling)),
    FieldSpec("channel1_probe", codec=_enum(Attenuation)),
    FieldSpec("channel2_scale", pad_slots=1, codec=resolve_voltage_scale),
    FieldSpec("channel2_coupling", pad_slots=1, codec=_enum(Coupling)),
    FieldSpec("channel2_probe", codec=_enum(Attenuation)),
    FieldSpec("time_scale", codec=resolve_time_scale),
    FieldSpec("scroll_speed", codec=_enum(ScrollSpeed)),
    FieldSpec("trigger_type", codec=_enum(TriggerType)),
    FieldSpec("trigger_edge", codec=_enum(TriggerEdge)),
    FieldSpec("trigger_channel", codec=_enum(TriggerChannel)),
    FieldSpec("channel1_offset", pad_slots=26),
    FieldSpec("channel2_offset"),
    FieldSpec("screen_brightness", pad_slots=16),
    FieldSpec("grid_brightness"),
    FieldSpec("trigger_50", codec=_enum(Trigger50)),
    FieldSpec("channel1_measurements", seek="channel1_measurements", block=True),
    FieldSpec("channel2_measurements", seek="channel2_measurements", block=True),
)

_AMPLITUDE_NAMES = ("vmax", "vmin", "vavg", "vrms", "vpp", "vp")
_AMPLITUDE_FIELDS = tuple(FieldSpec(name, pad_slots=1, size=2) for name in _AMPLITUDE_NAMES)
_DURATION_NAMES = ("cycle_ns", "time_plus_ns", "time_minus_ns", "duty_plus_percentage", "duty_minus_percentage")

MEASUREMENT_FIELDS: dict[MeasurementLayout, tuple[FieldSpec, ...]] = {
    MeasurementLayout.SPLIT16: (
        _AMPLITUDE_FIELDS
        + (FieldSpec("frequency_high", size=2), FieldSpec("frequency_low", size=2))
        + tuple(FieldSpec(name, pad_slots=1, size=2) for name in _DURATION_NAMES)
    ),
    MeasurementLayout.NATIVE32: (
        _AMPLITUDE_FIELDS
        + (FieldSpec("frequency", size=4),)
        + tuple(FieldSpec(name, size=4) for name in _DURATION_NAMES)
    ),
}

SAMPLE_RUNS: tuple[FieldSpec, ...] = (
    FieldSpec("channel11", seek="sample_block", count=1500),
    FieldSpec("channel21", count=1500),
    FieldSpec("channel12", count=750),
    FieldSpec("channel22", count=750),
)


def _span(fields: tuple[FieldSpec, ...], width: int) -> int:
    """Bytes covered by a run of fields with no seeks or blocks."""
    total = 0
    for f in fields:
        size = f.size or width
        total += (f.pad_slots + (f.count or 1)) * size
    return total


@dataclass(frozen=True)
class LayoutOffsets:
    """Absolute byte offsets of the relocated blocks."""

    channel1_measurements: int
    channel2_measurements: int
    sample_block: int


@dataclass(frozen=True)
class LayoutProfile:
    """One on-disk schema variant. Fixed for the whole decode of a file."""

    name: str
    field_width: FieldWidth
    byte_order: ByteOrder
    code_resolution: CodeResolution
    measurement_layout: MeasurementLayout
    offsets: LayoutOffsets

    def __post_init__(self):
        # Blocks must not overlap the forward-read header or each other
        header_end = _span(tuple(f for f in HEADER_FIELDS if not f.block), self.field_width)
        block = self.measurement_block_size
        o = self.offsets
        if not (
            header_end <= o.channel1_measurements
            and o.channel1_measurements + block <= o.channel2_measurements
            and o.channel2_measurements + block <= o.sample_block
        ):
            raise ValueError(
                f"Profile {self.name!r}: overlapping layout (header ends at {header_end}, "
                f"measurements at {o.channel1_measurements}/{o.channel2_measurements} "
                f"size {block}, samples at {o.sample_block})"
            )

    @property
    def measurement_fields(self) -> tuple[FieldSpec, ...]:
        return MEASUREMENT_FIELDS[self.measurement_layout]

    @property
    def measurement_block_size(self) -> int:
        return _span(self.measurement_fields, self.field_width)

    @property
    def inline(self) -> bool:
        return self.code_resolution is CodeResolution.INLINE


PROFILES: dict[str, LayoutProfile] = {
    p.name: p
    for p in (
        LayoutProfile(
            name="v1",
            field_width=FieldWidth.BYTE,
            byte_order=ByteOrder.LITTLE,
            code_resolution=CodeResolution.INLINE,
            measurement_layout=MeasurementLayout.SPLIT16,
            offsets=LayoutOffsets(channel1_measurements=104, channel2_measurements=152, sample_block=512),
        ),
        LayoutProfile(
            name="v2",
            field_width=FieldWidth.WORD,
            byte_order=ByteOrder.NATIVE,
            code_resolution=CodeResolution.INLINE,
            measurement_layout=MeasurementLayout.NATIVE32,
            offsets=LayoutOffsets(channel1_measurements=208, channel2_measurements=256, sample_block=1000),
        ),
        LayoutProfile(
            name="v3",
            field_width=FieldWidth.WORD,
            byte_order=ByteOrder.LITTLE,
            code_resolution=CodeResolution.DEFERRED,
            measurement_layout=MeasurementLayout.SPLIT16,
            offsets=LayoutOffsets(channel1_measurements=208, channel2_measurements=256, sample_block=1000),
        ),
    )
}

DEFAULT_PROFILE = "v3"


def get_profile(name: str) -> LayoutProfile:
    """Look up a built-in profile by name."""
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown layout profile {name!r} (choose from {', '.join(sorted(PROFILES))})") from None


def expected_size(profile: LayoutProfile) -> int:
    """Byte length of a minimal well-formed capture for this profile."""
    return profile.offsets.sample_block + _span(SAMPLE_RUNS, profile.field_width)


def header_field_offset(profile: LayoutProfile, name: str) -> int:
    """Byte offset of a forward-read header field under ``profile``."""
    position = 0
    for f in HEADER_FIELDS:
        if f.block:
            break
        size = f.size or profile.field_width
        position += f.pad_slots * size
        if f.name == name:
            return position
        position += size
    raise ValueError(f"{name!r} is not a header setting field")
