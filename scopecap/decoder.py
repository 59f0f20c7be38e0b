"""
Profile-driven capture decoder.

A single forward Cursor walks the field tables from scopecap.layout. Each
field may first jump to an absolute offset (the relocated measurement blocks
and the sample block), then skips its padding, then reads one unsigned
integer. Width and byte order come from the LayoutProfile and never change
mid-file.

Usage:
    from scopecap.decoder import decode_capture
    from scopecap.layout import get_profile

    capture = decode_capture(data, get_profile("v3"))
    capture.header.time_scale     # raw code
    capture.channel11[:10]        # numpy uint array
"""

from __future__ import annotations

import logging
import struct
from typing import Any

import numpy as np

from scopecap.errors import TruncatedInput
from scopecap.layout import HEADER_FIELDS, SAMPLE_RUNS, ByteOrder, FieldSpec, LayoutProfile
from scopecap.types import CaptureFile, Header, Measurements

logger = logging.getLogger(__name__)

__all__ = ["Cursor", "decode_capture"]

_UINT_CODES = {1: "B", 2: "H", 4: "I"}


class Cursor:
    """Bounds-checked reader over an immutable byte buffer."""

    def __init__(self, data: bytes, byte_order: ByteOrder):
        self._data = data
        self._order = byte_order.value
        self._structs = {size: struct.Struct(self._order + code) for size, code in _UINT_CODES.items()}
        self.position = 0

    def __len__(self) -> int:
        return len(self._data)

    def seek(self, offset: int) -> None:
        """Move to an absolute offset. Seeking past the end fails on the next read."""
        self.position = offset

    def skip(self, count: int) -> None:
        self.position += count

    def _require(self, count: int, field: str) -> None:
        end = self.position + count
        if end > len(self._data):
            raise TruncatedInput(field, self.position, end, len(self._data))

    def read_uint(self, size: int, field: str) -> int:
        """Read one unsigned integer of 1, 2 or 4 bytes."""
        self._require(size, field)
        (value,) = self._structs[size].unpack_from(self._data, self.position)
        self.position += size
        return value

    def read_array(self, size: int, count: int, field: str) -> np.ndarray:
        """Read ``count`` unsigned integers of ``size`` bytes as a numpy array."""
        self._require(size * count, field)
        dtype = np.dtype(f"{self._order}u{size}")
        values = np.frombuffer(self._data, dtype=dtype, count=count, offset=self.position).copy()
        self.position += size * count
        return values


def _position(cursor: Cursor, spec: FieldSpec, profile: LayoutProfile, size: int) -> None:
    if spec.seek is not None:
        target = getattr(profile.offsets, spec.seek)
        logger.debug(f"Seek for {spec.name}: {cursor.position} -> {target}")
        cursor.seek(target)
    cursor.skip(spec.pad_slots * size)


def _read_fields(
    cursor: Cursor, specs: tuple[FieldSpec, ...], profile: LayoutProfile, prefix: str = ""
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for spec in specs:
        size = spec.size or profile.field_width
        _position(cursor, spec, profile, size)
        if spec.block:
            block = _read_fields(cursor, profile.measurement_fields, profile, prefix=f"{spec.name}.")
            values[spec.name] = Measurements(**block)
            continue
        name = prefix + spec.name
        offset = cursor.position
        code = cursor.read_uint(size, name)
        if spec.codec is not None and profile.inline:
            spec.codec(code, name, offset)
        values[spec.name] = code
    return values


def decode_capture(data: bytes, profile: LayoutProfile) -> CaptureFile:
    """Decode a capture buffer into its canonical raw record.

    Raises:
        TruncatedInput: buffer ends before the layout is complete
        ScaleIndexOutOfRange, UnknownEnumCode: bad code, INLINE profiles only
    """
    logger.debug(f"Decoding {len(data)} bytes with profile {profile.name}")
    cursor = Cursor(data, profile.byte_order)
    header = Header(**_read_fields(cursor, HEADER_FIELDS, profile))

    runs: dict[str, np.ndarray] = {}
    for spec in SAMPLE_RUNS:
        _position(cursor, spec, profile, profile.field_width)
        runs[spec.name] = cursor.read_array(profile.field_width, spec.count or 0, spec.name)

    if cursor.position < len(cursor):
        logger.debug(f"Ignoring {len(cursor) - cursor.position} trailing bytes")
    return CaptureFile(header=header, **runs)
