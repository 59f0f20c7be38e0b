"""Tests for scopecap.decoder - cursor and profile-driven decode."""

import struct

import numpy as np
import pytest

from scopecap.decoder import Cursor, decode_capture
from scopecap.errors import ScaleIndexOutOfRange, TruncatedInput, UnknownEnumCode
from scopecap.layout import (
    PROFILES,
    ByteOrder,
    CodeResolution,
    FieldWidth,
    LayoutOffsets,
    LayoutProfile,
    MeasurementLayout,
    expected_size,
)
from tests.captures import (
    DEFAULT_CH1_MEASUREMENTS,
    DEFAULT_CH2_MEASUREMENTS,
    DEFAULT_HEADER,
    build_capture,
    default_samples,
    header_offset,
    native_order_is_little,
)


class TestCursor:
    def test_little_endian_reads(self):
        c = Cursor(b"\x01\x02\x03\x04\x05\x06\x07", ByteOrder.LITTLE)
        assert c.read_uint(1, "a") == 0x01
        assert c.read_uint(2, "b") == 0x0302
        assert c.read_uint(4, "c") == 0x07060504
        assert c.position == 7

    def test_native_reads(self):
        c = Cursor(struct.pack("=HI", 0xBEEF, 0xCAFEF00D), ByteOrder.NATIVE)
        assert c.read_uint(2, "a") == 0xBEEF
        assert c.read_uint(4, "b") == 0xCAFEF00D

    def test_seek_and_skip(self):
        c = Cursor(bytes(range(16)), ByteOrder.LITTLE)
        c.seek(10)
        assert c.read_uint(1, "x") == 10
        c.skip(2)
        assert c.read_uint(1, "y") == 13

    def test_read_array(self):
        c = Cursor(struct.pack("<4H", 1, 2, 3, 0xFFFF), ByteOrder.LITTLE)
        arr = c.read_array(2, 4, "run")
        assert arr.tolist() == [1, 2, 3, 0xFFFF]
        assert arr.dtype.kind == "u"

    def test_read_array_does_not_alias_buffer(self):
        data = bytearray(struct.pack("<2H", 5, 6))
        arr = Cursor(data, ByteOrder.LITTLE).read_array(2, 2, "run")
        data[0] = 0
        assert arr.tolist() == [5, 6]

    def test_truncated_read(self):
        c = Cursor(b"\x00\x00\x00", ByteOrder.LITTLE)
        c.skip(2)
        with pytest.raises(TruncatedInput) as exc_info:
            c.read_uint(2, "grid_brightness")
        err = exc_info.value
        assert err.field == "grid_brightness"
        assert err.offset == 2
        assert err.expected_bytes == 4
        assert err.available_bytes == 3

    def test_seek_past_end_fails_on_read(self):
        c = Cursor(b"\x00" * 4, ByteOrder.LITTLE)
        c.seek(100)
        with pytest.raises(TruncatedInput):
            c.read_array(2, 1, "channel11")


class TestRoundTrip:
    """A well-formed fixture decodes and every field equals the bytes placed for it."""

    def test_header_fields(self, profile):
        data = build_capture(profile)
        assert len(data) == expected_size(profile)
        capture = decode_capture(data, profile)
        h = capture.header
        for name, value in DEFAULT_HEADER.items():
            assert getattr(h, name) == value, name

    def test_header_fields_at_documented_offsets(self, profile):
        data = build_capture(profile)
        order = profile.byte_order.value
        fmt = order + ("H" if profile.field_width == FieldWidth.WORD else "B")
        capture = decode_capture(data, profile)
        for name in DEFAULT_HEADER:
            (literal,) = struct.unpack_from(fmt, data, header_offset(profile, name))
            assert getattr(capture.header, name) == literal, name

    def test_measurements(self, profile):
        capture = decode_capture(build_capture(profile), profile)
        for raw, expected in (
            (capture.header.channel1_measurements, DEFAULT_CH1_MEASUREMENTS),
            (capture.header.channel2_measurements, DEFAULT_CH2_MEASUREMENTS),
        ):
            for name in ("vmax", "vmin", "vavg", "vrms", "vpp", "vp", "cycle_ns", "duty_minus_percentage"):
                assert getattr(raw, name) == expected[name], name
            if profile.measurement_layout is MeasurementLayout.SPLIT16:
                assert raw.frequency_high == expected["frequency_high"]
                assert raw.frequency_low == expected["frequency_low"]
                assert raw.frequency is None
            else:
                assert raw.frequency == expected["frequency"]
                assert raw.frequency_high is None

    def test_sample_runs(self, profile):
        capture = decode_capture(build_capture(profile), profile)
        expected = default_samples(profile)
        assert len(capture.channel11) == 1500
        assert len(capture.channel21) == 1500
        assert len(capture.channel12) == 750
        assert len(capture.channel22) == 750
        for name, values in expected.items():
            np.testing.assert_array_equal(getattr(capture, name), values)

    def test_trailing_bytes_ignored(self, v3):
        data = build_capture(v3) + b"\xff" * 64
        capture = decode_capture(data, v3)
        assert capture.header.time_scale == DEFAULT_HEADER["time_scale"]

    def test_raw_dict_is_verbatim(self, v3):
        d = decode_capture(build_capture(v3), v3).to_dict()
        assert list(d) == ["header", "channel11", "channel21", "channel12", "channel22"]
        assert d["header"]["channel1_offset"] == DEFAULT_HEADER["channel1_offset"]
        assert d["header"]["channel1_measurements"]["frequency_high"] == 1
        assert "frequency" not in d["header"]["channel1_measurements"]
        assert d["channel12"][:3] == [11, 16, 21]
        assert all(type(v) is int for v in d["channel11"])


class TestTruncation:
    def test_cut_before_sample_block(self, v3):
        data = build_capture(v3)[:999]
        with pytest.raises(TruncatedInput) as exc_info:
            decode_capture(data, v3)
        err = exc_info.value
        assert err.field == "channel11"
        assert err.offset == 1000
        assert err.available_bytes == 999

    def test_cut_inside_last_run(self, profile):
        data = build_capture(profile)[:-1]
        with pytest.raises(TruncatedInput) as exc_info:
            decode_capture(data, profile)
        assert exc_info.value.field == "channel22"
        assert exc_info.value.expected_bytes == expected_size(profile)

    def test_cut_inside_measurements(self, v3):
        data = build_capture(v3)[:259]
        with pytest.raises(TruncatedInput) as exc_info:
            decode_capture(data, v3)
        assert exc_info.value.field == "channel2_measurements.vmax"
        assert exc_info.value.offset == 258

    def test_empty_buffer(self, profile):
        with pytest.raises(TruncatedInput) as exc_info:
            decode_capture(b"", profile)
        assert exc_info.value.field == "channel1_scale"


class TestCodeResolution:
    """INLINE profiles reject bad codes during the cursor pass; DEFERRED ones keep them."""

    def test_inline_scale_failure_names_offset(self):
        p = PROFILES["v2"]
        data = build_capture(p, header={"channel2_scale": 9})
        with pytest.raises(ScaleIndexOutOfRange) as exc_info:
            decode_capture(data, p)
        err = exc_info.value
        assert err.field == "channel2_scale"
        assert err.offset == 14
        assert err.index == 9

    def test_inline_enum_failure_names_offset(self):
        p = PROFILES["v1"]
        data = build_capture(p, header={"trigger_edge": 2})
        with pytest.raises(UnknownEnumCode) as exc_info:
            decode_capture(data, p)
        assert exc_info.value.field_name == "trigger_edge"
        assert exc_info.value.offset == 14
        assert exc_info.value.raw_code == 2

    def test_deferred_keeps_raw_codes(self, v3):
        data = build_capture(v3, header={"time_scale": 40, "trigger_type": 7})
        capture = decode_capture(data, v3)
        assert capture.header.time_scale == 40
        assert capture.header.trigger_type == 7

    def test_offsets_and_brightness_not_resolved(self):
        p = PROFILES["v2"]
        data = build_capture(p, header={"channel1_offset": 4000, "screen_brightness": 999})
        capture = decode_capture(data, p)
        assert capture.header.channel1_offset == 4000
        assert capture.header.screen_brightness == 999


class TestByteOrder:
    def test_native_profile_follows_platform(self):
        p = PROFILES["v2"]
        data = build_capture(p, header={"channel1_offset": 0x0102})
        off = header_offset(p, "channel1_offset")
        expected = b"\x02\x01" if native_order_is_little() else b"\x01\x02"
        assert data[off : off + 2] == expected
        assert decode_capture(data, p).header.channel1_offset == 0x0102

    def test_order_is_applied_to_samples(self, v3):
        data = build_capture(v3, samples={"channel11": [0x0102]})
        assert data[1000:1002] == b"\x02\x01"
        assert decode_capture(data, v3).channel11[0] == 0x0102


class TestNewProfile:
    """A further device variant is a new LayoutProfile value, not new decode code."""

    def test_custom_profile_decodes(self):
        p = LayoutProfile(
            name="v4",
            field_width=FieldWidth.WORD,
            byte_order=ByteOrder.LITTLE,
            code_resolution=CodeResolution.INLINE,
            measurement_layout=MeasurementLayout.NATIVE32,
            offsets=LayoutOffsets(channel1_measurements=300, channel2_measurements=400, sample_block=2048),
        )
        data = build_capture(p, header={"time_scale": 12})
        assert len(data) == 2048 + 9000
        capture = decode_capture(data, p)
        assert capture.header.time_scale == 12
        assert capture.header.channel2_measurements.frequency == DEFAULT_CH2_MEASUREMENTS["frequency"]
        np.testing.assert_array_equal(capture.channel22, default_samples(p)["channel22"])
