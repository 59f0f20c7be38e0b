"""Tests for scopecap.enums - closed-set setting codes."""

import pytest

from scopecap.enums import (
    Attenuation,
    Coupling,
    ScrollSpeed,
    SettingCode,
    Trigger50,
    TriggerChannel,
    TriggerEdge,
    TriggerType,
    decode,
)
from scopecap.errors import UnknownEnumCode

DECLARED = [
    (Coupling, ["DC", "AC"]),
    (Attenuation, ["X1", "X10", "X100"]),
    (ScrollSpeed, ["FAST", "SLOW"]),
    (TriggerType, ["AUTO", "SINGLE", "NORMAL"]),
    (TriggerEdge, ["RISING", "FALLING"]),
    (TriggerChannel, ["CHANNEL1", "CHANNEL2"]),
    (Trigger50, ["ON", "OFF"]),
]


class TestDecode:
    @pytest.mark.parametrize("enum_cls,names", DECLARED, ids=[c.__name__ for c, _ in DECLARED])
    def test_codes_map_in_declaration_order(self, enum_cls, names):
        for code, name in enumerate(names):
            member = decode(enum_cls, code, "field")
            assert member is enum_cls[name]
            assert member == code

    @pytest.mark.parametrize("enum_cls,names", DECLARED, ids=[c.__name__ for c, _ in DECLARED])
    def test_code_past_end_fails(self, enum_cls, names):
        for code in (len(names), len(names) + 1, 0xFFFF):
            with pytest.raises(UnknownEnumCode) as exc_info:
                decode(enum_cls, code, "some_field")
            assert exc_info.value.raw_code == code
            assert exc_info.value.field_name == "some_field"

    def test_error_carries_offset(self):
        expected = "trigger_edge at offset 28: unknown code 2 for TriggerEdge"
        with pytest.raises(UnknownEnumCode, match=expected) as exc_info:
            decode(TriggerEdge, 2, "trigger_edge", offset=28)
        assert exc_info.value.offset == 28
        assert exc_info.value.__cause__ is None

    def test_no_default_member(self):
        with pytest.raises(UnknownEnumCode):
            decode(Coupling, -1, "channel1_coupling")


class TestAttenuation:
    def test_factor(self):
        assert [a.factor for a in Attenuation] == [1, 10, 100]


JSON_NAMES = [
    (Coupling, ["DC", "AC"]),
    (Attenuation, ["OneX", "TenX", "OneHundredX"]),
    (ScrollSpeed, ["Fast", "Slow"]),
    (TriggerType, ["Auto", "Single", "Normal"]),
    (TriggerEdge, ["Rising", "Falling"]),
    (TriggerChannel, ["Channel1", "Channel2"]),
    (Trigger50, ["On", "Off"]),
]


class TestJsonName:
    @pytest.mark.parametrize("enum_cls,names", JSON_NAMES, ids=[c.__name__ for c, _ in JSON_NAMES])
    def test_names_in_code_order(self, enum_cls, names):
        assert [member.json_name for member in enum_cls] == names

    def test_every_setting_enum_is_covered(self):
        assert all(issubclass(c, SettingCode) for c, _ in JSON_NAMES)
        assert [c for c, _ in JSON_NAMES] == [c for c, _ in DECLARED]
