"""Shared CLI infrastructure: output modes, record assembly and JSON encoding."""

import argparse
import json
import logging
import sys
from enum import Enum
from typing import Any, Optional

import numpy as np

from scopecap.enums import SettingCode
from scopecap.errors import SerializationError, UnsupportedOutputMode
from scopecap.layout import PROFILES, LayoutProfile
from scopecap.normalize import normalize
from scopecap.scales import Scale
from scopecap.types import CaptureFile, Channel, NormalizedCapture, ProcessedMeasurements

# Exit codes
EXIT_OK = 0
EXIT_DECODE_ERROR = 1
EXIT_USAGE_ERROR = 2


class OutputMode(Enum):
    RAW = "raw"
    PARSED = "parsed"

    @classmethod
    def parse(cls, s: str) -> "OutputMode":
        """Parse a mode string, raising UnsupportedOutputMode for anything else."""
        try:
            return cls(s)
        except ValueError:
            raise UnsupportedOutputMode(s) from None


def base_parser(description: str) -> argparse.ArgumentParser:
    """Create ArgumentParser with flags shared by scopecap tools."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "-p",
        "--profile",
        choices=sorted(PROFILES),
        default=None,
        help="capture layout profile (default: $SCOPECAP_PROFILE or v3)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log decode steps to stderr")
    return parser


def setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s")


def _json_safe(value: Any) -> Any:
    """Convert numpy values and setting codes to JSON-native Python types.

    float32 values are rendered via their shortest float32 repr so that
    0.02 prints as 0.02 rather than 0.019999999552965164.
    """
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.float32):
        return float(str(value))
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, SettingCode):
        return value.json_name
    return value


def scale_to_dict(scale: Scale) -> dict[str, Any]:
    return {"value": scale.mantissa, "scale": scale.exponent, "unit": scale.unit.value}


def _measurements_to_dict(m: ProcessedMeasurements) -> dict[str, Any]:
    return {name: _json_safe(value) for name, value in vars(m).items()}


def _channel_to_dict(channel: Channel) -> dict[str, Any]:
    return {
        "scale": scale_to_dict(channel.scale),
        "coupling": _json_safe(channel.coupling),
        "attenuation": _json_safe(channel.attenuation),
        "measurements": _measurements_to_dict(channel.measurements),
        "points": [{"time": _json_safe(p.time), "voltage": _json_safe(p.voltage)} for p in channel.points],
    }


def normalized_to_dict(record: NormalizedCapture) -> dict[str, Any]:
    """Build the parsed-mode document. Key names and nesting are stable."""
    return {
        "trigger": {
            "trigger_type": _json_safe(record.trigger.trigger_type),
            "edge": _json_safe(record.trigger.edge),
            "channel": _json_safe(record.trigger.channel),
            "trigger_50": _json_safe(record.trigger.trigger_50),
        },
        "time_scale": scale_to_dict(record.time_scale),
        "scroll_speed": _json_safe(record.scroll_speed),
        "display": {
            "screen_brightness": record.display.screen_brightness,
            "grid_brightness": record.display.grid_brightness,
        },
        "channel1": _channel_to_dict(record.channel1),
        "channel2": _channel_to_dict(record.channel2),
    }


def assemble_output(
    capture: CaptureFile,
    mode: OutputMode,
    profile: LayoutProfile,
    *,
    legacy_channel2_points: bool = False,
) -> dict[str, Any]:
    """Select the raw or normalized view of a decoded capture."""
    if mode is OutputMode.RAW:
        return capture.to_dict()
    record = normalize(capture, profile, legacy_channel2_points=legacy_channel2_points)
    return normalized_to_dict(record)


def to_json(document: dict[str, Any], indent: Optional[int] = None) -> str:
    try:
        return json.dumps(document, indent=indent, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize capture record: {e}") from e
