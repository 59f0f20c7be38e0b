"""
scopecap - Decoder for fixed-layout digital oscilloscope capture files.

Quick start:
    import scopecap
    capture = scopecap.load("WAVE0001.BIN")          # raw codes + sample runs
    record = scopecap.normalize(capture, scopecap.get_profile("v3"))
    record.channel1.points[1].voltage

Environment:
    SCOPECAP_PROFILE    default layout profile name (v1, v2, v3; default v3)
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from scopecap.decoder import decode_capture
from scopecap.errors import (  # noqa: F401
    CaptureError,
    CaptureIOError,
    DecodeError,
    ScaleIndexOutOfRange,
    SerializationError,
    TruncatedInput,
    UnknownEnumCode,
    UnsupportedOutputMode,
)
from scopecap.layout import DEFAULT_PROFILE, PROFILES, LayoutProfile, expected_size, get_profile  # noqa: F401
from scopecap.normalize import generate_points, normalize  # noqa: F401
from scopecap.scales import TIME_SCALES, VOLTAGE_SCALES, Scale, Unit  # noqa: F401
from scopecap.types import CaptureFile, NormalizedCapture, Point  # noqa: F401

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

ProfileSpec = Union[str, LayoutProfile, None]


# Read environment variables at import time
_env_profile = os.environ.get("SCOPECAP_PROFILE")

# User-configured settings (set via configure())
_config_profile: Optional[str] = None


def configure(profile: Optional[str] = None) -> None:
    """Set the default layout profile used when none is passed explicitly.

    Args:
        profile: Built-in profile name, or None to fall back to
            SCOPECAP_PROFILE / the built-in default

    Raises:
        ValueError: profile is not a known profile name
    """
    global _config_profile
    if profile is not None:
        get_profile(profile)
    _config_profile = profile


def default_profile() -> LayoutProfile:
    """Resolve the default profile: configure() > SCOPECAP_PROFILE > v3."""
    name = _config_profile or _env_profile or DEFAULT_PROFILE
    return get_profile(name)


def _resolve_profile(profile: ProfileSpec) -> LayoutProfile:
    if profile is None:
        return default_profile()
    if isinstance(profile, LayoutProfile):
        return profile
    return get_profile(profile)


def decode(data: bytes, profile: ProfileSpec = None) -> CaptureFile:
    """Decode an in-memory capture buffer."""
    return decode_capture(data, _resolve_profile(profile))


def load(path: Union[str, Path], profile: ProfileSpec = None) -> CaptureFile:
    """Read and decode a capture file.

    Raises:
        CaptureIOError: file missing or unreadable
        DecodeError: file does not match the profile layout
    """
    resolved = _resolve_profile(profile)
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise CaptureIOError(str(path), e.strerror or str(e)) from e
    logger.debug(f"Read {len(data)} bytes from {path}")
    return decode_capture(data, resolved)


__all__ = [
    "configure",
    "default_profile",
    "decode",
    "load",
    "normalize",
    "generate_points",
    "get_profile",
    "expected_size",
    "PROFILES",
    "LayoutProfile",
    "CaptureFile",
    "NormalizedCapture",
    "Point",
    "Scale",
    "Unit",
    "TIME_SCALES",
    "VOLTAGE_SCALES",
    "CaptureError",
    "CaptureIOError",
    "DecodeError",
    "TruncatedInput",
    "ScaleIndexOutOfRange",
    "UnknownEnumCode",
    "UnsupportedOutputMode",
    "SerializationError",
]
