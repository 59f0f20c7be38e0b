"""
Shared pytest fixtures for scopecap unit tests.
"""

import pytest

import scopecap
from scopecap.layout import PROFILES
from tests.captures import build_capture


@pytest.fixture(params=sorted(PROFILES))
def profile(request):
    """Each built-in layout profile in turn."""
    return PROFILES[request.param]


@pytest.fixture
def v3():
    return PROFILES["v3"]


@pytest.fixture
def capture_path(tmp_path, v3):
    """A well-formed v3 capture written to disk."""
    path = tmp_path / "WAVE0001.BIN"
    path.write_bytes(build_capture(v3))
    return path


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch):
    """Isolate tests from SCOPECAP_PROFILE and configure() state."""
    monkeypatch.setattr(scopecap, "_env_profile", None)
    monkeypatch.setattr(scopecap, "_config_profile", None)
