"""Pytest configuration — ensures the project root is importable."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Tests never see STATE_PROBE_* settings from the developer's shell."""
    import os

    for key in list(os.environ):
        if key.startswith("STATE_PROBE_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _no_network():
    """Any real HTTP request is a test bug — fail loudly instead of hitting the wire."""
    with patch(
        "requests.Session.request",
        side_effect=RuntimeError("real network access in tests"),
    ):
        yield
