"""Pytest configuration and fixtures."""

import json
import tempfile
from pathlib import Path

import pytest

from localscan.models.scan_result import DetectionMethod, DetectionResult
from localscan.services.probes import ProbeOutcome


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_history_data():
    """A saved previous scan."""
    return [
        {
            "ip": "10.0.0.5",
            "hostname": "nas",
            "mac": "aa:bb:cc:dd:ee:01",
            "vendor": "Synology",
            "method": "TCP",
            "open_ports": [22],
        },
        {
            "ip": "10.0.0.7",
            "hostname": "-",
            "mac": "-",
            "vendor": "-",
            "method": "ICMP",
            "open_ports": [],
        },
    ]


@pytest.fixture
def sample_history_file(temp_dir, sample_history_data):
    """Write the sample history to a file."""
    path = temp_dir / "last.json"
    with open(path, "w") as f:
        json.dump(sample_history_data, f)
    return path


@pytest.fixture
def make_host():
    """Factory for DetectionResult objects."""

    def _make(ip: str, method: DetectionMethod = DetectionMethod.ICMP, **kwargs):
        return DetectionResult(ip=ip, method=method, **kwargs)

    return _make


class FakeCascade:
    """Cascade returning canned outcomes per address; everything else is silent."""

    def __init__(self, outcomes: dict[str, ProbeOutcome] | None = None, default=None):
        self.outcomes = outcomes or {}
        self.default = default or ProbeOutcome()
        self.calls: list[str] = []

    def __call__(self, ip: str, timeout: float) -> ProbeOutcome:
        self.calls.append(ip)
        return self.outcomes.get(ip, self.default)


@pytest.fixture
def fake_cascade():
    return FakeCascade
