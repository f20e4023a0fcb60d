"""
Pytest configuration and shared fixtures for snapdiff tests.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from snapdiff import new_config, snap_directory


class RecordingReporter:
    """Reporter that records failures instead of stopping the test."""

    def __init__(self, name="TestSnapshot"):
        self.name = name
        self.failures = []
        self.fatals = []

    def fail(self, message):
        self.failures.append(message)

    def fatal(self, message):
        self.fatals.append(message)

    @property
    def reported(self):
        return self.failures + self.fatals


@pytest.fixture(autouse=True)
def no_update_env(monkeypatch):
    """Keep an UPDATE_SNAPSHOTS from the outer environment out of the tests."""
    monkeypatch.delenv("UPDATE_SNAPSHOTS", raising=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    # Cleanup
    if temp_path.exists():
        shutil.rmtree(temp_path)


@pytest.fixture
def temp_snapshot_dir(temp_dir):
    """Create a temporary snapshot directory."""
    snapshot_path = temp_dir / "__snapshots__"
    snapshot_path.mkdir(parents=True, exist_ok=True)
    return snapshot_path


@pytest.fixture
def config(temp_snapshot_dir):
    """Default config pointing at the temporary snapshot directory."""
    return new_config(snap_directory(temp_snapshot_dir))


@pytest.fixture
def reporter():
    return RecordingReporter()
