"""snapdiff pytest plugin.

Provides the ``snapshot`` fixture::

    def test_render(snapshot):
        snapshot.assert_match(render_report())

Run ``pytest --snapshot-update`` (or set ``UPDATE_SNAPSHOTS``) to re-record.
"""
from __future__ import annotations

from typing import Any, Optional

import pytest

from .config import ConfigOption, SnapshotConfig, new_config, snap_directory
from .lifecycle import Outcome, SnapshotLifecycle
from .reporting import PytestReporter, Reporter
from .serializer import Serializer


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("snapdiff", "snapshot testing")
    group.addoption(
        "--snapshot-update",
        action="store_true",
        default=False,
        help="Re-record snapshots instead of comparing against them",
    )
    group.addoption(
        "--snapshot-dir",
        default=None,
        help="Directory holding snapshots, relative to the rootdir (default: ./__snapshots__)",
    )


class SnapshotAssertion:
    """Snapshot assertions bound to one test."""

    def __init__(
        self,
        reporter: Reporter,
        config: SnapshotConfig,
        update: Optional[bool] = None,
        serializer: Optional[Serializer] = None,
    ):
        self.reporter = reporter
        self.config = config
        self.update = update
        self.serializer = serializer
        self._lifecycle = SnapshotLifecycle(config, serializer=serializer)

    def with_options(self, *options: ConfigOption) -> "SnapshotAssertion":
        """Return a copy whose config has ``options`` applied."""
        config = self.config
        for option in options:
            config = option(config)
        return SnapshotAssertion(self.reporter, config, update=self.update, serializer=self.serializer)

    def assert_match(self, value: Any) -> Outcome:
        return self._lifecycle.assert_match(self.reporter, value, self.update)

    def assert_bytes(self, data: bytes) -> Outcome:
        return self._lifecycle.assert_bytes(self.reporter, data, self.update)


@pytest.fixture
def snapshot_config(request: pytest.FixtureRequest) -> SnapshotConfig:
    """Snapshot config built from the command-line options."""
    options = []
    snapshot_dir = request.config.getoption("snapshot_dir")
    if snapshot_dir:
        options.append(snap_directory(request.config.rootpath / snapshot_dir))
    return new_config(*options)


@pytest.fixture
def snapshot(request: pytest.FixtureRequest, snapshot_config: SnapshotConfig) -> SnapshotAssertion:
    """Return :class:`SnapshotAssertion` for the requesting test.

    ``--snapshot-update`` forces update mode; otherwise ``UPDATE_SNAPSHOTS`` is
    read at each assertion.
    """
    update = True if request.config.getoption("snapshot_update") else None
    return SnapshotAssertion(PytestReporter(request), snapshot_config, update=update)
