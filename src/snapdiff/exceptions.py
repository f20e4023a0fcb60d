"""
Exceptions raised by snapdiff.

Library code raises these; the lifecycle controller turns them into test
outcomes so only the reporter ever raises into the running test.
"""
from __future__ import annotations


class SnapdiffError(Exception):
    """Base exception for all snapdiff errors."""


class ConfigError(SnapdiffError):
    """Raised when a snapshot configuration cannot be built."""


class SnapshotNotFoundError(SnapdiffError):
    """Raised when a snapshot file is missing or cannot be read."""

    def __init__(self, path, reason: str = "not found"):
        self.path = path
        super().__init__(f"Snapshot {path} {reason}")


class SnapshotWriteError(SnapdiffError):
    """Raised when the snapshot directory or a snapshot file cannot be written."""


class DiffError(SnapdiffError):
    """Raised when a diff between two snapshots cannot be computed."""
