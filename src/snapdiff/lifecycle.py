"""
Snapshot lifecycle: decide whether to create, compare, update or fail.

Every assertion is one synchronous pass through these checks, in order:

1. No snapshot directory: create it and record the snapshot in update mode,
   otherwise fail fatally.
2. No readable snapshot file: record it (first run) and pass.
3. Stored bytes equal the new bytes: pass.
4. Bytes differ in update mode: overwrite and pass.
5. Bytes differ, diffable output: fail with a diff unless the ignore
   pattern matches it.
6. Bytes differ, undiffable output: fail without computing a diff.

Update mode comes from the ``update`` argument; when it is ``None`` the
``UPDATE_SNAPSHOTS`` environment variable is checked at call time.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .comparator import Comparator
from .config import SnapshotConfig, new_config
from .exceptions import ConfigError, DiffError, SnapshotNotFoundError, SnapshotWriteError
from .reporting import Reporter
from .serializer import Serializer, StructuralDumper
from .storage import SnapshotStore

logger = logging.getLogger(__name__)

UPDATE_ENV_VAR = "UPDATE_SNAPSHOTS"


def is_update_mode(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True if ``UPDATE_SNAPSHOTS`` is set, whatever its value (even empty)."""
    env = os.environ if environ is None else environ
    return UPDATE_ENV_VAR in env


class Status(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    FATAL = "fatal"


class Action(str, Enum):
    NONE = "none"
    CREATED = "created"
    UPDATED = "updated"
    IGNORED = "ignored"


@dataclass
class Outcome:
    """Result of one snapshot assertion."""

    status: Status
    action: Action = Action.NONE
    message: Optional[str] = None
    diff: Optional[str] = None
    path: Optional[Path] = None

    @property
    def passed(self) -> bool:
        return self.status is Status.PASSED


class SnapshotLifecycle:
    """Runs snapshot assertions for one configuration."""

    def __init__(
        self,
        config: SnapshotConfig,
        store: Optional[SnapshotStore] = None,
        serializer: Optional[Serializer] = None,
    ):
        self.config = config
        self.store = store or SnapshotStore(config.directory, config.extension)
        self.serializer = serializer or StructuralDumper()
        self.comparator = Comparator(config)

    def run(self, test_name: str, data: bytes, update: bool = False) -> Outcome:
        """Check ``data`` against the snapshot of ``test_name`` without reporting."""
        if not self.store.directory_exists():
            if not update:
                return Outcome(
                    Status.FATAL,
                    message=(
                        f"No snapshot directory exists for {test_name} ({self.store.directory}) "
                        f"and {UPDATE_ENV_VAR} is not set.  Failing."
                    ),
                )
            try:
                self.store.create_directory()
            except SnapshotWriteError as e:
                return Outcome(Status.FATAL, message=f"Unable to create the snapshot directory, failing: {e}")
            return self._record(test_name, data, Action.CREATED)

        try:
            expected = self.store.read(test_name)
        except SnapshotNotFoundError as e:
            logger.debug(f"{e}, recording first run")
            return self._record(test_name, data, Action.CREATED)

        if expected == data:
            return Outcome(Status.PASSED, path=self.store.path_for(test_name))

        if update:
            return self._record(test_name, data, Action.UPDATED)

        try:
            result = self.comparator.compare(expected, data)
        except DiffError as e:
            return Outcome(Status.FATAL, message=f"Unable to compare snapshot to test output for {test_name}: {e}")

        path = self.store.path_for(test_name)
        if result.ignored:
            return Outcome(Status.PASSED, action=Action.IGNORED, diff=result.diff, path=path)
        if result.diff is None:
            return Outcome(
                Status.FAILED,
                message=f"Snapshot test failed for: {test_name}.  Diff: ({result.error_message})",
                path=path,
            )
        return Outcome(
            Status.FAILED,
            message=f"Snapshot test failed for: {test_name}.  Diff:\n\n{result.diff}",
            diff=result.diff,
            path=path,
        )

    def _record(self, test_name: str, data: bytes, action: Action) -> Outcome:
        try:
            path = self.store.write(test_name, data)
        except SnapshotWriteError as e:
            return Outcome(Status.FATAL, message=f"Unable to create snapshot for {test_name}: {e}")
        logger.info(f"{action.value.capitalize()} snapshot {path}")
        return Outcome(Status.PASSED, action=action, path=path)

    def report(self, reporter: Reporter, outcome: Outcome) -> Outcome:
        """Hand a non-passing ``outcome`` to ``reporter``."""
        if outcome.status is Status.FAILED:
            reporter.fail(outcome.message)
        elif outcome.status is Status.FATAL:
            reporter.fatal(outcome.message)
        return outcome

    def assert_bytes(self, reporter: Reporter, data: bytes, update: Optional[bool] = None) -> Outcome:
        """Assert raw ``data`` against the snapshot of the reporter's test.

        Raises:
            TypeError: if ``data`` is not bytes, bytearray or memoryview.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Snapshot data must be bytes-like, got {type(data).__name__}")
        if update is None:
            update = is_update_mode()
        return self.report(reporter, self.run(reporter.name, bytes(data), update))

    def assert_match(self, reporter: Reporter, value: Any, update: Optional[bool] = None) -> Outcome:
        """Serialize ``value`` and assert it against the reporter's snapshot."""
        return self.assert_bytes(reporter, self.serializer.serialize(value), update)


def _default_lifecycle(
    reporter: Reporter,
    config: Optional[SnapshotConfig],
    serializer: Optional[Serializer] = None,
) -> SnapshotLifecycle | Outcome:
    if config is None:
        try:
            config = new_config()
        except ConfigError as e:
            outcome = Outcome(Status.FATAL, message=f"Unable to create new snapshot config: {e}")
            reporter.fatal(outcome.message)
            return outcome
    return SnapshotLifecycle(config, serializer=serializer)


def assert_snapshot(
    reporter: Reporter,
    value: Any,
    config: Optional[SnapshotConfig] = None,
    update: Optional[bool] = None,
    serializer: Optional[Serializer] = None,
) -> Outcome:
    """Compare ``value`` with the snapshot saved for the reporter's test.

    A missing snapshot is created and the assertion passes. A mismatch fails
    with a diff. Set ``UPDATE_SNAPSHOTS`` (or pass ``update=True``) to
    re-record snapshots instead. Without ``config`` snapshots live in
    ``__snapshots__`` under the current working directory.
    """
    lifecycle = _default_lifecycle(reporter, config, serializer)
    if isinstance(lifecycle, Outcome):
        return lifecycle
    return lifecycle.assert_match(reporter, value, update)


def assert_bytes(
    reporter: Reporter,
    data: bytes,
    config: Optional[SnapshotConfig] = None,
    update: Optional[bool] = None,
) -> Outcome:
    """Like :func:`assert_snapshot` for output that is already bytes."""
    lifecycle = _default_lifecycle(reporter, config)
    if isinstance(lifecycle, Outcome):
        return lifecycle
    return lifecycle.assert_bytes(reporter, data, update)
