"""
Snapshot testing helper.

Captures the output of a unit under test, stores it as a snapshot file on the
first run and fails later runs with a readable diff when the output changes.
"""

import logging
import sys

__version__ = "0.1.0"


# Configure logging for the package
def configure_logging(level=logging.INFO):
    """Configure logging for the snapdiff package."""
    logger = logging.getLogger("snapdiff")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter("%(levelname)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    logger.setLevel(level)

    return logger


# Configure logging by default
configure_logging()

# Import main classes for public API
from .comparator import Comparator, ComparisonResult, compute_diff, is_ignored
from .config import (
    ConfigManager,
    ConfigOption,
    SnapshotConfig,
    context_lines,
    diffable,
    ignore_regex,
    new_config,
    snap_directory,
    snap_extension,
)
from .exceptions import (
    ConfigError,
    DiffError,
    SnapdiffError,
    SnapshotNotFoundError,
    SnapshotWriteError,
)
from .lifecycle import (
    UPDATE_ENV_VAR,
    Action,
    Outcome,
    SnapshotLifecycle,
    Status,
    assert_bytes,
    assert_snapshot,
    is_update_mode,
)
from .reporting import PytestReporter, Reporter
from .serializer import Serializer, StructuralDumper, serialize
from .storage import SnapshotStore, snapshot_filename

__all__ = [
    # Version
    "__version__",
    "configure_logging",
    # Config
    "ConfigManager",
    "ConfigOption",
    "SnapshotConfig",
    "new_config",
    "snap_directory",
    "context_lines",
    "diffable",
    "snap_extension",
    "ignore_regex",
    # Serializer
    "Serializer",
    "StructuralDumper",
    "serialize",
    # Storage
    "SnapshotStore",
    "snapshot_filename",
    # Comparator
    "Comparator",
    "ComparisonResult",
    "compute_diff",
    "is_ignored",
    # Lifecycle
    "SnapshotLifecycle",
    "Outcome",
    "Status",
    "Action",
    "UPDATE_ENV_VAR",
    "assert_snapshot",
    "assert_bytes",
    "is_update_mode",
    # Reporting
    "Reporter",
    "PytestReporter",
    # Exceptions
    "SnapdiffError",
    "ConfigError",
    "SnapshotNotFoundError",
    "SnapshotWriteError",
    "DiffError",
]
