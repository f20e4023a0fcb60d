"""
Comparison engine for snapshot testing.

Snapshots are compared byte for byte. On a mismatch a unified diff labelled
``Expected``/``Received`` is rendered with a bounded number of context lines,
and an optional ignore pattern can turn the mismatch back into a pass.
"""
from __future__ import annotations

import difflib
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .config import SnapshotConfig
from .exceptions import DiffError

logger = logging.getLogger(__name__)

EXPECTED_LABEL = "Expected"
RECEIVED_LABEL = "Received"


def split_lines(data: bytes) -> list[str]:
    """Split ``data`` on ``\\n`` into lines that all end with a newline.

    The piece after the last newline is kept, even when empty, so a missing
    or extra trailing newline still shows up in the diff.
    """
    text = data.decode("utf-8", errors="backslashreplace")
    return [line + "\n" for line in text.split("\n")]


def compute_diff(expected: bytes, actual: bytes, context: int) -> str:
    """Return the unified diff from ``expected`` to ``actual``.

    Raises:
        DiffError: if the diff cannot be computed.
    """
    try:
        return "".join(
            difflib.unified_diff(
                split_lines(expected),
                split_lines(actual),
                fromfile=EXPECTED_LABEL,
                tofile=RECEIVED_LABEL,
                n=context,
            )
        )
    except Exception as e:
        raise DiffError(f"Diff computation failed: {e}") from e


def is_ignored(diff: str, pattern: Optional[re.Pattern[str]]) -> bool:
    """True if ``pattern`` matches anywhere in ``diff``."""
    return pattern is not None and pattern.search(diff) is not None


@dataclass
class ComparisonResult:
    """Result of comparing a snapshot with new output."""

    match: bool
    ignored: bool = False  # True if a mismatch was suppressed by the ignore pattern
    diff: Optional[str] = None
    error_message: Optional[str] = None


class Comparator:
    """Compares stored snapshots with new output under a config."""

    def __init__(self, config: SnapshotConfig):
        self.config = config

    def compare(self, expected: bytes, actual: bytes) -> ComparisonResult:
        """Compare ``actual`` against the stored ``expected`` bytes.

        Raises:
            DiffError: if a diff is needed but cannot be computed.
        """
        if expected == actual:
            return ComparisonResult(match=True)

        if not self.config.diffable:
            return ComparisonResult(match=False, error_message="undiffable binary format")

        diff = compute_diff(expected, actual, self.config.context)
        if is_ignored(diff, self.config.ignore):
            logger.debug(f"Mismatch suppressed by ignore pattern {self.config.ignore.pattern!r}")
            return ComparisonResult(match=True, ignored=True, diff=diff)

        return ComparisonResult(match=False, diff=diff)
