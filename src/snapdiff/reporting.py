"""Bridge between snapshot outcomes and the test runner."""
from __future__ import annotations

from typing import Protocol

import pytest


class Reporter(Protocol):
    """What a snapshot assertion needs from the running test.

    ``fail`` reports an ordinary mismatch; ``fatal`` reports a failure that
    must stop the test at once. Both are expected not to return.
    """

    @property
    def name(self) -> str:
        ...

    def fail(self, message: str) -> None:
        ...

    def fatal(self, message: str) -> None:
        ...


class PytestReporter:
    """Reports through pytest for the test owning ``request``."""

    def __init__(self, request: pytest.FixtureRequest):
        self.request = request

    @property
    def name(self) -> str:
        """Node id of the test, e.g. ``tests/test_report.py::TestPdf::test_render``."""
        return self.request.node.nodeid

    def fail(self, message: str) -> None:
        pytest.fail(message, pytrace=False)

    def fatal(self, message: str) -> None:
        pytest.fail(message)
