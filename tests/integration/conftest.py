"""Integration test fixtures.

CLI runs are wired as in production except for logging: structlog is sent
to stderr without logger caching (so ``capture_logs`` keeps working in later
tests) and reset afterwards. The throttle is disabled and each test mocks
HTTP with respx.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import pytest
import structlog

import blockmerge.cli

if TYPE_CHECKING:
    from collections.abc import Iterator

    from blockmerge.config import LoggingSettings


def _log_to_stderr(settings: LoggingSettings) -> None:
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))


@pytest.fixture(autouse=True)
def _isolated_cli(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(blockmerge.cli, "_setup_logging", _log_to_stderr)
    monkeypatch.setenv("BLOCKMERGE__MERGE__THROTTLE_SECONDS", "0")
    yield
    structlog.reset_defaults()
