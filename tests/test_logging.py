"""Tests for logging utilities."""

from __future__ import annotations

import logging

from servicebox.core.config import LoggingSettings
from servicebox.core.logging import configure_logging


def test_configure_logging_sets_root_level() -> None:
    """configure_logging should set the root logger level according to settings."""

    settings = LoggingSettings(level="DEBUG", structured=False)
    configure_logging(settings)
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("servicebox").level == logging.DEBUG


def test_configure_logging_accepts_lowercase_level() -> None:
    configure_logging(LoggingSettings(level="warning", structured=True))
    assert logging.getLogger().level == logging.WARNING
