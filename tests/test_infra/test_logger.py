"""Unit tests for the console logger (start_vibe_project.infra.logger).

Tests cover:
- Level threshold filtering (error always shown)
- Warn/error routed to the error console
- Context rendered as JSON; markup in messages printed literally
"""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from start_vibe_project.infra.logger import ConsoleLogger

pytestmark = pytest.mark.unit


def _logger(level: str) -> tuple[ConsoleLogger, io.StringIO, io.StringIO]:
    out, err = io.StringIO(), io.StringIO()
    logger = ConsoleLogger(
        level,
        console=Console(file=out, width=200, color_system=None),
        err_console=Console(file=err, width=200, color_system=None),
    )
    return logger, out, err


class TestLevels:
    def test_default_threshold_only_shows_errors(self):
        logger, out, err = _logger("error")
        logger.debug("d")
        logger.info("i")
        logger.warn("w")
        logger.error("e")
        assert out.getvalue() == ""
        assert err.getvalue() == "[ERROR] e\n"

    def test_info_threshold(self):
        logger, out, err = _logger("info")
        logger.debug("hidden")
        logger.info("shown")
        logger.warn("careful")
        assert out.getvalue() == "[INFO] shown\n"
        assert err.getvalue() == "[WARN] careful\n"

    def test_debug_shows_everything(self):
        logger, out, _ = _logger("debug")
        logger.debug("trace")
        assert out.getvalue() == "[DEBUG] trace\n"

    def test_is_enabled(self):
        logger, _, _ = _logger("warn")
        assert not logger.is_enabled("info")
        assert logger.is_enabled("warn")
        assert logger.is_enabled("error")

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            ConsoleLogger("verbose")


class TestFormatting:
    def test_context_rendered_as_json(self):
        logger, out, _ = _logger("info")
        logger.info("Installing skills", {"source": "a/b", "count": 2})
        assert out.getvalue() == '[INFO] Installing skills {"source": "a/b", "count": 2}\n'

    def test_markup_in_message_is_literal(self):
        logger, _, err = _logger("error")
        logger.error("failed [bold]x[/bold]")
        assert err.getvalue() == "[ERROR] failed [bold]x[/bold]\n"
