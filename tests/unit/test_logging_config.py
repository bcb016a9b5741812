"""
Unit tests for logging setup.
"""

from typing import Iterator

import pytest
import structlog

from nutrisnap.logging_config import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Test structlog configuration."""

    def test_json_output(self, capsys: pytest.CaptureFixture) -> None:
        configure_logging("INFO", "json")

        structlog.get_logger("test").info("Dish analyzed", calories=248)

        out = capsys.readouterr().out
        assert '"event": "Dish analyzed"' in out
        assert '"calories": 248' in out
        assert '"level": "info"' in out

    def test_level_filters_events(self, capsys: pytest.CaptureFixture) -> None:
        configure_logging("WARNING", "json")

        structlog.get_logger("test").info("hidden")

        assert "hidden" not in capsys.readouterr().out

    def test_console_renderer(self) -> None:
        configure_logging("debug", "console")

        assert structlog.is_configured()
