"""Tests for logging setup."""

import logging

import pytest
import structlog

from slack_status_switcher.config import Settings
from slack_status_switcher.logging_config import get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.mark.parametrize("environment", ["development", "production"])
    def test_configures_structlog(self, environment):
        """Should configure structlog for either environment."""
        setup_logging(Settings(_env_file=None, environment=environment, log_level="DEBUG"))

        assert structlog.is_configured()
        get_logger("tests").info("configured", environment=environment)

    def test_quiets_http_loggers(self):
        """Should raise noisy HTTP libraries to WARNING."""
        setup_logging(Settings(_env_file=None))

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
