"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, parse_level, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        logger = get_logger()
        assert logger.name == "sitebridge"

    @pytest.mark.unit
    def test_setup_logging(self) -> None:
        """Verify logging setup."""
        stream = StringIO()
        setup_logging(level="debug", stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")

        # basicConfig is a no-op when logging was already configured,
        # so only the API contract is checked.
        assert logger.level == logging.NOTSET

    @pytest.mark.unit
    def test_parse_level(self) -> None:
        """Level names map to logging constants."""
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("WARNING") == logging.WARNING
        assert parse_level(logging.ERROR) == logging.ERROR
        assert parse_level("chatty") == logging.INFO
