"""
test_logging_config.py — Tests for app/logging_config.py

Verifies Loguru setup, stdlib logging interception, level control and
production JSON output. Uses loguru's sink capture for assertions.

Called by: pytest
Depends on: app/logging_config.py
"""

import logging
import os
from unittest.mock import patch

import pytest
from loguru import logger

from app.logging_config import setup_logging

_DEV_ENV = {"APP_URL": "http://localhost:8000"}


@pytest.fixture(autouse=True)
def _clean_loguru():
    """Remove all handlers before/after each test for isolation."""
    logger.remove()
    yield
    logger.remove()


def test_setup_logging_adds_handler():
    """setup_logging() should add at least one Loguru handler."""
    assert len(logger._core.handlers) == 0
    with patch.dict(os.environ, _DEV_ENV):
        setup_logging()
    assert len(logger._core.handlers) > 0


def test_stdlib_logging_intercepted():
    """After setup, stdlib logging.getLogger() messages go through Loguru."""
    with patch.dict(os.environ, _DEV_ENV):
        setup_logging()

    # Add test sink AFTER setup (setup calls logger.remove() internally)
    messages = []
    logger.add(lambda m: messages.append(str(m)), format="{message}")

    logging.getLogger("app.dependencies").warning("session user could not be loaded")

    assert any("session user could not be loaded" in m for m in messages)


def test_log_level_from_env():
    """LOG_LEVEL env var controls minimum log level."""
    with patch.dict(os.environ, {**_DEV_ENV, "LOG_LEVEL": "WARNING"}):
        with patch("loguru.logger.add") as mock_add:
            setup_logging()
    assert mock_add.call_args_list[0].kwargs["level"] == "WARNING"


def test_noisy_libraries_quieted():
    with patch.dict(os.environ, _DEV_ENV):
        setup_logging()
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_production_mode_uses_serialize():
    """When APP_URL contains 'housinghub.app', serialize=True (JSON output)."""
    with patch.dict(os.environ, {"APP_URL": "https://housinghub.app"}):
        with patch("loguru.logger.add") as mock_add:
            setup_logging()
    serialize_calls = [c for c in mock_add.call_args_list if c.kwargs.get("serialize") is True]
    assert len(serialize_calls) >= 1


def test_production_log_file_rotates():
    env = {"APP_URL": "https://housinghub.app", "LOG_FILE": "/var/log/housinghub/app.log"}
    with patch.dict(os.environ, env):
        with patch("loguru.logger.add") as mock_add:
            setup_logging()
    file_calls = [c for c in mock_add.call_args_list if c.args and c.args[0] == env["LOG_FILE"]]
    assert len(file_calls) == 1
    assert file_calls[0].kwargs["rotation"] == "50 MB"


def test_development_is_not_serialized():
    with patch.dict(os.environ, _DEV_ENV, clear=False):
        os.environ.pop("LOG_FILE", None)
        with patch("loguru.logger.add") as mock_add:
            setup_logging()
    assert all(not c.kwargs.get("serialize") for c in mock_add.call_args_list)
