"""Compiler configuration tests."""

from __future__ import annotations

import logging

from schema_designer.compiler.compiler_config import CompilerConfig


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SCHEMA_DESIGNER_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SCHEMA_DESIGNER_CACHE_ENABLED", "false")
    monkeypatch.setenv("SCHEMA_DESIGNER_STRICT_FORMAT_VERSION", "true")

    config = CompilerConfig.from_env()

    assert config.log_level == "DEBUG"
    assert config.print_level == "ERROR"
    assert config.cache_enabled is False
    assert config.strict_format_version is True


def test_set_logging_splits_streams() -> None:
    logger = CompilerConfig(log_level="debug", print_level="warning").set_logging()

    assert logger.name == "schema_designer"
    assert logger.level == logging.DEBUG
    assert not logger.propagate
    stdout_handler, stderr_handler = logger.handlers
    assert stderr_handler.level == logging.WARNING
    assert not stdout_handler.filter(logging.LogRecord("x", logging.WARNING, "", 0, "", None, None))
