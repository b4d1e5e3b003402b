"""Tests for the package-level Loguru configuration."""

import io

import pytest

import durationguard
from durationguard import (
    LoggingConfigError,
    configure_console_logging,
    configure_test_logging,
    initialize_logging,
    logger,
    reset_logging,
    validate_log_level,
)


@pytest.mark.parametrize("level", ["debug", "INFO", "Warning"])
def test_validate_log_level_normalizes(level):
    assert validate_log_level(level) == level.upper()


def test_validate_log_level_rejects_unknown():
    with pytest.raises(LoggingConfigError):
        validate_log_level("LOUD")


def test_console_logging_respects_level():
    reset_logging()
    stream = io.StringIO()
    configure_console_logging(level="WARNING", format_template="{level}:{message}",
                              colorize=False, destination=stream)

    logger.info("quiet")
    logger.warning("loud")

    assert stream.getvalue().strip().splitlines() == ["WARNING:loud"]


def test_test_logging_marks_state():
    stream = io.StringIO()

    sink_ids = configure_test_logging(console_level="INFO", console_destination=stream)
    logger.info("visible")

    assert durationguard._logger_state.is_initialized()
    assert set(sink_ids) == {"console"}
    assert "visible" in stream.getvalue()


def test_reset_logging_clears_state():
    configure_test_logging()

    reset_logging()

    assert not durationguard._logger_state.is_initialized()


def test_initialize_logging_with_file_sink(tmp_path, monkeypatch):
    monkeypatch.delenv(durationguard.LOG_DIR_ENV_VAR, raising=False)

    sink_ids = initialize_logging(console_level="ERROR", log_dir=tmp_path / "logs")
    logger.info("to the file")

    assert set(sink_ids) == {"console", "file"}
    assert durationguard._logger_state.is_initialized()

    # Removing the sinks closes and flushes the file
    reset_logging()
    log_files = list((tmp_path / "logs").glob("durationguard_*.log"))
    assert len(log_files) == 1
    assert "to the file" in log_files[0].read_text(encoding="utf-8")


def test_initialize_logging_reads_log_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(durationguard.LOG_DIR_ENV_VAR, str(tmp_path))

    sink_ids = initialize_logging(console_level="ERROR")

    assert "file" in sink_ids


def test_initialize_logging_console_only(monkeypatch):
    monkeypatch.delenv(durationguard.LOG_DIR_ENV_VAR, raising=False)

    assert set(initialize_logging(console_level="ERROR")) == {"console"}


def test_initialize_logging_rejects_bad_level():
    with pytest.raises(LoggingConfigError):
        initialize_logging(console_level="NOPE")
