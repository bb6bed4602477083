"""
Tests for structured logging.
"""

import json
import logging
import logging.handlers
from uuid import uuid4
from unittest.mock import patch

from reelsmith.shared.config import Settings
from reelsmith.shared.logging import (
    JSONFormatter,
    LOG_FILE_NAME,
    build_handlers,
    get_job_id,
    get_logger,
    job_context,
)


def format_last(caplog) -> dict:
    assert len(caplog.records) > 0
    return json.loads(JSONFormatter().format(caplog.records[-1]))


def test_get_logger_creates_logger():
    """Test that get_logger creates a logger instance."""
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_module"


def test_get_logger_is_idempotent():
    """Test that repeated calls do not stack handlers."""
    first = get_logger("test_module_idempotent")
    count = len(first.handlers)
    second = get_logger("test_module_idempotent")
    assert second is first
    assert len(second.handlers) == count


def test_logger_outputs_json_format(caplog):
    """Test that logger outputs JSON format."""
    logger = get_logger("test_module")
    logger.setLevel(logging.INFO)

    logger.info("Test message", extra={"key": "value"})

    log_data = format_last(caplog)
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test_module"
    assert log_data["message"] == "Test message"
    assert log_data["key"] == "value"
    assert log_data["timestamp"].endswith("Z")


def test_logger_includes_job_id(caplog):
    """Test that logger includes job_id when set in context."""
    logger = get_logger("test_module")
    logger.setLevel(logging.INFO)

    job_id = uuid4()
    with job_context(job_id):
        logger.info("Test message")
        assert format_last(caplog)["job_id"] == str(job_id)


def test_logger_excludes_job_id_when_not_set(caplog):
    """Test that logger excludes job_id when not set."""
    logger = get_logger("test_module")
    logger.setLevel(logging.INFO)

    logger.info("Test message")

    assert "job_id" not in format_last(caplog)


def test_job_context_restores_previous_id():
    """Test that nested job contexts restore the outer id on exit."""
    outer, inner = uuid4(), uuid4()
    assert get_job_id() is None

    with job_context(outer):
        with job_context(inner):
            assert get_job_id() == inner
        assert get_job_id() == outer

    assert get_job_id() is None


def test_job_context_resets_on_error():
    job_id = uuid4()
    try:
        with job_context(job_id):
            raise RuntimeError("encode failed")
    except RuntimeError:
        pass
    assert get_job_id() is None


def test_logger_handles_complex_types(caplog):
    """Test that complex extra fields are converted to strings."""
    logger = get_logger("test_module")
    logger.setLevel(logging.INFO)

    logger.info("Test message", extra={
        "command": ["ffmpeg", "-y", "out.mp4"],
        "size_bytes": 4096,
        "uuid": uuid4()
    })

    log_data = format_last(caplog)
    assert isinstance(log_data["command"], str)
    assert log_data["size_bytes"] == 4096
    assert isinstance(log_data["uuid"], str)


def test_logger_includes_exception(caplog):
    """Test that logger includes exception information."""
    logger = get_logger("test_module")
    logger.setLevel(logging.ERROR)

    try:
        raise RuntimeError("encoder crashed")
    except RuntimeError:
        logger.exception("Exception occurred")

    log_data = format_last(caplog)
    assert "RuntimeError" in log_data["exception"]
    assert "encoder crashed" in log_data["exception"]


def test_logger_respects_log_level(caplog):
    """Test that logger respects log level configuration."""
    logger = get_logger("test_module")
    logger.setLevel(logging.WARNING)

    logger.debug("Debug message")
    logger.info("Info message")
    logger.warning("Warning message")

    log_levels = [record.levelname for record in caplog.records]
    assert "DEBUG" not in log_levels
    assert "INFO" not in log_levels
    assert "WARNING" in log_levels


def test_logger_creates_file_handler(tmp_path):
    """Test that a rotating file handler is added when LOG_DIR is set."""
    file_settings = Settings(_env_file=None, log_dir=tmp_path / "logs")

    with patch("reelsmith.shared.logging.settings", file_settings):
        logger = get_logger(f"test_module_file_{id(tmp_path)}")

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert (tmp_path / "logs").is_dir()
    assert file_handlers[0].baseFilename.endswith(LOG_FILE_NAME)
    for handler in logger.handlers:
        handler.close()


def test_logger_without_log_dir_has_no_file_handler(tmp_path):
    """Test that an empty LOG_DIR disables file logging."""
    console_settings = Settings(_env_file=None, log_dir="")

    with patch("reelsmith.shared.logging.settings", console_settings):
        logger = get_logger(f"test_module_console_{id(tmp_path)}")

    assert not [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]


def test_build_handlers_share_json_formatter(tmp_path):
    """Test that every handler renders JSON."""
    handlers = build_handlers(Settings(_env_file=None, log_dir=tmp_path / "logs"))
    try:
        assert len(handlers) == 2
        assert all(isinstance(h.formatter, JSONFormatter) for h in handlers)
        assert handlers[1].maxBytes == 100 * 1024 * 1024
        assert handlers[1].backupCount == 5
    finally:
        for handler in handlers:
            handler.close()


def test_path_extra_serialized_as_string(caplog, tmp_path):
    logger = get_logger("test_module")
    logger.setLevel(logging.INFO)

    logger.info("Wrote descriptor", extra={"descriptor": tmp_path / "input.txt"})

    assert format_last(caplog)["descriptor"] == str(tmp_path / "input.txt")
