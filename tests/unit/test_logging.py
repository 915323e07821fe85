"""Unit tests for logging configuration."""

import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest

from taskmaster.utils.logging import TaskMasterFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before and after each test."""
    root = logging.getLogger()
    original_level = root.level
    original_handlers = root.handlers.copy()

    yield

    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.setLevel(original_level)
    root.handlers.clear()
    for handler in original_handlers:
        root.addHandler(handler)


def make_record(name="test.module", level=logging.INFO, msg="Test message", args=()):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_console_handler_created(self):
        """Test console handler uses TaskMasterFormatter."""
        setup_logging()

        root = logging.getLogger()
        formatters = [
            h.formatter for h in root.handlers if isinstance(h.formatter, TaskMasterFormatter)
        ]

        assert len(formatters) == 1

    def test_console_disabled(self):
        """Test no handlers are added when console and file logging are off."""
        setup_logging(console=False)

        assert logging.getLogger().handlers == []

    def test_console_and_file_handler_created(self, tmp_path):
        """Test both console and file handlers when log_file is provided."""
        log_file = tmp_path / "test.log"
        setup_logging(log_file=log_file)

        root = logging.getLogger()
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]

        assert len(root.handlers) == 2
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename == str(log_file)
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024

    @pytest.mark.parametrize(
        "name,level",
        [
            ("DEBUG", logging.DEBUG),
            ("info", logging.INFO),
            ("WaRnInG", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
        ],
    )
    def test_log_levels(self, name, level):
        """Test log level names are case-insensitive."""
        setup_logging(level=name)

        assert logging.getLogger().level == level

    def test_existing_handlers_cleared(self):
        """Test existing handlers are removed before setup."""
        root = logging.getLogger()
        existing_handler = logging.StreamHandler()
        root.addHandler(existing_handler)

        setup_logging()

        assert existing_handler not in root.handlers

    def test_file_handler_no_colors(self, tmp_path):
        """Test file handler never uses colors."""
        setup_logging(log_file=tmp_path / "test.log", use_colors=True)

        root = logging.getLogger()
        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]

        assert file_handlers[0].formatter.use_colors is False

    def test_log_dir_creates_timestamped_file(self, tmp_path):
        """Test a timestamped log file is created in log_dir."""
        log_dir = tmp_path / "logs"

        setup_logging(log_dir=log_dir)
        get_logger("taskmaster.test").warning("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        log_files = list(log_dir.glob("taskmaster_*.log"))
        assert len(log_files) == 1
        assert "written to file" in log_files[0].read_text()

    def test_old_logs_removed(self, tmp_path):
        """Test log files older than the retention period are deleted."""
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        old_log = log_dir / "taskmaster_old.log"
        old_log.write_text("old")
        stale = time.time() - 10 * 86400
        os.utime(old_log, (stale, stale))
        recent_log = log_dir / "taskmaster_recent.log"
        recent_log.write_text("recent")

        setup_logging(log_dir=log_dir, retention_days=7)

        assert not old_log.exists()
        assert recent_log.exists()

    def test_log_file_directory_created(self, tmp_path):
        """Test log file parent directories are created."""
        log_file = tmp_path / "nested" / "dir" / "test.log"

        setup_logging(log_file=log_file)

        assert log_file.parent.is_dir()

    def test_logger_filters_by_level(self, capsys):
        """Test logger respects level filtering and writes to stderr."""
        setup_logging(level="WARNING")
        logger = get_logger("test")

        logger.info("Info message")
        logger.warning("Warning message")

        captured = capsys.readouterr()
        assert "Info message" not in captured.err
        assert "Warning message" in captured.err
        assert captured.out == ""


class TestTaskMasterFormatter:
    """Tests for TaskMasterFormatter class."""

    def test_formatter_with_colors(self):
        """Test formatter colors the level name on a terminal."""
        formatter = TaskMasterFormatter(use_colors=True)

        with patch("sys.stderr.isatty", return_value=True):
            formatted = formatter.format(make_record())

        assert "\033[34m" in formatted  # Blue for INFO
        assert "\033[0m" in formatted
        assert "Test message" in formatted

    def test_formatter_colors_only_on_tty(self):
        """Test colors are skipped when stderr is not a terminal."""
        formatter = TaskMasterFormatter(use_colors=True)

        with patch("sys.stderr.isatty", return_value=False):
            formatted = formatter.format(make_record())

        assert "\033[" not in formatted

    def test_formatter_without_colors(self):
        """Test formatter without colors."""
        formatter = TaskMasterFormatter(use_colors=False)

        with patch("sys.stderr.isatty", return_value=True):
            formatted = formatter.format(make_record())

        assert "\033[" not in formatted
        assert "INFO" in formatted

    def test_formatter_shortens_logger_name(self):
        """Test formatter uses last component of logger name."""
        formatter = TaskMasterFormatter(use_colors=False)

        formatted = formatter.format(make_record(name="taskmaster.dependencies.repair"))

        assert "repair" in formatted
        assert "taskmaster.dependencies" not in formatted

    def test_formatter_renders_args(self):
        """Test message arguments are interpolated."""
        formatter = TaskMasterFormatter(use_colors=False)

        formatted = formatter.format(make_record(msg="Removed %d edge(s)", args=(3,)))

        assert "Removed 3 edge(s)" in formatted

    def test_formatter_includes_exception(self):
        """Test exception tracebacks are appended."""
        formatter = TaskMasterFormatter(use_colors=False)
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record(level=logging.ERROR, msg="failed")
            record.exc_info = sys.exc_info()

        formatted = formatter.format(record)

        assert "failed" in formatted
        assert "RuntimeError: boom" in formatted

    def test_formatter_all_levels_have_colors(self):
        """Test all log levels have defined colors."""
        formatter = TaskMasterFormatter(use_colors=True)

        levels = [
            (logging.DEBUG, "\033[2m"),  # Dim
            (logging.INFO, "\033[34m"),  # Blue
            (logging.WARNING, "\033[33m"),  # Yellow
            (logging.ERROR, "\033[31m"),  # Red
            (logging.CRITICAL, "\033[1;31m"),  # Bold red
        ]

        with patch("sys.stderr.isatty", return_value=True):
            for level, color_code in levels:
                formatted = formatter.format(make_record(level=level))
                assert color_code in formatted, f"Missing color for {logging.getLevelName(level)}"


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_returns_logger(self):
        """Test get_logger returns a Logger instance."""
        logger = get_logger("test")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test"

    def test_get_logger_same_name_same_instance(self):
        """Test get_logger returns same instance for same name."""
        assert get_logger("test") is get_logger("test")

    def test_get_logger_different_names_different_instances(self):
        """Test get_logger returns different instances for different names."""
        assert get_logger("test1") is not get_logger("test2")
