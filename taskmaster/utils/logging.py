"""Logging setup for the task-master CLI."""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_LOG_DIR = Path(".taskmaster/logs")


class TaskMasterFormatter(logging.Formatter):
    """Single-line formatter: ``[HH:MM:SS] LEVEL    name         message``."""

    COLORS = {
        "DEBUG": "\033[2m",  # Dim
        "INFO": "\033[34m",  # Blue
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[1;31m",  # Bold red
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def _level(self, levelname: str) -> str:
        if self.use_colors and sys.stderr.isatty():
            color = self.COLORS.get(levelname, "")
            return f"{color}{levelname:8}{self.RESET}"
        return f"{levelname:8}"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        name = record.name.rsplit(".", 1)[-1]
        line = f"[{timestamp}] {self._level(record.levelname)} {name:12} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _cleanup_old_logs(log_dir: Path, retention_days: int) -> None:
    """Delete ``*.log*`` files older than ``retention_days``."""
    if retention_days <= 0 or not log_dir.exists():
        return
    cutoff = datetime.now().timestamp() - retention_days * 86400
    for path in log_dir.glob("*.log*"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
        except FileNotFoundError:
            continue


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    log_dir: Optional[Path] = None,
    rotation_mb: int = 10,
    retention_days: int = 7,
    use_colors: bool = True,
    console: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Explicit log file path
        log_dir: Directory for a timestamped log file when ``log_file`` is unset
        rotation_mb: Size in MB before the file rotates
        retention_days: Age after which old log files are deleted (<=0 keeps all)
        use_colors: Colour the level name on a terminal
        console: Log to stderr
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers.clear()

    if console:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(TaskMasterFormatter(use_colors=use_colors))
        root.addHandler(handler)

    if log_file is None and log_dir is not None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(log_dir) / f"taskmaster_{timestamp}.log"

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _cleanup_old_logs(log_file.parent, retention_days)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max(1, rotation_mb) * 1024 * 1024,
            backupCount=max(1, retention_days),
            encoding="utf-8",
        )
        file_handler.setFormatter(TaskMasterFormatter(use_colors=False))
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Return the logger called ``name``."""
    return logging.getLogger(name)
