"""Logging for the pertgraph CLI.

Engine modules only create loggers. Handlers are installed here: a console
handler when the CLI starts, then the project's ``logging`` section once the
config file has been read.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..config.models import LoggingConfig

PACKAGE = "pertgraph"
LOG_FILE_PREFIX = "pertgraph_"

LEVEL_COLORS = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
}
RESET = "\033[0m"


def short_name(logger_name: str) -> str:
    """Module path below the package (``cpm.analyzer``), else the last component."""
    if logger_name.startswith(PACKAGE + "."):
        return logger_name[len(PACKAGE) + 1 :]
    return logger_name.rsplit(".", 1)[-1]


class PertFormatter(logging.Formatter):
    """``[HH:MM:SS] LEVEL module message``, level coloured on a TTY only."""

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self.use_colors and sys.stderr.isatty():
            level = f"{LEVEL_COLORS.get(level, '')}{level}{RESET}"

        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"[{stamp}] {level:8} {short_name(record.name):16} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def prune_logs(log_dir: Path, retention_days: int) -> int:
    """Delete run logs older than retention_days.

    Returns:
        Number of files deleted
    """
    if retention_days <= 0 or not log_dir.is_dir():
        return 0

    cutoff = datetime.now().timestamp() - retention_days * 86400
    pruned = 0
    for path in log_dir.glob(f"{LOG_FILE_PREFIX}*.log*"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                pruned += 1
        except FileNotFoundError:
            continue
    return pruned


def _reset_root(level: str) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers.clear()
    return root


def _console_handler(use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(PertFormatter(use_colors=use_colors))
    return handler


def setup_logging(level: str = "WARNING", use_colors: bool = True) -> None:
    """Console-only logging, used before a config file has been read."""
    root = _reset_root(level)
    root.addHandler(_console_handler(use_colors))


def configure_logging(config: LoggingConfig, verbose: bool = False) -> Path:
    """Apply a project's logging section.

    Each run writes its own rotating file under ``config.log_dir`` after old
    run logs are pruned. The console only gets records in verbose mode, and
    then at DEBUG.

    Args:
        config: The ``logging`` section of the project config
        verbose: Mirror records to stderr at DEBUG

    Returns:
        Path of this run's log file
    """
    root = _reset_root("DEBUG" if verbose else config.level)
    if verbose:
        root.addHandler(_console_handler(use_colors=True))

    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    pruned = prune_logs(log_dir, config.retention_days)

    log_file = log_dir / f"{LOG_FILE_PREFIX}{datetime.now():%Y%m%d_%H%M%S}.log"
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=config.rotation_mb * 1024 * 1024,
        backupCount=max(1, config.retention_days),
    )
    file_handler.setFormatter(PertFormatter(use_colors=False))
    root.addHandler(file_handler)

    if pruned:
        logging.getLogger(__name__).debug(f"Pruned {pruned} old log files from {log_dir}")
    return log_file


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
