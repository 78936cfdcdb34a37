# src/p2pex/shared/logging_conf.py
"""
Logging Configuration - Logging Setup and Configuration

This module configures the root logger once at start-up: a stdout handler
that a process supervisor can switch off, and an optional rotating log file
for unattended deployments.

Files that USE this module:
- p2pex.app (setup_logging function for logging initialization)

Files that this module USES:
- None (pure configuration module)
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "p2pex.log"


def _resolve_log_path(
    log_file: Optional[Union[str, Path]], log_dir: Optional[Union[str, Path]]
) -> Optional[Path]:
    """LOG_DIR wins over LOG_FILE; the parent directory is created."""
    if log_dir:
        path = Path(log_dir) / LOG_FILE_NAME
    elif log_file:
        path = Path(log_file)
    else:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    level=logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    log_stdout: Optional[bool] = None,
) -> Optional[Path]:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file (enables file logging)
        log_dir: Optional directory for log files (file name is p2pex.log)
        max_bytes: Maximum size per log file before rotation (default: 10MB)
        backup_count: Number of rotated files to keep (default: 5)
        log_stdout: Log to stdout; defaults to the P2PEX_LOG_STDOUT environment variable

    Returns:
        The log file path, or None when logging to stdout only
    """
    if log_stdout is None:
        log_stdout = os.environ.get("P2PEX_LOG_STDOUT", "true").lower() == "true"

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: List[logging.Handler] = []
    if log_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    log_path = _resolve_log_path(log_file, log_dir)
    if log_path is not None:
        handlers.append(
            RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )

    # Never leave the process silent
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # python-telegram-bot logs every poll through httpx at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: %s, level=%s", log_path or "stdout", logging.getLevelName(level)
    )
    return log_path
