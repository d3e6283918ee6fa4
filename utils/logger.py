"""
Logging configuration for the AI service.

Console output is always on. File output rotates daily into ``LOG_DIR``
(default ``logs/``) and old rotations are pruned after ``LOG_RETENTION_DAYS``.
Set ``LOG_TO_FILE=false`` to disable the file handler (e.g. in containers).
"""
import os
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional


LOGS_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs"))
LOG_FILE = os.path.join(LOGS_DIR, "app.log")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 10
LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() in ("true", "1", "yes", "on")


def cleanup_old_logs(directory: str, retention_days: int = LOG_RETENTION_DAYS) -> int:
    """Remove rotated log files older than retention_days. Returns the number deleted."""
    log_dir = Path(directory)
    if not log_dir.exists():
        return 0

    cutoff = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0
    for log_file in log_dir.glob("app.log.*"):
        if not log_file.is_file():
            continue
        # Rotated files are named app.log.YYYY-MM-DD
        try:
            file_date = datetime.strptime(log_file.name.replace("app.log.", ""), "%Y-%m-%d")
        except ValueError:
            file_date = datetime.fromtimestamp(log_file.stat().st_mtime)

        if file_date < cutoff:
            try:
                log_file.unlink()
                deleted_count += 1
            except OSError as e:
                logging.getLogger("app").error(f"Failed to delete log file {log_file.name}: {e}")

    return deleted_count


def setup_logger(name: str = "app", level: int = LOG_LEVEL) -> logging.Logger:
    """
    Set up logger with console output and, optionally, daily file rotation.

    Args:
        name: Logger name
        level: Logging level (default: LOG_LEVEL env var, INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s", "%H:%M:%S")
    )
    logger.addHandler(console_handler)

    if LOG_TO_FILE:
        try:
            os.makedirs(LOGS_DIR, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                LOG_FILE,
                when="midnight",
                interval=1,
                backupCount=LOG_RETENTION_DAYS,
                encoding="utf-8",
                utc=True
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
            logger.addHandler(file_handler)

            deleted = cleanup_old_logs(LOGS_DIR, LOG_RETENTION_DAYS)
            if deleted:
                logger.info(f"Cleaned up {deleted} old log file(s)")
        except OSError as e:
            logger.warning(f"File logging disabled, cannot write to {LOGS_DIR}: {e}")

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance under the application logger.

    Args:
        name: Logger name (if None, returns the root app logger)

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("app")
    return logging.getLogger(f"app.{name}")


# Create default application logger
app_logger = setup_logger("app")
app_logger.debug(f"Application logger initialized (dir={LOGS_DIR}, file={LOG_TO_FILE})")
