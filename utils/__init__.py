"""Utils module."""
from utils.logger import setup_logger, get_logger
from utils.retry import retry_with_backoff

__all__ = [
    "setup_logger",
    "get_logger",
    "retry_with_backoff"
]
