import logging
import os
import re
import sys
from typing import Optional


class DigestShorteningFilter(logging.Filter):
    """Filter that shortens SHA-256 hex digests in log records."""

    DIGEST_PATTERN = re.compile(r'\b([0-9a-f]{12})[0-9a-f]{52}\b')
    REPLACEMENT = r'\1…'

    def __init__(self, enabled: Optional[bool] = None):
        super().__init__()
        if enabled is None:
            enabled = os.getenv('CHUNKSTORE_LOG_FULL_DIGESTS', '0') != '1'
        self.enabled = enabled

    def filter(self, record: logging.LogRecord) -> bool:
        """Shorten digests in the log message and its arguments."""
        if not self.enabled:
            return True

        if isinstance(record.msg, str):
            record.msg = self.DIGEST_PATTERN.sub(self.REPLACEMENT, record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._shorten(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._shorten(arg) for arg in record.args)

        return True

    def _shorten(self, value):
        if isinstance(value, str):
            return self.DIGEST_PATTERN.sub(self.REPLACEMENT, value)
        return value


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Handlers are attached to the component logger and to the ``chunkstore``
    and ``common`` package loggers so module loggers obtained through
    ``get_logger(__name__)`` share the same output.

    Args:
        component_name: Name of the component (e.g., 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    for name in (component_name, 'chunkstore', 'common'):
        logger = logging.getLogger(name)
        logger.setLevel(level)

        if logger.handlers:
            for handler in logger.handlers:
                handler.setLevel(level)
            continue

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(DigestShorteningFilter())

        logger.addHandler(handler)
        logger.propagate = False

    return logging.getLogger(component_name)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
