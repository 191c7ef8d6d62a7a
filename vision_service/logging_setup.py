"""
Logging configuration and setup.
"""
import sys
import logging

from vision_service.monitoring import get_request_id

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class RequestIDFilter(logging.Filter):
    """Logging filter to add request ID to log records."""

    def filter(self, record):
        """Add request_id to log record, '-' outside a request."""
        if not getattr(record, 'request_id', None):
            record.request_id = get_request_id() or '-'
        return True


class SafeFormatter(logging.Formatter):
    """Safe formatter that handles missing request_id gracefully."""

    def format(self, record):
        """Format log record, handling missing request_id."""
        if not hasattr(record, 'request_id'):
            record.request_id = '-'
        return super().format(record)


def configure_logging(level: str = "info") -> logging.Handler:
    """Install the service log handler on the root logger.

    Unknown level names fall back to INFO.
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(SafeFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(RequestIDFilter())
    logging.basicConfig(level=log_level, handlers=[handler], force=True)
    return handler
