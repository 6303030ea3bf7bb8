"""Logging module with structured logging and request tracking."""

from zena.core.logging.config import configure_logging
from zena.core.logging.middleware import RequestLoggingMiddleware, get_client_ip


__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_client_ip",
]
