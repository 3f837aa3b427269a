"""
Structured logging for the ChatRoutes client.

Example:
    >>> from chatroutes.core.logging import ChatRoutesLogger, LoggingConfig
    >>>
    >>> config = LoggingConfig.create(level="DEBUG", format="colored")
    >>> logger = ChatRoutesLogger(config)
    >>> logger.info("Request started", method="GET", url="https://api.chatroutes.com")
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import ChatRoutesLogger
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    clear_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "ChatRoutesLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
