"""
Per-client structured logger.
"""

import logging
from typing import Any, Dict, List, Optional

from .config import LoggingConfig
from .formatters import get_formatter
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data


class ChatRoutesLogger:
    """
    Обёртка над logging.Logger, принимающая структурированные поля.

    Поля из kwargs становятся атрибутами записи после mask_sensitive_data:
    ключи API и токены до handler'ов не доходят.

    Example:
        >>> logger = ChatRoutesLogger(LoggingConfig.create(level="DEBUG"))
        >>> logger.info("Request started", method="POST", url="https://api.chatroutes.com/api/v1/conversations")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "chatroutes"):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = self.config.level.numeric
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Повторная инициализация с тем же именем заменяет handler'ы
        self._drop_handlers()
        for handler in self._build_handlers(level):
            self._logger.addHandler(handler)

    def _build_handlers(self, level: int) -> List[logging.Handler]:
        filters: List[logging.Filter] = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(dict(self.config.extra_fields)))

        formatter = get_formatter(self.config.format.value)
        handlers: List[logging.Handler] = []

        if self.config.enable_console:
            handlers.append(create_console_handler(level, formatter, filters))
        if self.config.enable_file:
            handlers.append(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters,
            ))
        return handlers

    def _drop_handlers(self) -> None:
        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

    def _log(self, level: int, message: str, fields: Dict[str, Any], exc_info: bool = False) -> None:
        self._logger.log(level, message, extra=mask_sensitive_data(fields), exc_info=exc_info)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        """
        Example:
            >>> logger.info("Request completed", status_code=200, attempts=1, duration_ms=150)
        """
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)

    def exception(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields, exc_info=True)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def close(self) -> None:
        """Сбросить буферы и закрыть handler'ы. Повторный вызов ничего не делает."""
        if self._closed:
            return
        self._drop_handlers()
        self._closed = True

    def __enter__(self) -> "ChatRoutesLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
