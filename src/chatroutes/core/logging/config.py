"""
Конфигурация логирования клиента ChatRoutes.

Логирование выключено, пока в ClientConfig не передан LoggingConfig.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        """Числовой уровень модуля logging."""
        return getattr(logging, self.value)


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Где и в каком виде писать лог запросов.

    Attributes:
        level: Минимальный уровень записей
        format: json - для сборщиков логов, text/colored - для терминала
        enable_console: Писать в stdout
        enable_file: Писать в файл с ротацией
        file_path: Путь к файлу (обязателен при enable_file=True)
        max_bytes: Размер файла до ротации
        backup_count: Сколько старых файлов хранить
        enable_correlation_id: Добавлять X-Correlation-ID вызова в записи
        extra_fields: Поля, добавляемые в каждую запись (service, env, ...)

    Example:
        >>> LoggingConfig.create(level="DEBUG", format="json")
        >>> LoggingConfig().with_file("/var/log/chatroutes.log")
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = DEFAULT_MAX_BYTES
    backup_count: int = DEFAULT_BACKUP_COUNT
    enable_correlation_id: bool = True
    extra_fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")
        if not isinstance(self.extra_fields, MappingProxyType):
            object.__setattr__(self, 'extra_fields', MappingProxyType(dict(self.extra_fields)))

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        enable_console: bool = True,
        enable_file: bool = False,
        file_path: Optional[str] = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
        enable_correlation_id: bool = True,
        extra_fields: Optional[Mapping[str, Any]] = None,
    ) -> "LoggingConfig":
        """Строковые level/format без учёта регистра (удобно для env)."""
        return cls(
            level=LogLevel(level.upper()),
            format=LogFormat(format.lower()),
            enable_console=enable_console,
            enable_file=enable_file,
            file_path=file_path,
            max_bytes=max_bytes,
            backup_count=backup_count,
            enable_correlation_id=enable_correlation_id,
            extra_fields=extra_fields or {},
        )

    def with_level(self, level: str) -> "LoggingConfig":
        return replace(self, level=LogLevel(level.upper()))

    def with_file(self, file_path: str, console: bool = False) -> "LoggingConfig":
        """Копия с файловым логом; консоль по умолчанию выключается."""
        return replace(self, enable_file=True, file_path=file_path, enable_console=console)
