"""
Конфигурация ChatRoutes клиента.

ClientConfig immutable (frozen dataclass): один экземпляр создаётся при
конструировании клиента и только читается всеми запросами.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Optional, Dict, Mapping, TYPE_CHECKING

if TYPE_CHECKING:
    from .logging import LoggingConfig

DEFAULT_BASE_URL = "https://api.chatroutes.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0


def _freeze_dict(d: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    """
    Convert dict to immutable MappingProxyType.

    Example:
        >>> frozen = _freeze_dict({"X-Team": "research"})
        >>> frozen["X-New"] = "value"  # Raises TypeError
    """
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class ClientConfig:
    """
    Настройки соединения с ChatRoutes API.

    Args:
        api_key: API ключ (отправляется как ``Authorization: ApiKey <key>``)
        base_url: Базовый URL сервиса
        timeout: Таймаут одной попытки (сек)
        retry_attempts: Количество повторов после первой попытки
        retry_delay: Базовая задержка backoff (сек); перед попыткой i+1
            ждём ``retry_delay * 2**i``
        headers: Дополнительные заголовки для каждого запроса
        logging: Конфигурация логирования (None = без логирования)

    Examples:
        >>> ClientConfig(api_key="cr_live_xxx")
        >>> ClientConfig(api_key="cr_live_xxx", timeout=60, retry_attempts=5)
    """
    api_key: Optional[str] = field(default=None, repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay: float = DEFAULT_RETRY_DELAY
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Валидация и нормализация."""
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.retry_attempts < 0:
            raise ValueError("retry_attempts must be non-negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be non-negative")

        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))

        normalized = self.base_url.rstrip('/')
        if normalized != self.base_url:
            object.__setattr__(self, 'base_url', normalized)

    @property
    def max_attempts(self) -> int:
        """Общее количество попыток, включая первую."""
        return self.retry_attempts + 1

    @classmethod
    def create(
        cls,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'ClientConfig':
        """
        Удобный конструктор: None означает значение по умолчанию.

        Example:
            >>> config = ClientConfig.create(api_key="cr_live_xxx", timeout=60)
        """
        return cls(
            api_key=api_key,
            base_url=base_url or DEFAULT_BASE_URL,
            timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
            retry_attempts=DEFAULT_RETRY_ATTEMPTS if retry_attempts is None else retry_attempts,
            retry_delay=DEFAULT_RETRY_DELAY if retry_delay is None else retry_delay,
            headers=headers or {},
            logging=logging,
        )

    def with_timeout(self, timeout: float) -> 'ClientConfig':
        """
        Новый конфиг с изменённым timeout.

        Example:
            >>> new_config = config.with_timeout(60)
        """
        return replace(self, timeout=timeout)

    def with_retries(self, retry_attempts: int, retry_delay: Optional[float] = None) -> 'ClientConfig':
        """Новый конфиг с изменённым retry бюджетом."""
        return replace(
            self,
            retry_attempts=retry_attempts,
            retry_delay=self.retry_delay if retry_delay is None else retry_delay,
        )

    def with_headers(self, headers: Dict[str, str]) -> 'ClientConfig':
        """
        Новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"X-Team": "research"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)
