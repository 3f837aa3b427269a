"""
Retry engine: подсчёт попыток и exponential backoff.

Задержка перед попыткой i+1 равна ``retry_delay * 2**i``, без jitter и без
верхней границы.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from .config import ClientConfig
from .exceptions import ChatRoutesError


BACKOFF_FACTOR = 2

SleepFunc = Callable[[float], None]
AsyncSleepFunc = Callable[[float], Awaitable[None]]


class RetryEngine:
    """
    Состояние повторов одного логического вызова.

    Создаётся на каждый вызов, поэтому конкурентные вызовы через один
    ClientConfig не делят изменяемое состояние.

    Examples:
        >>> engine = RetryEngine(ClientConfig(retry_attempts=3))
        >>> if engine.should_retry(error):
        ...     engine.wait()
        ...     engine.increment()
    """

    def __init__(
        self,
        config: ClientConfig,
        sleep: Optional[SleepFunc] = None,
        async_sleep: Optional[AsyncSleepFunc] = None,
    ):
        """
        Args:
            config: Конфигурация клиента (retry_attempts, retry_delay)
            sleep: Функция ожидания для sync клиента (по умолчанию time.sleep)
            async_sleep: Корутина ожидания для async клиента (по умолчанию asyncio.sleep)
        """
        self.config = config
        self._sleep = sleep or time.sleep
        self._async_sleep = async_sleep or asyncio.sleep
        self._attempt = 0

    def should_retry(self, error: ChatRoutesError) -> bool:
        """
        Нужен ли ещё один заход.

        Returns:
            False для терминальных ошибок и при исчерпанном бюджете
        """
        if self.exhausted:
            return False
        return error.retryable

    @property
    def exhausted(self) -> bool:
        """Следующая попытка превысила бы бюджет."""
        return self._attempt + 1 >= self.config.max_attempts

    def get_wait_time(self) -> float:
        """Задержка перед следующей попыткой (сек)."""
        return self.config.retry_delay * (BACKOFF_FACTOR ** self._attempt)

    def wait(self) -> float:
        """Блокирующее ожидание перед retry. Возвращает задержку."""
        wait_time = self.get_wait_time()
        self._sleep(wait_time)
        return wait_time

    async def async_wait(self) -> float:
        """
        Асинхронное ожидание перед retry: точка приостановки, event loop
        продолжает обслуживать другие вызовы.
        """
        wait_time = self.get_wait_time()
        await self._async_sleep(wait_time)
        return wait_time

    def increment(self):
        """Увеличить счётчик попыток."""
        self._attempt += 1

    def reset(self):
        """Сбросить счётчик."""
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Индекс текущей попытки (0 = первая)."""
        return self._attempt
