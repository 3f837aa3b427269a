# src/chatroutes/client.py
"""
Синхронный клиент ChatRoutes на базе requests.
"""

from typing import Any, Dict, Mapping, Optional

import requests

from .api import AuthAPI, BranchesAPI, ConversationsAPI, MessagesAPI
from .core.config import ClientConfig
from .core.envelope import ApiResponse
from .core.executor import RequestExecutor, create_logger
from .core.retry_engine import SleepFunc
from .core.streaming import StreamReader


class ChatRoutesClient:
    """
    Клиент ChatRoutes API: auth, conversations, messages, branches.

    Example:
        >>> with ChatRoutesClient(api_key="cr_live_xxx") as client:
        ...     conversation = client.conversations.create("Hello")
        ...     reply = client.messages.send(conversation.id, "Hi there!")
        ...     print(reply.message.content)

        >>> # Из переменных окружения
        >>> from chatroutes import load_from_env
        >>> client = ChatRoutesClient(config=load_from_env())
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Args:
            api_key: API ключ
            config: ClientConfig (если указан, остальные параметры конфигурации игнорируются)
            base_url: Базовый URL сервиса
            timeout: Таймаут одной попытки (сек)
            retry_attempts: Количество повторов после первой попытки
            retry_delay: Базовая задержка backoff (сек)
            headers: Дополнительные заголовки
            session: Готовая requests.Session (клиент её не закрывает)
            sleep: Функция ожидания между попытками (для тестов)
        """
        if config is None:
            config = ClientConfig.create(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                retry_attempts=retry_attempts,
                retry_delay=retry_delay,
                headers=headers,
            )
        self._config = config

        self._logger = create_logger(config)
        self._executor = RequestExecutor(config, session=session, logger=self._logger, sleep=sleep)
        self._stream_reader = StreamReader(self._executor)

        self.auth = AuthAPI(self._executor)
        self.conversations = ConversationsAPI(self._executor)
        self.messages = MessagesAPI(self._executor, self._stream_reader)
        self.branches = BranchesAPI(self._executor)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    @property
    def stream_reader(self) -> StreamReader:
        return self._stream_reader

    # ==================== Low-level API ====================

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return self._executor.execute("GET", path, params=params)

    def post(
        self,
        path: str,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        skip_auth: bool = False,
    ) -> ApiResponse:
        return self._executor.execute("POST", path, data, headers=headers, skip_auth=skip_auth)

    def patch(self, path: str, data: Any = None) -> ApiResponse:
        return self._executor.execute("PATCH", path, data)

    def delete(self, path: str) -> ApiResponse:
        return self._executor.execute("DELETE", path)

    def stream(self, path: str, data: Any, on_event) -> None:
        """Raw stream: ``on_event`` gets each parsed event dict."""
        self._stream_reader.open_stream(path, data, on_event)

    # ==================== Lifecycle ====================

    def close(self) -> None:
        """Закрыть сессию и логгер."""
        self._executor.close()
        if self._logger:
            self._logger.close()

    def __enter__(self) -> "ChatRoutesClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ChatRoutesClient(base_url={self._config.base_url!r})"
