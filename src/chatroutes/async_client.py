# src/chatroutes/async_client.py
"""
Асинхронный клиент ChatRoutes на базе httpx.

Предоставляет async/await API для asyncio приложений (FastAPI, aiohttp, etc.)
"""

from typing import Any, Dict, Mapping, Optional

import httpx

from .api import AsyncAuthAPI, AsyncBranchesAPI, AsyncConversationsAPI, AsyncMessagesAPI
from .core.async_executor import AsyncRequestExecutor
from .core.config import ClientConfig
from .core.envelope import ApiResponse
from .core.executor import create_logger
from .core.retry_engine import AsyncSleepFunc
from .core.streaming import AsyncStreamReader


class AsyncChatRoutesClient:
    """
    Асинхронный клиент ChatRoutes API.

    Example:
        >>> async with AsyncChatRoutesClient(api_key="cr_live_xxx") as client:
        ...     conversation = await client.conversations.create("Hello")
        ...     await client.messages.stream(
        ...         conversation.id, "Tell me a story",
        ...         on_chunk=lambda chunk: print(chunk.text, end=""),
        ...     )

        >>> # Или без context manager
        >>> client = AsyncChatRoutesClient(api_key="cr_live_xxx")
        >>> me = await client.auth.me()
        >>> await client.close()
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
        http_client: Optional[httpx.AsyncClient] = None,
        async_sleep: Optional[AsyncSleepFunc] = None,
    ):
        """
        Args:
            api_key: API ключ
            config: ClientConfig (если указан, остальные параметры конфигурации игнорируются)
            http_client: Готовый httpx.AsyncClient (клиент его не закрывает)
            async_sleep: Корутина ожидания между попытками (для тестов)

        Остальные параметры как у ChatRoutesClient.
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
        self._executor = AsyncRequestExecutor(
            config, http_client=http_client, logger=self._logger, async_sleep=async_sleep
        )
        self._stream_reader = AsyncStreamReader(self._executor)

        self.auth = AsyncAuthAPI(self._executor)
        self.conversations = AsyncConversationsAPI(self._executor)
        self.messages = AsyncMessagesAPI(self._executor, self._stream_reader)
        self.branches = AsyncBranchesAPI(self._executor)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def executor(self) -> AsyncRequestExecutor:
        return self._executor

    @property
    def stream_reader(self) -> AsyncStreamReader:
        return self._stream_reader

    # ==================== Low-level API ====================

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return await self._executor.execute("GET", path, params=params)

    async def post(
        self,
        path: str,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        skip_auth: bool = False,
    ) -> ApiResponse:
        return await self._executor.execute("POST", path, data, headers=headers, skip_auth=skip_auth)

    async def patch(self, path: str, data: Any = None) -> ApiResponse:
        return await self._executor.execute("PATCH", path, data)

    async def delete(self, path: str) -> ApiResponse:
        return await self._executor.execute("DELETE", path)

    async def stream(self, path: str, data: Any, on_event) -> None:
        await self._stream_reader.open_stream(path, data, on_event)

    # ==================== Lifecycle ====================

    async def __aenter__(self) -> "AsyncChatRoutesClient":
        """Async context manager entry."""
        await self._executor.get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Закрыть клиент и освободить ресурсы."""
        await self._executor.aclose()
        if self._logger:
            self._logger.close()

    def __repr__(self) -> str:
        return f"AsyncChatRoutesClient(base_url={self._config.base_url!r})"
