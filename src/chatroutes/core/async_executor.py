# src/chatroutes/core/async_executor.py
"""
Асинхронный request executor на базе httpx.

Та же семантика, что у RequestExecutor: классификация, бюджет попыток,
exponential backoff. Ожидание между попытками - точка приостановки.
"""

import time
from typing import Any, Dict, Mapping, Optional

import httpx

from .config import ClientConfig
from .envelope import ApiResponse
from .exceptions import ChatRoutesError, classify_httpx_exception
from .executor import BaseExecutor
from .logging import ChatRoutesLogger
from .retry_engine import AsyncSleepFunc, RetryEngine


class AsyncRequestExecutor(BaseExecutor):
    """
    Non-blocking executor.

    Example:
        >>> executor = AsyncRequestExecutor(ClientConfig(api_key="cr_live_xxx"))
        >>> envelope = await executor.execute("GET", "/api/v1/auth/me")
        >>> await executor.aclose()
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[ChatRoutesLogger] = None,
        async_sleep: Optional[AsyncSleepFunc] = None,
    ):
        """
        Args:
            config: Client configuration
            http_client: Existing httpx client (the executor does not close it)
            logger: Structured logger (None = no logging)
            async_sleep: Backoff sleep coroutine, asyncio.sleep by default
        """
        super().__init__(config, logger)
        # Клиент создаётся лениво
        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None
        self._async_sleep = async_sleep

    async def get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout),
                headers=dict(self._config.headers),
            )
        return self._client

    async def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        skip_auth: bool = False,
    ) -> ApiResponse:
        """
        Execute one logical call with retries.

        Same arguments and errors as RequestExecutor.execute.
        """
        method = method.upper()
        url = self.build_url(path)
        request_headers = self.build_headers(headers, skip_auth=skip_auth)
        deadline = timeout if timeout is not None else self._config.timeout
        payload = body if body is not None and method != "GET" else None

        client = await self.get_client()

        # RetryEngine на каждый вызов: конкурентные вызовы не делят счётчик
        retry_engine = RetryEngine(self._config, async_sleep=self._async_sleep)
        start_time = time.monotonic()
        self._log_started(method, url, request_headers, deadline)

        try:
            while True:
                try:
                    envelope = await self._attempt(
                        client, method, url, payload, params, request_headers, deadline
                    )
                except ChatRoutesError as error:
                    if not retry_engine.should_retry(error):
                        self._log_failed(method, url, error, retry_engine.attempt + 1, start_time)
                        raise self._give_up(error, retry_engine)

                    self._log_retry(method, url, error, retry_engine.attempt + 1,
                                    retry_engine.get_wait_time())
                    await retry_engine.async_wait()
                    retry_engine.increment()
                    continue

                self._log_completed(method, url, envelope, retry_engine.attempt + 1, start_time)
                return envelope
        finally:
            self._log_finished()

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        payload: Any,
        params: Optional[Mapping[str, Any]],
        headers: Dict[str, str],
        timeout: float,
    ) -> ApiResponse:
        try:
            response = await client.request(
                method,
                url,
                json=payload,
                params=params,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TransportError as e:
            raise classify_httpx_exception(e, url) from e

        return self._envelope_from(response.status_code, response.content, response.headers, url)

    async def aclose(self) -> None:
        """Закрыть клиент и освободить ресурсы."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
