# src/chatroutes/core/executor.py
"""
Request executor: one logical call = up to ``retry_attempts + 1`` HTTP attempts.

Терминальные ошибки (4xx) пробрасываются сразу; транзиентные (5xx, сеть)
повторяются с exponential backoff пока есть бюджет.
"""

import json
import time
import uuid
from typing import Any, Dict, Mapping, Optional

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .envelope import ApiResponse
from .exceptions import (
    ChatRoutesError,
    ErrorKind,
    classify,
    classify_requests_exception,
)
from .logging import ChatRoutesLogger, set_correlation_id, clear_correlation_id
from .retry_engine import RetryEngine, SleepFunc
from ..utils.sanitizer import mask_headers

_EMPTY = object()
_INVALID = object()


def _parse_body(content: bytes) -> Any:
    """JSON body, or _EMPTY / _INVALID."""
    if not content or not content.strip():
        return _EMPTY
    try:
        return json.loads(content)
    except ValueError:
        return _INVALID


def create_logger(config: ClientConfig) -> Optional[ChatRoutesLogger]:
    """Per-client logger, or None when logging is not configured."""
    if config.logging is None:
        return None
    return ChatRoutesLogger(config=config.logging, name="chatroutes.client")


class BaseExecutor:
    """
    Transport-independent part of the executor: URL and header building,
    envelope decoding, retry bookkeeping and logging.
    """

    def __init__(self, config: ClientConfig, logger: Optional[ChatRoutesLogger] = None):
        self._config = config
        self._logger = logger

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def logger(self) -> Optional[ChatRoutesLogger]:
        return self._logger

    def build_url(self, path: str) -> str:
        """
        Examples:
            >>> executor.build_url("/api/v1/conversations")
            'https://api.chatroutes.com/api/v1/conversations'
        """
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return f"{self._config.base_url}{path}"

    def build_headers(
        self,
        headers: Optional[Mapping[str, str]] = None,
        skip_auth: bool = False,
        accept: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Headers for one call: JSON content type, caller headers, correlation
        ID and ``Authorization: ApiKey <key>`` unless ``skip_auth``.
        """
        result: Dict[str, str] = {"Content-Type": "application/json"}
        if accept:
            result["Accept"] = accept
        if headers:
            result.update(headers)

        result.setdefault("X-Correlation-ID", str(uuid.uuid4()))

        if not skip_auth and self._config.api_key:
            result["Authorization"] = f"ApiKey {self._config.api_key}"
        return result

    def _envelope_from(
        self,
        status_code: int,
        content: bytes,
        headers: Mapping[str, str],
        url: str,
    ) -> ApiResponse:
        body = _parse_body(content)

        if not 200 <= status_code < 300:
            raise classify(status_code, body if isinstance(body, dict) else None, headers)

        if body is _EMPTY:
            return ApiResponse(success=True, status_code=status_code)

        if not isinstance(body, dict):
            # 2xx без валидного JSON: считаем сбоем доставки и ретраим
            raise ChatRoutesError.network(
                "Invalid JSON in response",
                details={"url": url, "status": status_code},
            )

        try:
            envelope = ApiResponse.model_validate(body)
        except ValidationError as e:
            raise ChatRoutesError(
                ErrorKind.GENERIC,
                "Malformed response envelope",
                http_status=status_code,
                details={"errors": e.errors(include_url=False)},
            ) from e

        envelope.status_code = status_code
        return envelope

    def _give_up(self, error: ChatRoutesError, retry_engine: RetryEngine) -> ChatRoutesError:
        """Error to raise once no further attempt will be made."""
        if error.retryable and error.kind is ErrorKind.NETWORK:
            wrapped = ChatRoutesError.network(
                "Request failed after retries",
                details={
                    "attempts": retry_engine.attempt + 1,
                    "error": error.message,
                    "cause": error.details,
                },
            )
            wrapped.__cause__ = error
            return wrapped
        return error

    # ==================== Logging ====================

    def _log_started(self, method: str, url: str, headers: Dict[str, str], timeout: float) -> None:
        if self._logger:
            set_correlation_id(headers["X-Correlation-ID"])
            self._logger.info(
                "Request started",
                method=method,
                url=url,
                timeout=timeout,
                max_retries=self._config.retry_attempts,
            )
            self._logger.debug("Request headers", headers=mask_headers(headers))

    def _log_completed(self, method: str, url: str, envelope: ApiResponse,
                       attempt: int, start_time: float) -> None:
        if self._logger:
            self._logger.info(
                "Request completed",
                method=method,
                url=url,
                status_code=envelope.status_code,
                duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                attempt=attempt,
            )

    def _log_retry(self, method: str, url: str, error: ChatRoutesError,
                   attempt: int, wait_time: float) -> None:
        if self._logger:
            self._logger.warning(
                "Request error (will retry)",
                method=method,
                url=url,
                error=str(error),
                error_kind=error.kind.value,
                attempt=attempt,
                max_attempts=self._config.max_attempts,
                wait_time_s=round(wait_time, 2),
            )

    def _log_failed(self, method: str, url: str, error: ChatRoutesError,
                    attempt: int, start_time: float) -> None:
        if self._logger:
            self._logger.error(
                "Request failed",
                method=method,
                url=url,
                error=str(error),
                error_kind=error.kind.value,
                http_status=error.http_status,
                attempt=attempt,
                max_attempts=self._config.max_attempts,
                duration_ms=round((time.monotonic() - start_time) * 1000, 2),
            )

    def _log_finished(self) -> None:
        if self._logger:
            clear_correlation_id()


class RequestExecutor(BaseExecutor):
    """
    Blocking executor on top of ``requests.Session``.

    Example:
        >>> executor = RequestExecutor(ClientConfig(api_key="cr_live_xxx"))
        >>> envelope = executor.execute("GET", "/api/v1/auth/me")
        >>> envelope.data["email"]
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
        logger: Optional[ChatRoutesLogger] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Args:
            config: Client configuration
            session: Existing session (the executor does not close it)
            logger: Structured logger (None = no logging)
            sleep: Backoff sleep function, time.sleep by default
        """
        super().__init__(config, logger)
        self._owns_session = session is None
        self._session = session if session is not None else self._create_session()
        self._sleep = sleep

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        # Ретраи делает RetryEngine, не urllib3
        adapter = HTTPAdapter(max_retries=0)
        session.mount('http://', adapter)
        session.mount('https://', adapter)

        if self._config.headers:
            session.headers.update(self._config.headers)
        return session

    @property
    def session(self) -> requests.Session:
        return self._session

    def execute(
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

        Args:
            method: HTTP method
            path: Path relative to base_url (or absolute URL)
            body: JSON body; ignored for GET
            params: Query parameters
            headers: Extra headers
            timeout: Per-attempt deadline, config.timeout by default
            skip_auth: Do not send the Authorization header

        Returns:
            Parsed response envelope

        Raises:
            ChatRoutesError: Terminal failure
        """
        method = method.upper()
        url = self.build_url(path)
        request_headers = self.build_headers(headers, skip_auth=skip_auth)
        deadline = timeout if timeout is not None else self._config.timeout
        payload = body if body is not None and method != "GET" else None

        retry_engine = RetryEngine(self._config, sleep=self._sleep)
        start_time = time.monotonic()
        self._log_started(method, url, request_headers, deadline)

        try:
            while True:
                try:
                    envelope = self._attempt(method, url, payload, params, request_headers, deadline)
                except ChatRoutesError as error:
                    if not retry_engine.should_retry(error):
                        self._log_failed(method, url, error, retry_engine.attempt + 1, start_time)
                        raise self._give_up(error, retry_engine)

                    self._log_retry(method, url, error, retry_engine.attempt + 1,
                                    retry_engine.get_wait_time())
                    retry_engine.wait()
                    retry_engine.increment()
                    continue

                self._log_completed(method, url, envelope, retry_engine.attempt + 1, start_time)
                return envelope
        finally:
            self._log_finished()

    def _attempt(
        self,
        method: str,
        url: str,
        payload: Any,
        params: Optional[Mapping[str, Any]],
        headers: Dict[str, str],
        timeout: float,
    ) -> ApiResponse:
        try:
            response = self._session.request(
                method=method,
                url=url,
                json=payload,
                params=params,
                headers=headers,
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            raise classify_requests_exception(e, url) from e

        return self._envelope_from(response.status_code, response.content, response.headers, url)

    def close(self) -> None:
        """Close the session if this executor created it."""
        if self._owns_session:
            self._session.close()
