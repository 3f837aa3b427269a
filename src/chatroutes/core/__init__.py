"""Core ChatRoutes модули: конфигурация, ошибки, executor, стриминг."""

from .config import ClientConfig
from .retry_engine import RetryEngine
from .exceptions import (
    ChatRoutesError,
    ErrorKind,
    classify,
    classify_requests_exception,
    classify_httpx_exception,
    parse_retry_after,
)
from .envelope import ApiResponse
from .executor import RequestExecutor
from .async_executor import AsyncRequestExecutor
from .streaming import (
    StreamDecoder,
    StreamReader,
    AsyncStreamReader,
    StreamState,
    EVENT_PREFIX,
    DONE_SENTINEL,
)

__all__ = [
    # Config
    "ClientConfig",
    # Retry
    "RetryEngine",
    # Errors
    "ChatRoutesError",
    "ErrorKind",
    "classify",
    "classify_requests_exception",
    "classify_httpx_exception",
    "parse_retry_after",
    # Transport
    "ApiResponse",
    "RequestExecutor",
    "AsyncRequestExecutor",
    # Streaming
    "StreamDecoder",
    "StreamReader",
    "AsyncStreamReader",
    "StreamState",
    "EVENT_PREFIX",
    "DONE_SENTINEL",
]
