"""
Классификация ошибок ChatRoutes.

Одно исключение ChatRoutesError, помеченное одним ErrorKind:
- VALIDATION, AUTHENTICATION, NOT_FOUND, RATE_LIMIT - ошибки клиента, НЕ ретраить
- NETWORK - ответа нет (таймаут, отказ соединения), всегда retryable
- GENERIC - любой другой статус; retryable только при status >= 500
"""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import httpx
import requests

logger = logging.getLogger(__name__)

NETWORK_STATUS = 0

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# KINDS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ErrorKind(str, Enum):
    """Fixed taxonomy of classified failures."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    GENERIC = "generic"


DEFAULT_MESSAGES = {
    ErrorKind.VALIDATION: "Validation failed",
    ErrorKind.AUTHENTICATION: "Authentication failed",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.RATE_LIMIT: "Rate limit exceeded",
    ErrorKind.NETWORK: "Network request failed",
    ErrorKind.GENERIC: "An error occurred",
}

DEFAULT_CODES = {
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.AUTHENTICATION: "AUTHENTICATION_ERROR",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.RATE_LIMIT: "RATE_LIMIT_EXCEEDED",
    ErrorKind.NETWORK: "NETWORK_ERROR",
}

_STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHENTICATION,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMIT,
}

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ERROR
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ChatRoutesError(Exception):
    """
    Classified ChatRoutes failure.

    Callers branch on ``kind``; the remaining attributes carry context.
    All attributes are read-only.

    Args:
        kind: ErrorKind
        message: Human-readable message (per-kind default if omitted)
        http_status: HTTP status, 0 for transport failures
        code: Stable error code (per-kind default if omitted)
        details: Extra payload from the server or the transport
        retry_after: Seconds to wait, RATE_LIMIT only

    Examples:
        >>> try:
        ...     client.conversations.get("missing")
        ... except ChatRoutesError as e:
        ...     if e.kind is ErrorKind.NOT_FOUND:
        ...         ...
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        http_status: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
        retry_after: Optional[float] = None,
    ):
        self._kind = ErrorKind(kind)
        self._message = message or DEFAULT_MESSAGES[self._kind]
        if http_status is None:
            http_status = NETWORK_STATUS if self._kind is ErrorKind.NETWORK else 500
        self._http_status = http_status
        self._code = code or DEFAULT_CODES.get(self._kind) or f"HTTP_{http_status}"
        self._details = details
        self._retry_after = retry_after
        super().__init__(self._message)

    @classmethod
    def network(cls, message: Optional[str] = None, details: Any = None) -> 'ChatRoutesError':
        """NETWORK error (status 0)."""
        return cls(ErrorKind.NETWORK, message, http_status=NETWORK_STATUS, details=details)

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def http_status(self) -> int:
        return self._http_status

    @property
    def code(self) -> str:
        return self._code

    @property
    def details(self) -> Any:
        return self._details

    @property
    def retry_after(self) -> Optional[float]:
        return self._retry_after

    @property
    def retryable(self) -> bool:
        """Transient failure: network or server-side (>= 500)."""
        if self._kind is ErrorKind.NETWORK:
            return True
        return self._kind is ErrorKind.GENERIC and self._http_status >= 500

    @property
    def fatal(self) -> bool:
        return not self.retryable

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for logging and serialization."""
        return {
            "kind": self._kind.value,
            "http_status": self._http_status,
            "code": self._code,
            "message": self._message,
            "details": self._details,
            "retry_after": self._retry_after,
        }

    def __str__(self) -> str:
        return f"[{self._code}] {self._message} (HTTP {self._http_status})"

    def __repr__(self) -> str:
        return (
            f"ChatRoutesError(kind={self._kind.value!r}, http_status={self._http_status}, "
            f"code={self._code!r}, message={self._message!r})"
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLASSIFICATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def classify(
    http_status: int,
    body: Any,
    headers: Optional[Mapping[str, str]] = None,
) -> ChatRoutesError:
    """
    Классифицировать HTTP ответ (или его отсутствие) в ChatRoutesError.

    Args:
        http_status: HTTP статус (0 = ответа нет)
        body: Распарсенное JSON тело (dict) или None
        headers: Заголовки ответа (для Retry-After)

    Examples:
        >>> classify(404, {"message": "Conversation not found"}).kind
        <ErrorKind.NOT_FOUND: 'not_found'>
        >>> classify(503, None).retryable
        True
    """
    data = body if isinstance(body, dict) else {}
    message = next(
        (data[key] for key in ('message', 'error') if isinstance(data.get(key), str) and data[key]),
        None,
    )
    details = data.get('details')

    if http_status == NETWORK_STATUS:
        return ChatRoutesError.network(message, details=details)

    kind = _STATUS_KINDS.get(http_status, ErrorKind.GENERIC)

    if kind is ErrorKind.RATE_LIMIT:
        retry_after = _coerce_seconds(data.get('retryAfter'))
        if retry_after is None and headers is not None:
            retry_after = parse_retry_after(headers.get('Retry-After'))
        return ChatRoutesError(kind, message, http_status, details=details, retry_after=retry_after)

    if kind is ErrorKind.GENERIC:
        code = data.get('error') if isinstance(data.get('error'), str) else None
        return ChatRoutesError(kind, message, http_status, code=code, details=details)

    return ChatRoutesError(kind, message, http_status, details=details)


def classify_requests_exception(exc: Exception, url: str) -> ChatRoutesError:
    """
    Конвертировать транспортную ошибку requests в NETWORK.

    Examples:
        >>> err = classify_requests_exception(requests.exceptions.Timeout(), "https://api.chatroutes.com")
        >>> err.kind, err.retryable
        (<ErrorKind.NETWORK: 'network'>, True)
    """
    if isinstance(exc, requests.exceptions.Timeout):
        message = "Request timeout"
    elif isinstance(exc, requests.exceptions.ConnectionError):
        message = "Connection error"
    elif isinstance(exc, requests.exceptions.ChunkedEncodingError):
        message = "Connection interrupted"
    else:
        message = DEFAULT_MESSAGES[ErrorKind.NETWORK]

    return ChatRoutesError.network(message, details=_transport_details(
        exc, url, isinstance(exc, requests.exceptions.Timeout)
    ))


def classify_httpx_exception(exc: Exception, url: str) -> ChatRoutesError:
    """Конвертировать транспортную ошибку httpx в NETWORK."""
    if isinstance(exc, httpx.TimeoutException):
        message = "Request timeout"
    elif isinstance(exc, httpx.ConnectError):
        message = "Connection error"
    elif isinstance(exc, (httpx.RemoteProtocolError, httpx.ReadError)):
        message = "Connection interrupted"
    else:
        message = DEFAULT_MESSAGES[ErrorKind.NETWORK]

    return ChatRoutesError.network(message, details=_transport_details(
        exc, url, isinstance(exc, httpx.TimeoutException)
    ))


def _transport_details(exc: Exception, url: str, timeout: bool) -> Dict[str, Any]:
    return {
        "url": url,
        "error": str(exc) or type(exc).__name__,
        "timeout": timeout,
    }

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RETRY-AFTER
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_MAX_RETRY_AFTER_HEADER = 100
_MAX_RETRY_AFTER_SECONDS = 86400 * 365


def _coerce_seconds(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if seconds < 0 or seconds > _MAX_RETRY_AFTER_SECONDS:
        return None
    return seconds


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Распарсить Retry-After (секунды или HTTP-date).

    Слишком длинные и вне разумного диапазона значения игнорируются.

    Examples:
        >>> parse_retry_after("60")
        60.0
        >>> parse_retry_after("soon") is None
        True
    """
    if not value:
        return None

    if len(value) > _MAX_RETRY_AFTER_HEADER:
        logger.warning(
            "Retry-After header too long (%d chars), ignoring", len(value)
        )
        return None

    seconds = _coerce_seconds(value)
    if seconds is not None:
        return seconds

    try:
        retry_date = parsedate_to_datetime(value)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug("Failed to parse Retry-After header %r: %s", value, e)
        return None

    if retry_date.tzinfo is None:
        retry_date = retry_date.replace(tzinfo=timezone.utc)
    delta = (retry_date - datetime.now(timezone.utc)).total_seconds()
    return max(0.0, delta)
