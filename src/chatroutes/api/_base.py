"""
Shared plumbing of the resource facades: one executor call per method,
envelope unwrapping and payload parsing into domain models.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from ..core.async_executor import AsyncRequestExecutor
from ..core.envelope import ApiResponse
from ..core.exceptions import ChatRoutesError, ErrorKind
from ..core.executor import RequestExecutor

ModelT = TypeVar("ModelT", bound=BaseModel)
Parser = Callable[[Any], Any]


class InvalidPayload(ValueError):
    """
    ``data`` of a successful envelope does not match the expected shape.

    Raised by the parse helpers; ``_call`` turns it into a GENERIC
    ChatRoutesError carrying the HTTP status the payload arrived with.
    """

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_error(self, http_status: int) -> ChatRoutesError:
        return ChatRoutesError(
            ErrorKind.GENERIC,
            self.message,
            http_status=http_status,
            details=self.details,
        )


def parse(model: Type[ModelT], payload: Any) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidPayload(
            f"Invalid response format: unexpected {model.__name__} payload",
            details={"errors": e.errors(include_url=False)},
        ) from e


def parse_list(model: Type[ModelT], payload: Any) -> List[ModelT]:
    if not isinstance(payload, list):
        raise InvalidPayload(f"Invalid response format: expected a list of {model.__name__}")
    return [parse(model, item) for item in payload]


def field(data: Any, key: str) -> Any:
    """``data[key]``; a missing key raises InvalidPayload."""
    if not isinstance(data, dict) or data.get(key) is None:
        raise InvalidPayload(f"Invalid response format: missing {key} field")
    return data[key]


# ==================== Parser factories ====================

def as_model(model: Type[ModelT]) -> Parser:
    """``data`` itself is the model."""
    return lambda data: parse(model, data)


def as_field(key: str, model: Type[ModelT]) -> Parser:
    """``data[key]`` is the model."""
    return lambda data: parse(model, field(data, key))


def as_list(key: str, model: Type[ModelT]) -> Parser:
    """``data[key]`` is a list of the model."""
    return lambda data: parse_list(model, field(data, key))


def camelize(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Examples:
        >>> camelize({"is_active": False, "title": "Draft"})
        {'isActive': False, 'title': 'Draft'}
    """
    return {to_camel(key): value for key, value in fields.items()}


def _unwrap(envelope: ApiResponse, default_message: str, parser: Optional[Parser]) -> Any:
    data = envelope.unwrap(default_message)
    if parser is None:
        return data
    try:
        return parser(data)
    except InvalidPayload as e:
        raise e.to_error(envelope.status_code) from e


class ResourceAPI:
    """Base of blocking facades."""

    def __init__(self, executor: RequestExecutor):
        self._executor = executor

    def _call(
        self,
        method: str,
        path: str,
        default_message: str,
        body: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        skip_auth: bool = False,
        parser: Optional[Parser] = None,
    ) -> Any:
        envelope = self._executor.execute(method, path, body, params=params, skip_auth=skip_auth)
        return _unwrap(envelope, default_message, parser)

    def _call_no_content(self, method: str, path: str, default_message: str) -> None:
        self._executor.execute(method, path).ensure_success(default_message)


class AsyncResourceAPI:
    """Base of non-blocking facades."""

    def __init__(self, executor: AsyncRequestExecutor):
        self._executor = executor

    async def _call(
        self,
        method: str,
        path: str,
        default_message: str,
        body: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        skip_auth: bool = False,
        parser: Optional[Parser] = None,
    ) -> Any:
        envelope = await self._executor.execute(method, path, body, params=params, skip_auth=skip_auth)
        return _unwrap(envelope, default_message, parser)

    async def _call_no_content(self, method: str, path: str, default_message: str) -> None:
        envelope = await self._executor.execute(method, path)
        envelope.ensure_success(default_message)
