"""
Response envelope: ``{success, data?, error?, message?, details?}``.

Every non-streaming endpoint wraps its payload in this shape.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ChatRoutesError, ErrorKind


class ApiResponse(BaseModel):
    """
    Parsed response envelope.

    ``status_code`` is the HTTP status the envelope arrived with; it is not
    part of the wire format.

    Example:
        >>> envelope = ApiResponse.model_validate({"success": True, "data": {"user": {...}}})
        >>> envelope.unwrap("Failed to get user info")
    """

    model_config = ConfigDict(extra="allow")

    success: bool = False
    data: Any = None
    error: Any = None
    message: Optional[str] = None
    details: Any = None
    status_code: int = Field(default=200, exclude=True)

    def ensure_success(self, default_message: str) -> 'ApiResponse':
        """
        Raise GENERIC ChatRoutesError unless ``success`` is true.

        Used by endpoints that declare no payload (delete, logout).
        """
        if not self.success:
            raise self._failure(default_message)
        return self

    def unwrap(self, default_message: str) -> Any:
        """
        Return ``data``; raise GENERIC ChatRoutesError when the call did not
        succeed or the payload is missing.
        """
        if not self.success or self.data is None:
            raise self._failure(default_message)
        return self.data

    def _failure(self, default_message: str) -> ChatRoutesError:
        return ChatRoutesError(
            ErrorKind.GENERIC,
            message=self.message or default_message,
            http_status=self.status_code,
            code=self.error if isinstance(self.error, str) else None,
            details=self.details,
        )
