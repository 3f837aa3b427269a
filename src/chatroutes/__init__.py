"""ChatRoutes API client - conversations, branches and streamed replies."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .client import ChatRoutesClient
from .async_client import AsyncChatRoutesClient
from .core.config import ClientConfig
from .core.envelope import ApiResponse
from .core.exceptions import ChatRoutesError, ErrorKind, classify
from .core.env_config import load_from_env, config_summary, ChatRoutesSettings
from .core.logging import LoggingConfig
from .types import (
    AuthResult,
    AuthTokens,
    Branch,
    Conversation,
    ConversationTree,
    Message,
    PaginatedResponse,
    SendMessageResponse,
    StreamChunk,
    TreeNode,
    Usage,
    User,
)

# NullHandler: без настройки логирования пользователем ничего не пишем
logging.getLogger('chatroutes').addHandler(logging.NullHandler())

try:
    __version__ = version("chatroutes")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Clients
    "ChatRoutesClient",
    "AsyncChatRoutesClient",

    # Config
    "ClientConfig",
    "LoggingConfig",
    "ChatRoutesSettings",
    "load_from_env",
    "config_summary",

    # Errors
    "ChatRoutesError",
    "ErrorKind",
    "classify",

    # Types
    "ApiResponse",
    "AuthResult",
    "AuthTokens",
    "Branch",
    "Conversation",
    "ConversationTree",
    "Message",
    "PaginatedResponse",
    "SendMessageResponse",
    "StreamChunk",
    "TreeNode",
    "Usage",
    "User",
]
