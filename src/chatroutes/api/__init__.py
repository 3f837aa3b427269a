"""Resource facades of the ChatRoutes API."""

from .auth import AuthAPI, AsyncAuthAPI
from .conversations import ConversationsAPI, AsyncConversationsAPI
from .messages import MessagesAPI, AsyncMessagesAPI
from .branches import BranchesAPI, AsyncBranchesAPI

__all__ = [
    "AuthAPI",
    "AsyncAuthAPI",
    "ConversationsAPI",
    "AsyncConversationsAPI",
    "MessagesAPI",
    "AsyncMessagesAPI",
    "BranchesAPI",
    "AsyncBranchesAPI",
]
