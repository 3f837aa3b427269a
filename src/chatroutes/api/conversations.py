"""Conversation endpoints."""

from typing import Any, Optional

from ..types import (
    Conversation,
    ConversationFilter,
    ConversationTree,
    CreateConversationRequest,
    ListConversationsParams,
    PaginatedResponse,
)
from ._base import AsyncResourceAPI, ResourceAPI, as_field, as_model, camelize, field, parse_list

CONVERSATIONS_PATH = "/api/v1/conversations"

_conversation = as_field("conversation", Conversation)


def _conversation_path(conversation_id: str) -> str:
    return f"{CONVERSATIONS_PATH}/{conversation_id}"


def _page(data: Any) -> PaginatedResponse[Conversation]:
    """Server returns ``{conversations, total, page, limit}``."""
    return PaginatedResponse[Conversation](
        data=parse_list(Conversation, field(data, "conversations")),
        total=data.get("total", 0),
        page=data.get("page", 1),
        limit=data.get("limit", 0),
        has_next=data.get("hasNext"),
    )


class ConversationsAPI(ResourceAPI):
    """
    Example:
        >>> conversation = client.conversations.create("Trip planning", model="gpt-5")
        >>> client.conversations.update(conversation.id, title="Trip to Lisbon")
    """

    def create(self, title: str, model: Optional[str] = None) -> Conversation:
        body = CreateConversationRequest(title=title, model=model).to_body()
        return self._call("POST", CONVERSATIONS_PATH, "Failed to create conversation", body,
                          parser=_conversation)

    def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        filter: Optional[ConversationFilter] = None,
    ) -> PaginatedResponse[Conversation]:
        params = ListConversationsParams(page=page, limit=limit, filter=filter).to_body()
        return self._call("GET", CONVERSATIONS_PATH, "Failed to list conversations",
                          params=params, parser=_page)

    def get(self, conversation_id: str) -> Conversation:
        return self._call("GET", _conversation_path(conversation_id), "Failed to get conversation",
                          parser=_conversation)

    def update(self, conversation_id: str, **fields: Any) -> Conversation:
        return self._call(
            "PATCH", _conversation_path(conversation_id),
            "Failed to update conversation", camelize(fields), parser=_conversation,
        )

    def delete(self, conversation_id: str) -> None:
        self._call_no_content("DELETE", _conversation_path(conversation_id),
                              "Failed to delete conversation")

    def get_tree(self, conversation_id: str) -> ConversationTree:
        return self._call("GET", f"{_conversation_path(conversation_id)}/tree",
                          "Failed to get conversation tree", parser=as_model(ConversationTree))


class AsyncConversationsAPI(AsyncResourceAPI):

    async def create(self, title: str, model: Optional[str] = None) -> Conversation:
        body = CreateConversationRequest(title=title, model=model).to_body()
        return await self._call("POST", CONVERSATIONS_PATH, "Failed to create conversation", body,
                                parser=_conversation)

    async def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        filter: Optional[ConversationFilter] = None,
    ) -> PaginatedResponse[Conversation]:
        params = ListConversationsParams(page=page, limit=limit, filter=filter).to_body()
        return await self._call("GET", CONVERSATIONS_PATH, "Failed to list conversations",
                                params=params, parser=_page)

    async def get(self, conversation_id: str) -> Conversation:
        return await self._call("GET", _conversation_path(conversation_id),
                                "Failed to get conversation", parser=_conversation)

    async def update(self, conversation_id: str, **fields: Any) -> Conversation:
        return await self._call(
            "PATCH", _conversation_path(conversation_id),
            "Failed to update conversation", camelize(fields), parser=_conversation,
        )

    async def delete(self, conversation_id: str) -> None:
        await self._call_no_content("DELETE", _conversation_path(conversation_id),
                                    "Failed to delete conversation")

    async def get_tree(self, conversation_id: str) -> ConversationTree:
        return await self._call("GET", f"{_conversation_path(conversation_id)}/tree",
                                "Failed to get conversation tree", parser=as_model(ConversationTree))
