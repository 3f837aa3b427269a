"""Branch endpoints: list, create, fork, update, delete, branch messages."""

from typing import Any, List, Optional

from ..types import Branch, ContextMode, CreateBranchRequest, ForkConversationRequest, Message
from ._base import AsyncResourceAPI, ResourceAPI, as_field, as_list, camelize

_branch = as_field("branch", Branch)


def _branches_path(conversation_id: str) -> str:
    return f"/api/v1/conversations/{conversation_id}/branches"


def _branch_path(conversation_id: str, branch_id: str) -> str:
    return f"{_branches_path(conversation_id)}/{branch_id}"


def _fork_path(conversation_id: str) -> str:
    return f"/api/v1/conversations/{conversation_id}/fork"


def _create_body(title: str, base_node_id: Optional[str], description: Optional[str],
                 context_mode: Optional[ContextMode]) -> dict:
    return CreateBranchRequest(
        title=title,
        base_node_id=base_node_id,
        description=description,
        context_mode=context_mode,
    ).to_body()


def _fork_body(fork_point_message_id: str, title: str,
               context_mode: Optional[ContextMode]) -> dict:
    return ForkConversationRequest(
        fork_point_message_id=fork_point_message_id,
        title=title,
        context_mode=context_mode,
    ).to_body()


class BranchesAPI(ResourceAPI):
    """
    Example:
        >>> branch = client.branches.fork(
        ...     conversation.id,
        ...     fork_point_message_id=reply.message.id,
        ...     title="Shorter answer",
        ... )
    """

    def list(self, conversation_id: str) -> List[Branch]:
        return self._call("GET", _branches_path(conversation_id), "Failed to list branches",
                          parser=as_list("branches", Branch))

    def create(
        self,
        conversation_id: str,
        title: str,
        base_node_id: Optional[str] = None,
        description: Optional[str] = None,
        context_mode: Optional[ContextMode] = None,
    ) -> Branch:
        body = _create_body(title, base_node_id, description, context_mode)
        return self._call("POST", _branches_path(conversation_id), "Failed to create branch", body,
                          parser=_branch)

    def fork(
        self,
        conversation_id: str,
        fork_point_message_id: str,
        title: str,
        context_mode: Optional[ContextMode] = None,
    ) -> Branch:
        body = _fork_body(fork_point_message_id, title, context_mode)
        return self._call("POST", _fork_path(conversation_id), "Failed to fork conversation", body,
                          parser=_branch)

    def update(self, conversation_id: str, branch_id: str, **fields: Any) -> Branch:
        return self._call(
            "PATCH", _branch_path(conversation_id, branch_id),
            "Failed to update branch", camelize(fields), parser=_branch,
        )

    def delete(self, conversation_id: str, branch_id: str) -> None:
        self._call_no_content("DELETE", _branch_path(conversation_id, branch_id),
                              "Failed to delete branch")

    def get_messages(self, conversation_id: str, branch_id: str) -> List[Message]:
        return self._call("GET", f"{_branch_path(conversation_id, branch_id)}/messages",
                          "Failed to get branch messages", parser=as_list("messages", Message))


class AsyncBranchesAPI(AsyncResourceAPI):

    async def list(self, conversation_id: str) -> List[Branch]:
        return await self._call("GET", _branches_path(conversation_id), "Failed to list branches",
                                parser=as_list("branches", Branch))

    async def create(
        self,
        conversation_id: str,
        title: str,
        base_node_id: Optional[str] = None,
        description: Optional[str] = None,
        context_mode: Optional[ContextMode] = None,
    ) -> Branch:
        body = _create_body(title, base_node_id, description, context_mode)
        return await self._call("POST", _branches_path(conversation_id), "Failed to create branch",
                                body, parser=_branch)

    async def fork(
        self,
        conversation_id: str,
        fork_point_message_id: str,
        title: str,
        context_mode: Optional[ContextMode] = None,
    ) -> Branch:
        body = _fork_body(fork_point_message_id, title, context_mode)
        return await self._call("POST", _fork_path(conversation_id), "Failed to fork conversation",
                                body, parser=_branch)

    async def update(self, conversation_id: str, branch_id: str, **fields: Any) -> Branch:
        return await self._call(
            "PATCH", _branch_path(conversation_id, branch_id),
            "Failed to update branch", camelize(fields), parser=_branch,
        )

    async def delete(self, conversation_id: str, branch_id: str) -> None:
        await self._call_no_content("DELETE", _branch_path(conversation_id, branch_id),
                                    "Failed to delete branch")

    async def get_messages(self, conversation_id: str, branch_id: str) -> List[Message]:
        return await self._call("GET", f"{_branch_path(conversation_id, branch_id)}/messages",
                                "Failed to get branch messages", parser=as_list("messages", Message))
