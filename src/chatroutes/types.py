"""
Domain models of the ChatRoutes API.

Field names are snake_case in Python and camelCase on the wire; unknown
fields sent by the server are kept (``extra="allow"``) so newer API versions
do not break parsing.
"""

from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

ContextMode = Literal["FULL", "PARTIAL", "MINIMAL"]
ConversationFilter = Literal["all", "owned", "shared"]


class ApiModel(BaseModel):
    """Base for payloads received from the server."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class RequestModel(BaseModel):
    """Base for request bodies; ``to_body()`` renders the wire JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# AUTH
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class User(ApiModel):
    id: str
    email: str
    name: Optional[str] = None
    plan: Optional[str] = None
    created_at: Optional[str] = None


class AuthTokens(ApiModel):
    access_token: str
    refresh_token: str
    expires_in: int


class AuthResult(ApiModel):
    """Payload of register and login."""
    user: User
    tokens: AuthTokens


class RegisterRequest(RequestModel):
    email: str
    password: str
    name: Optional[str] = None


class LoginRequest(RequestModel):
    email: str
    password: str

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MESSAGES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class MessageMetadata(ApiModel):
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    response_time: Optional[float] = None
    finish_reason: Optional[str] = None
    cost: Optional[float] = None


class Message(ApiModel):
    id: str
    role: str  # "user" | "assistant" | "system"
    content: str
    conversation_id: Optional[str] = None
    branch_id: Optional[str] = None
    token_count: Optional[int] = None
    created_at: Optional[str] = None
    metadata: Optional[MessageMetadata] = None


class Usage(ApiModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class SendMessageResponse(ApiModel):
    """
    Result of sending a message: the assistant reply, token usage and the
    model that produced it.

    Older servers answered with ``{userMessage, assistantMessage}`` instead;
    that shape is not accepted.
    """
    message: Message
    usage: Usage
    model: str


class StreamChunk(ApiModel):
    """
    One event of the message stream.

    ``type`` is ``"content"`` for a text delta (``content``) and
    ``"complete"`` for the final event carrying ``message``, ``usage`` and
    ``model``. Legacy servers sent OpenAI-style ``choices[].delta`` chunks;
    ``text`` understands both.
    """
    type: Optional[str] = None
    content: Optional[str] = None
    message: Optional[Message] = None
    usage: Optional[Usage] = None
    model: Optional[str] = None
    id: Optional[str] = None
    choices: Optional[List[Dict[str, Any]]] = None

    @property
    def text(self) -> str:
        """Text delta carried by this chunk ("" if none)."""
        if self.content:
            return self.content
        if self.choices:
            delta = self.choices[0].get("delta") or {}
            return delta.get("content") or ""
        return ""

    @property
    def is_complete(self) -> bool:
        return (
            self.type == "complete"
            and self.message is not None
            and self.usage is not None
            and self.model is not None
        )

    def to_response(self) -> SendMessageResponse:
        """SendMessageResponse from a complete chunk."""
        return SendMessageResponse(message=self.message, usage=self.usage, model=self.model)


class SendMessageRequest(RequestModel):
    content: str
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    branch_id: Optional[str] = None

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BRANCHES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Branch(ApiModel):
    id: str
    conversation_id: str
    title: str
    parent_branch_id: Optional[str] = None
    fork_point_message_id: Optional[str] = None
    context_mode: Optional[ContextMode] = None
    is_main: bool = False
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    message_count: Optional[int] = None


class CreateBranchRequest(RequestModel):
    title: str
    base_node_id: Optional[str] = None
    description: Optional[str] = None
    context_mode: Optional[ContextMode] = None


class ForkConversationRequest(RequestModel):
    fork_point_message_id: str
    title: str
    context_mode: Optional[ContextMode] = None

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CONVERSATIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Conversation(ApiModel):
    id: str
    title: str
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    messages: Optional[List[Message]] = None
    branches: Optional[List[Branch]] = None


class CreateConversationRequest(RequestModel):
    title: str
    model: Optional[str] = None


class ListConversationsParams(RequestModel):
    page: Optional[int] = None
    limit: Optional[int] = None
    filter: Optional[ConversationFilter] = None


class TreeNode(ApiModel):
    id: str
    content: str
    role: str
    children: List["TreeNode"] = []
    branch_info: Optional[Dict[str, Any]] = None


class TreeMetadata(ApiModel):
    total_nodes: int
    total_branches: int
    max_depth: int


class ConversationTree(ApiModel):
    conversation: Conversation
    tree: Optional[TreeNode] = None
    metadata: Optional[TreeMetadata] = None


class PaginatedResponse(ApiModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int
    has_next: Optional[bool] = None
