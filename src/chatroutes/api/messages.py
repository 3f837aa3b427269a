"""
Message endpoints: send, stream, list, update, delete.

``stream`` delivers typed StreamChunk objects; events that do not fit the
chunk schema are logged and skipped like malformed lines.
"""

import inspect
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterator, List, Optional, Union

from pydantic import ValidationError

from ..core.async_executor import AsyncRequestExecutor
from ..core.executor import RequestExecutor
from ..core.streaming import AsyncStreamReader, StreamReader
from ..types import Message, SendMessageRequest, SendMessageResponse, StreamChunk
from ._base import AsyncResourceAPI, ResourceAPI, as_field, as_list, field, parse

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[StreamChunk], Any]
CompleteCallback = Callable[[SendMessageResponse], Any]
AsyncChunkCallback = Callable[[StreamChunk], Union[Any, Awaitable[Any]]]
AsyncCompleteCallback = Callable[[SendMessageResponse], Union[Any, Awaitable[Any]]]


def _messages_path(conversation_id: str) -> str:
    return f"/api/v1/conversations/{conversation_id}/messages"


def _message_path(message_id: str) -> str:
    return f"/api/v1/messages/{message_id}"


def _send_body(content: str, model: Optional[str], temperature: Optional[float],
               max_tokens: Optional[int], branch_id: Optional[str]) -> Dict[str, Any]:
    return SendMessageRequest(
        content=content,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        branch_id=branch_id,
    ).to_body()


def _send_response(data: Any) -> SendMessageResponse:
    # {userMessage, assistantMessage} от старых серверов сюда не проходит
    field(data, "message")
    return parse(SendMessageResponse, data)


def _to_chunk(event: Dict[str, Any]) -> Optional[StreamChunk]:
    try:
        return StreamChunk.model_validate(event)
    except ValidationError as e:
        logger.warning("Failed to parse stream chunk: %s", e.errors(include_url=False))
        return None


def _list_params(branch_id: Optional[str]) -> Optional[Dict[str, str]]:
    return {"branchId": branch_id} if branch_id else None


class MessagesAPI(ResourceAPI):
    """
    Example:
        >>> reply = client.messages.send(conversation.id, "Hello!", model="gpt-5")
        >>> reply.message.content
        >>> client.messages.stream(
        ...     conversation.id, "Tell me a story",
        ...     on_chunk=lambda chunk: print(chunk.text, end=""),
        ... )
    """

    def __init__(self, executor: RequestExecutor, stream_reader: StreamReader):
        super().__init__(executor)
        self._stream_reader = stream_reader

    def send(
        self,
        conversation_id: str,
        content: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        branch_id: Optional[str] = None,
    ) -> SendMessageResponse:
        body = _send_body(content, model, temperature, max_tokens, branch_id)
        return self._call("POST", _messages_path(conversation_id), "Failed to send message", body,
                          parser=_send_response)

    def iter_stream(
        self,
        conversation_id: str,
        content: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        branch_id: Optional[str] = None,
    ) -> Iterator[StreamChunk]:
        """
        Pull variant of ``stream``: yield chunks as they arrive.

        Close the iterator (or exhaust it) to release the connection.
        """
        body = _send_body(content, model, temperature, max_tokens, branch_id)
        events = self._stream_reader.iter_stream(f"{_messages_path(conversation_id)}/stream", body)
        try:
            for event in events:
                chunk = _to_chunk(event)
                if chunk is not None:
                    yield chunk
        finally:
            events.close()

    def stream(
        self,
        conversation_id: str,
        content: str,
        on_chunk: ChunkCallback,
        on_complete: Optional[CompleteCallback] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        branch_id: Optional[str] = None,
    ) -> None:
        """
        Send a message and receive the reply incrementally.

        ``on_chunk`` gets every chunk in arrival order; ``on_complete`` gets
        the assembled SendMessageResponse once a complete chunk arrives.
        Never retried.

        Raises:
            ChatRoutesError: Non-2xx status (before any callback) or
                transport failure
        """
        body = _send_body(content, model, temperature, max_tokens, branch_id)

        def on_event(event: Dict[str, Any]) -> None:
            chunk = _to_chunk(event)
            if chunk is None:
                return
            on_chunk(chunk)
            if on_complete is not None and chunk.is_complete:
                on_complete(chunk.to_response())

        self._stream_reader.open_stream(f"{_messages_path(conversation_id)}/stream", body, on_event)

    def list(self, conversation_id: str, branch_id: Optional[str] = None) -> List[Message]:
        return self._call("GET", _messages_path(conversation_id), "Failed to list messages",
                          params=_list_params(branch_id), parser=as_list("messages", Message))

    def update(self, message_id: str, content: str) -> Message:
        return self._call("PATCH", _message_path(message_id), "Failed to update message",
                          {"content": content}, parser=as_field("message", Message))

    def delete(self, message_id: str) -> None:
        self._call_no_content("DELETE", _message_path(message_id), "Failed to delete message")


class AsyncMessagesAPI(AsyncResourceAPI):
    """Callbacks of ``stream`` may be plain functions or coroutine functions."""

    def __init__(self, executor: AsyncRequestExecutor, stream_reader: AsyncStreamReader):
        super().__init__(executor)
        self._stream_reader = stream_reader

    async def send(
        self,
        conversation_id: str,
        content: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        branch_id: Optional[str] = None,
    ) -> SendMessageResponse:
        body = _send_body(content, model, temperature, max_tokens, branch_id)
        return await self._call("POST", _messages_path(conversation_id), "Failed to send message",
                                body, parser=_send_response)

    async def iter_stream(
        self,
        conversation_id: str,
        content: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        branch_id: Optional[str] = None,
    ) -> AsyncIterator[StreamChunk]:
        body = _send_body(content, model, temperature, max_tokens, branch_id)
        events = self._stream_reader.iter_stream(f"{_messages_path(conversation_id)}/stream", body)
        try:
            async for event in events:
                chunk = _to_chunk(event)
                if chunk is not None:
                    yield chunk
        finally:
            await events.aclose()

    async def stream(
        self,
        conversation_id: str,
        content: str,
        on_chunk: AsyncChunkCallback,
        on_complete: Optional[AsyncCompleteCallback] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        branch_id: Optional[str] = None,
    ) -> None:
        body = _send_body(content, model, temperature, max_tokens, branch_id)

        async def on_event(event: Dict[str, Any]) -> None:
            chunk = _to_chunk(event)
            if chunk is None:
                return
            await _maybe_await(on_chunk(chunk))
            if on_complete is not None and chunk.is_complete:
                await _maybe_await(on_complete(chunk.to_response()))

        await self._stream_reader.open_stream(f"{_messages_path(conversation_id)}/stream", body, on_event)

    async def list(self, conversation_id: str, branch_id: Optional[str] = None) -> List[Message]:
        return await self._call("GET", _messages_path(conversation_id), "Failed to list messages",
                                params=_list_params(branch_id), parser=as_list("messages", Message))

    async def update(self, message_id: str, content: str) -> Message:
        return await self._call("PATCH", _message_path(message_id), "Failed to update message",
                                {"content": content}, parser=as_field("message", Message))

    async def delete(self, message_id: str) -> None:
        await self._call_no_content("DELETE", _message_path(message_id), "Failed to delete message")


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result
