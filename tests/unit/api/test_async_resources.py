"""
Tests for the non-blocking facades and AsyncChatRoutesClient using respx mocks.
"""

import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
import respx

from chatroutes.async_client import AsyncChatRoutesClient
from chatroutes.core.exceptions import ChatRoutesError, ErrorKind

BASE_URL = "https://api.chatroutes.test"
USER = {"id": "u1", "email": "ada@example.com"}
TOKENS = {"accessToken": "at-1", "refreshToken": "rt-1", "expiresIn": 3600}
CONVERSATION = {"id": "c1", "title": "Trip planning"}
BRANCH = {"id": "b1", "conversationId": "c1", "title": "Alt"}
MESSAGE = {"id": "m2", "role": "assistant", "content": "Hello!"}
USAGE = {"promptTokens": 10, "completionTokens": 5, "totalTokens": 15}


def ok(data=None):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    return body


def sse(*lines: str) -> bytes:
    return "".join(f"{line}\n" for line in lines).encode("utf-8")


def make_client(async_sleep):
    return AsyncChatRoutesClient(api_key="cr_test_key_123456", base_url=BASE_URL,
                                 async_sleep=async_sleep)


class TestAsyncAuthAPI:

    @respx.mock
    @pytest.mark.asyncio
    async def test_login_skips_auth(self, async_sleep):
        route = respx.post(f"{BASE_URL}/api/v1/auth/login").mock(
            return_value=httpx.Response(200, json=ok({"user": USER, "tokens": TOKENS}))
        )

        async with make_client(async_sleep) as client:
            result = await client.auth.login("ada@example.com", "s3cret-pass")

        assert result.user.id == "u1"
        assert "Authorization" not in route.calls.last.request.headers

    @respx.mock
    @pytest.mark.asyncio
    async def test_me_and_logout(self, async_sleep):
        respx.get(f"{BASE_URL}/api/v1/auth/me").mock(return_value=httpx.Response(200, json=ok(USER)))
        respx.post(f"{BASE_URL}/api/v1/auth/logout").mock(return_value=httpx.Response(200, json=ok()))

        async with make_client(async_sleep) as client:
            user = await client.auth.me()
            await client.auth.logout()

        assert user.email == "ada@example.com"

    @respx.mock
    @pytest.mark.asyncio
    async def test_refresh_token(self, async_sleep):
        route = respx.post(f"{BASE_URL}/api/v1/auth/refresh").mock(
            return_value=httpx.Response(200, json=ok(TOKENS))
        )

        async with make_client(async_sleep) as client:
            tokens = await client.auth.refresh_token("rt-1")

        assert tokens.refresh_token == "rt-1"
        assert json.loads(route.calls.last.request.content) == {"refreshToken": "rt-1"}


class TestAsyncConversationsAPI:

    @respx.mock
    @pytest.mark.asyncio
    async def test_crud(self, async_sleep):
        respx.post(f"{BASE_URL}/api/v1/conversations").mock(
            return_value=httpx.Response(201, json=ok({"conversation": CONVERSATION}))
        )
        respx.get(f"{BASE_URL}/api/v1/conversations").mock(
            return_value=httpx.Response(200, json=ok({
                "conversations": [CONVERSATION], "total": 1, "page": 1, "limit": 20,
            }))
        )
        patch_route = respx.patch(f"{BASE_URL}/api/v1/conversations/c1").mock(
            return_value=httpx.Response(200, json=ok({"conversation": {**CONVERSATION, "title": "New"}}))
        )
        respx.delete(f"{BASE_URL}/api/v1/conversations/c1").mock(
            return_value=httpx.Response(200, json=ok())
        )

        async with make_client(async_sleep) as client:
            created = await client.conversations.create("Trip planning")
            page = await client.conversations.list()
            updated = await client.conversations.update("c1", title="New")
            await client.conversations.delete("c1")

        assert created.id == "c1"
        assert page.total == 1
        assert updated.title == "New"
        assert json.loads(patch_route.calls.last.request.content) == {"title": "New"}

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_tree(self, async_sleep):
        respx.get(f"{BASE_URL}/api/v1/conversations/c1/tree").mock(
            return_value=httpx.Response(200, json=ok({"conversation": CONVERSATION, "tree": None}))
        )

        async with make_client(async_sleep) as client:
            tree = await client.conversations.get_tree("c1")

        assert tree.conversation.title == "Trip planning"

    @respx.mock
    @pytest.mark.asyncio
    async def test_server_error_retried(self, async_sleep):
        route = respx.get(f"{BASE_URL}/api/v1/conversations/c1").mock(side_effect=[
            httpx.Response(502),
            httpx.Response(200, json=ok({"conversation": CONVERSATION})),
        ])

        async with make_client(async_sleep) as client:
            conversation = await client.conversations.get("c1")

        assert conversation.id == "c1"
        assert route.call_count == 2
        async_sleep.assert_awaited_once_with(1.0)


class TestAsyncMessagesAPI:

    @respx.mock
    @pytest.mark.asyncio
    async def test_send(self, async_sleep):
        respx.post(f"{BASE_URL}/api/v1/conversations/c1/messages").mock(
            return_value=httpx.Response(200, json=ok({"message": MESSAGE, "usage": USAGE, "model": "gpt-5"}))
        )

        async with make_client(async_sleep) as client:
            reply = await client.messages.send("c1", "Hi")

        assert reply.message.content == "Hello!"

    @respx.mock
    @pytest.mark.asyncio
    async def test_send_legacy_shape_keeps_status(self, async_sleep):
        route = respx.post(f"{BASE_URL}/api/v1/conversations/c1/messages").mock(
            return_value=httpx.Response(200, json=ok({"userMessage": {}, "assistantMessage": {}}))
        )

        async with make_client(async_sleep) as client:
            with pytest.raises(ChatRoutesError, match="missing message field") as exc_info:
                await client.messages.send("c1", "Hi")

        assert exc_info.value.http_status == 200
        assert exc_info.value.retryable is False
        assert route.call_count == 1
        async_sleep.assert_not_awaited()

    @respx.mock
    @pytest.mark.asyncio
    async def test_stream_with_async_callbacks(self, async_sleep):
        complete = {"type": "complete", "message": MESSAGE, "usage": USAGE, "model": "gpt-5"}
        respx.post(f"{BASE_URL}/api/v1/conversations/c1/messages/stream").mock(
            return_value=httpx.Response(200, content=sse(
                'data: {"type": "content", "content": "Hello!"}',
                f"data: {json.dumps(complete)}",
                "data: [DONE]",
            ))
        )
        on_chunk = AsyncMock()
        on_complete = Mock()

        async with make_client(async_sleep) as client:
            await client.messages.stream("c1", "Hi", on_chunk=on_chunk, on_complete=on_complete)

        assert on_chunk.await_count == 2
        assert on_chunk.await_args_list[0].args[0].text == "Hello!"
        on_complete.assert_called_once()
        assert on_complete.call_args.args[0].usage.total_tokens == 15

    @respx.mock
    @pytest.mark.asyncio
    async def test_iter_stream(self, async_sleep):
        respx.post(f"{BASE_URL}/api/v1/conversations/c1/messages/stream").mock(
            return_value=httpx.Response(200, content=sse(
                'data: {"type": "content", "content": "A"}',
                'data: {"type": "content", "content": "B"}',
            ))
        )

        async with make_client(async_sleep) as client:
            text = "".join([chunk.text async for chunk in client.messages.iter_stream("c1", "Hi")])

        assert text == "AB"

    @respx.mock
    @pytest.mark.asyncio
    async def test_stream_rate_limited(self, async_sleep):
        route = respx.post(f"{BASE_URL}/api/v1/conversations/c1/messages/stream").mock(
            return_value=httpx.Response(429, json={"retryAfter": 30}),
        )
        on_chunk = Mock()

        async with make_client(async_sleep) as client:
            with pytest.raises(ChatRoutesError) as exc_info:
                await client.messages.stream("c1", "Hi", on_chunk=on_chunk)

        assert exc_info.value.kind is ErrorKind.RATE_LIMIT
        assert exc_info.value.retry_after == 30.0
        assert route.call_count == 1
        on_chunk.assert_not_called()

    @respx.mock
    @pytest.mark.asyncio
    async def test_list_update_delete(self, async_sleep):
        list_route = respx.get(f"{BASE_URL}/api/v1/conversations/c1/messages").mock(
            return_value=httpx.Response(200, json=ok({"messages": [MESSAGE]}))
        )
        respx.patch(f"{BASE_URL}/api/v1/messages/m2").mock(
            return_value=httpx.Response(200, json=ok({"message": {**MESSAGE, "content": "Edited"}}))
        )
        respx.delete(f"{BASE_URL}/api/v1/messages/m2").mock(return_value=httpx.Response(200, json=ok()))

        async with make_client(async_sleep) as client:
            messages = await client.messages.list("c1", branch_id="b1")
            edited = await client.messages.update("m2", "Edited")
            await client.messages.delete("m2")

        assert messages[0].id == "m2"
        assert list_route.calls.last.request.url.params["branchId"] == "b1"
        assert edited.content == "Edited"


class TestAsyncBranchesAPI:

    @respx.mock
    @pytest.mark.asyncio
    async def test_branch_lifecycle(self, async_sleep):
        respx.get(f"{BASE_URL}/api/v1/conversations/c1/branches").mock(
            return_value=httpx.Response(200, json=ok({"branches": [BRANCH]}))
        )
        respx.post(f"{BASE_URL}/api/v1/conversations/c1/branches").mock(
            return_value=httpx.Response(200, json=ok({"branch": BRANCH}))
        )
        fork_route = respx.post(f"{BASE_URL}/api/v1/conversations/c1/fork").mock(
            return_value=httpx.Response(200, json=ok({"branch": BRANCH}))
        )
        respx.patch(f"{BASE_URL}/api/v1/conversations/c1/branches/b1").mock(
            return_value=httpx.Response(200, json=ok({"branch": {**BRANCH, "title": "Renamed"}}))
        )
        respx.delete(f"{BASE_URL}/api/v1/conversations/c1/branches/b1").mock(
            return_value=httpx.Response(200, json=ok())
        )
        respx.get(f"{BASE_URL}/api/v1/conversations/c1/branches/b1/messages").mock(
            return_value=httpx.Response(200, json=ok({"messages": [MESSAGE]}))
        )

        async with make_client(async_sleep) as client:
            branches = await client.branches.list("c1")
            created = await client.branches.create("c1", "Alt")
            forked = await client.branches.fork("c1", "m2", "Alt", context_mode="FULL")
            renamed = await client.branches.update("c1", "b1", title="Renamed")
            await client.branches.delete("c1", "b1")
            messages = await client.branches.get_messages("c1", "b1")

        assert branches[0].id == created.id == forked.id == "b1"
        assert renamed.title == "Renamed"
        assert messages[0].content == "Hello!"
        assert json.loads(fork_route.calls.last.request.content) == {
            "forkPointMessageId": "m2", "title": "Alt", "contextMode": "FULL",
        }


class TestAsyncChatRoutesClient:

    @pytest.mark.asyncio
    async def test_close_releases_http_client(self, async_sleep):
        client = make_client(async_sleep)
        http_client = await client.executor.get_client()
        await client.close()
        assert http_client.is_closed

    @respx.mock
    @pytest.mark.asyncio
    async def test_low_level_helpers(self, async_sleep):
        route = respx.post(f"{BASE_URL}/api/v1/custom").mock(
            return_value=httpx.Response(200, json=ok({"x": 1}))
        )

        async with make_client(async_sleep) as client:
            envelope = await client.post("/api/v1/custom", {"a": 1}, headers={"X-Trace": "t"})

        assert envelope.data == {"x": 1}
        assert route.calls.last.request.headers["X-Trace"] == "t"
