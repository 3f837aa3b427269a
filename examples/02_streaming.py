"""
Streaming Examples

Demonstrates the push API (callbacks), the pull API (iterator) and the
asyncio client.
"""

import asyncio
import os

from chatroutes import AsyncChatRoutesClient, ChatRoutesClient


def stream_with_callbacks():
    print("\n=== Stream with callbacks ===")

    with ChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"]) as client:
        conversation = client.conversations.create("Streaming chat")

        client.messages.stream(
            conversation.id,
            "Tell me a short story about a lighthouse",
            on_chunk=lambda chunk: print(chunk.text, end="", flush=True),
            on_complete=lambda response: print(f"\n\nTokens used: {response.usage.total_tokens}"),
        )


def stream_with_iterator():
    print("\n=== Stream as iterator ===")

    with ChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"]) as client:
        conversation = client.conversations.create("Iterator chat")

        for chunk in client.messages.iter_stream(conversation.id, "Count to five"):
            print(chunk.text, end="", flush=True)
        print()


async def stream_async():
    print("\n=== Async stream ===")

    async with AsyncChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"]) as client:
        conversation = await client.conversations.create("Async chat")

        async for chunk in client.messages.iter_stream(conversation.id, "Name three rivers"):
            print(chunk.text, end="", flush=True)
        print()


if __name__ == "__main__":
    stream_with_callbacks()
    stream_with_iterator()
    asyncio.run(stream_async())
