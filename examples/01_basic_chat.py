"""
Basic ChatRoutes Usage Examples

Demonstrates creating a conversation, sending a message and reading history.

Requires CHATROUTES_API_KEY in the environment.
"""

import os

from chatroutes import ChatRoutesClient, ChatRoutesError


def create_and_send():
    """Create a conversation and send one message."""
    print("\n=== Create conversation and send ===")

    with ChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"]) as client:
        conversation = client.conversations.create("Basic chat", model="gpt-5")
        print(f"Conversation: {conversation.id}")

        reply = client.messages.send(conversation.id, "What is the capital of Portugal?")
        print(f"Assistant: {reply.message.content}")
        print(f"Tokens used: {reply.usage.total_tokens}")

        for message in client.messages.list(conversation.id):
            print(f"  [{message.role}] {message.content[:60]}")


def list_conversations():
    """Paginated conversation list."""
    print("\n=== List conversations ===")

    with ChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"]) as client:
        page = client.conversations.list(page=1, limit=10)
        print(f"Total: {page.total}, has next page: {page.has_next}")
        for conversation in page.data:
            print(f"  - {conversation.title}")


def handle_errors():
    """Errors carry a kind, HTTP status and retry hint."""
    print("\n=== Error handling ===")

    with ChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"], retry_attempts=1) as client:
        try:
            client.conversations.get("does-not-exist")
        except ChatRoutesError as e:
            print(f"{e.kind.value}: {e.message} (HTTP {e.http_status})")
            if e.retry_after:
                print(f"Retry after {e.retry_after}s")


if __name__ == "__main__":
    create_and_send()
    list_conversations()
    handle_errors()
