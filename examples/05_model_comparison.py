"""
Model Comparison Example

Sends the same prompt to two models, the second one on a forked branch, and
prints the replies side by side with token usage.
"""

import os

from chatroutes import ChatRoutesClient

PROMPT = "Explain the concept of recursion in one sentence."
MODELS = ["gpt-5", "claude-opus-4-1"]


def print_reply(reply):
    print(reply.message.content)
    print(f"Tokens: {reply.usage.total_tokens}")
    print(f"Model: {reply.model}\n")


def compare_models():
    print(f"\n=== Comparing {' vs '.join(MODELS)} ===")
    print(f"Prompt: {PROMPT}\n")

    with ChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"]) as client:
        conversation = client.conversations.create("Model comparison", model=MODELS[0])
        try:
            print(f"--- {MODELS[0]} ---")
            first = client.messages.send(conversation.id, PROMPT, model=MODELS[0], temperature=0.7)
            print_reply(first)

            branch = client.branches.fork(
                conversation.id,
                fork_point_message_id=first.message.id,
                title=f"{MODELS[1]} response",
                context_mode="FULL",
            )

            print(f"--- {MODELS[1]} ---")
            second = client.messages.send(
                conversation.id, PROMPT, model=MODELS[1], temperature=0.7, branch_id=branch.id,
            )
            print_reply(second)
        finally:
            client.conversations.delete(conversation.id)

    print("Comparison complete")


if __name__ == "__main__":
    compare_models()
