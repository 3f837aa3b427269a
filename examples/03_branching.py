"""
Branching Example

Fork a conversation at an assistant reply and continue on the new branch.
"""

import os

from chatroutes import ChatRoutesClient


def main():
    with ChatRoutesClient(api_key=os.environ["CHATROUTES_API_KEY"]) as client:
        conversation = client.conversations.create("Branching example", model="gpt-5")
        reply = client.messages.send(conversation.id, "What are the benefits of static typing?")

        branch = client.branches.fork(
            conversation.id,
            fork_point_message_id=reply.message.id,
            title="Alternative discussion",
            context_mode="FULL",
        )
        print(f"Created branch: {branch.id}")

        for b in client.branches.list(conversation.id):
            kind = "Main" if b.is_main else "Branch"
            print(f"  - {b.title} ({kind}) - {b.message_count or 0} messages")

        client.messages.send(conversation.id, "Now explain the disadvantages", branch_id=branch.id)

        tree = client.conversations.get_tree(conversation.id)
        print(f"Conversation: {tree.conversation.title}")
        if tree.metadata:
            print(f"Total branches: {tree.metadata.total_branches}")


if __name__ == "__main__":
    main()
