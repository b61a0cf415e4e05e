"""In-process implementation of BackingAdapter."""

import time
from uuid import uuid4

from forgechat.conversation.adapter import BackingAdapter
from forgechat.conversation.errors import NotFoundError
from forgechat.conversation.models import Conversation, Message, Role, utc_now


def generate_id(prefix: str) -> str:
    """Build a process-unique identifier from the clock and a random token."""
    return f"{prefix}-{time.time_ns()}-{uuid4().hex[:8]}"


class EphemeralAdapter(BackingAdapter):
    """In-memory BackingAdapter for signed-out or offline use.

    Uses simple dict storage; nothing survives the process. Calls never
    suspend on I/O and only fail for unknown conversation ids.
    """

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}

    async def list(self) -> list[Conversation]:
        """List every conversation, most recently created first.

        Conversations created within the same clock tick keep reverse
        creation order.
        """
        return sorted(
            reversed(list(self._conversations.values())),
            key=lambda c: c.created_at,
            reverse=True,
        )

    async def create(self, title: str) -> Conversation:
        conversation = Conversation(
            id=generate_id("conv"),
            title=title,
            created_at=utc_now(),
        )
        self._conversations[conversation.id] = conversation
        return conversation

    async def append(
        self,
        conversation_id: str,
        role: Role,
        content: str,
        *,
        title: str | None = None,
    ) -> Message:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise NotFoundError(conversation_id)

        created_at = utc_now()
        # Keep created_at non-decreasing even if the wall clock steps back
        if conversation.messages and created_at < conversation.messages[-1].created_at:
            created_at = conversation.messages[-1].created_at

        message = Message(
            id=generate_id("msg"),
            role=role,
            content=content,
            created_at=created_at,
        )
        self._conversations[conversation_id] = conversation.with_message(message, title)
        return message

    async def remove(self, conversation_id: str) -> None:
        if self._conversations.pop(conversation_id, None) is None:
            raise NotFoundError(conversation_id)
