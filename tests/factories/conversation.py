"""Factories for conversation models."""

from datetime import UTC, datetime, timedelta
from itertools import count

from forgechat.conversation.models import Conversation, Message, Role

_ids = count(1)
_EPOCH = datetime(2025, 1, 1, tzinfo=UTC)


def make_message(
    content: str = "Hello",
    role: Role = Role.USER,
    *,
    minutes: int = 0,
) -> Message:
    return Message(
        id=f"msg-{next(_ids)}",
        role=role,
        content=content,
        created_at=_EPOCH + timedelta(minutes=minutes),
    )


def make_conversation(
    *contents: str,
    title: str = "New Conversation",
    minutes: int = 0,
    conversation_id: str | None = None,
) -> Conversation:
    """Conversation created `minutes` after the epoch, alternating user/assistant messages."""
    messages = tuple(
        make_message(
            content,
            Role.USER if i % 2 == 0 else Role.ASSISTANT,
            minutes=minutes + i,
        )
        for i, content in enumerate(contents)
    )
    return Conversation(
        id=conversation_id or f"conv-{next(_ids)}",
        title=title,
        messages=messages,
        created_at=_EPOCH + timedelta(minutes=minutes),
    )
