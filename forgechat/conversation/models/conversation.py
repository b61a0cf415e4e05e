"""Conversation and message models.

Both models are frozen. A conversation changes only by producing a new
snapshot with `with_message`, so any reference handed to a caller keeps
describing the state it was read from.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from forgechat.conversation.models.enums import Role

PLACEHOLDER_TITLE = "New Conversation"
TITLE_MAX_LENGTH = 50
PREVIEW_LENGTH = 60
ELLIPSIS = "..."


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Message(BaseModel):
    """One immutable turn in a conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    role: Role = Field(..., description="Message author")
    content: str = Field(..., description="Message text")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")


class Conversation(BaseModel):
    """A titled, ordered, append-only sequence of messages."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    title: str = Field(default=PLACEHOLDER_TITLE, description="Display label")
    messages: tuple[Message, ...] = Field(
        default=(), description="Messages in chronological order"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")

    @property
    def is_empty(self) -> bool:
        return not self.messages

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def with_message(self, message: Message, title: str | None = None) -> "Conversation":
        """Return a new snapshot with `message` appended and `title` applied."""
        return self.model_copy(
            update={
                "messages": (*self.messages, message),
                "title": self.title if title is None else title,
            }
        )


class ConversationSummary(BaseModel):
    """One row of the conversation history list."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    preview: str
    message_count: int
    created_at: datetime
    is_current: bool = False


def truncate(text: str, max_length: int) -> str:
    """Cut `text` to `max_length` characters, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def derive_title(
    conversation: Conversation,
    role: Role,
    content: str,
    max_length: int = TITLE_MAX_LENGTH,
) -> str:
    """Title a conversation will carry after appending (role, content).

    Only the first message can set the title, and only when the user wrote
    it. Pure: depends on nothing but its arguments.
    """
    if conversation.is_empty and role == Role.USER:
        return truncate(content, max_length)
    return conversation.title


def summarize(
    conversation: Conversation,
    *,
    is_current: bool = False,
    preview_length: int = PREVIEW_LENGTH,
    placeholder: str = PLACEHOLDER_TITLE,
) -> ConversationSummary:
    """Build the history-list row for a conversation."""
    if conversation.messages:
        preview = conversation.messages[0].content[:preview_length]
    else:
        preview = placeholder
    return ConversationSummary(
        id=conversation.id,
        title=conversation.title,
        preview=preview,
        message_count=conversation.message_count,
        created_at=conversation.created_at,
        is_current=is_current,
    )
