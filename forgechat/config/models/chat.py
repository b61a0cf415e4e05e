"""Chat behaviour configuration models."""

from pydantic import BaseModel, Field


class ChatConfig(BaseModel):
    """Conversation titling, history previews and reply error text."""

    placeholder_title: str = Field(
        default="New Conversation",
        min_length=1,
        description="Title of a conversation before its first user message",
    )
    title_max_length: int = Field(
        default=50,
        gt=0,
        description="Characters kept from the first user message for the title",
    )
    preview_length: int = Field(
        default=60,
        gt=0,
        description="Characters of the first message shown in history summaries",
    )
    error_reply_prefix: str = Field(
        default="Sorry, I encountered an error: ",
        description="Prefix of the assistant message recorded when a reply fails",
    )
