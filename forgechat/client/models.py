"""Wire models for the conversation REST API.

The server speaks camelCase JSON and issues numeric identifiers; these
models accept either spelling and normalise identifiers to strings.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before", check_fields=False)
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class MessageRecord(_WireModel):
    """A message as returned by the server."""

    id: str
    conversation_id: str | None = Field(default=None, alias="conversationId")
    role: str
    content: str
    created_at: datetime = Field(alias="createdAt")

    @field_validator("conversation_id", mode="before")
    @classmethod
    def _stringify_conversation_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class ConversationRecord(_WireModel):
    """A conversation as returned by the server."""

    id: str
    title: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    messages: list[MessageRecord] = Field(default_factory=list)


class ConversationCreate(BaseModel):
    """Request body for creating a conversation."""

    title: str = Field(..., min_length=1, max_length=255)


class MessageCreate(BaseModel):
    """Request body for appending a message.

    `title` is sent with the first user message so the derived title is
    stored together with it.
    """

    role: str
    content: str
    title: str | None = Field(default=None, max_length=255)
