"""Conversation storage configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

StorageMode = Literal["ephemeral", "persisted"]


class StorageConfig(BaseModel):
    """Selects the backing adapter and, for persisted mode, the remote API."""

    mode: StorageMode = Field(
        default="ephemeral",
        description="Backing adapter: in-process or remote conversation API",
    )
    base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the conversation API (persisted mode)",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )
