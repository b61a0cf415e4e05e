"""Forge conversation API client.

Usage:
    from forgechat.client import ForgeClient

    async with ForgeClient(base_url="https://forge.example.com", token="eyJ...") as client:
        conversations = await client.list_conversations()
"""

from forgechat.client.client import ForgeClient, ForgeClientError
from forgechat.client.models import (
    ConversationCreate,
    ConversationRecord,
    MessageCreate,
    MessageRecord,
)

__all__ = [
    "ConversationCreate",
    "ConversationRecord",
    "ForgeClient",
    "ForgeClientError",
    "MessageCreate",
    "MessageRecord",
]
