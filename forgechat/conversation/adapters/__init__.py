"""Backing adapters for conversation persistence."""

from forgechat.conversation.adapter import BackingAdapter
from forgechat.conversation.adapters.ephemeral import EphemeralAdapter, generate_id
from forgechat.conversation.adapters.persisted import PersistedAdapter

__all__ = [
    "BackingAdapter",
    "EphemeralAdapter",
    "PersistedAdapter",
    "generate_id",
]
