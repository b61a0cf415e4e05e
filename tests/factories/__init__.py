"""Test factories for creating test data."""

from tests.factories.adapters import FlakyAdapter
from tests.factories.conversation import make_conversation, make_message
from tests.factories.server import FakeConversationServer

__all__ = [
    "FakeConversationServer",
    "FlakyAdapter",
    "make_conversation",
    "make_message",
]
