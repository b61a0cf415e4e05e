"""Forge Chat: conversation session core for a chat-style assistant client."""

__version__ = "0.1.0"
