"""Enums for conversation models."""

from enum import Enum


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"
