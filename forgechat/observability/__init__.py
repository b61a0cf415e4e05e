"""Observability: structured logging for the conversation core.

Uses structlog for logging. Call `setup_logging` once at startup, then get
module loggers with `get_logger(__name__)`.
"""

from forgechat.observability.logging import PIIRedactor, get_logger, setup_logging

__all__ = ["PIIRedactor", "get_logger", "setup_logging"]
