"""Configuration model exports.

    from forgechat.config.models import ChatConfig, StorageConfig
"""

from forgechat.config.models.chat import ChatConfig
from forgechat.config.models.observability import LoggingConfig, ObservabilityConfig
from forgechat.config.models.storage import StorageConfig, StorageMode

__all__ = [
    "ChatConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "StorageConfig",
    "StorageMode",
]
