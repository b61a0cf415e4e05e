"""Bootstrap module for wiring the conversation core from configuration.

Handles:
- Loading configuration from TOML files and environment
- Configuring structured logging
- Building the backing adapter for a signed-in identity
- Creating the SessionStore, IdentityBinding and ChatService

Example usage:

    from forgechat.bootstrap import bootstrap
    from forgechat.conversation import Identity

    app = bootstrap()
    await app.identity.set_identity(Identity(user_id="42", token="eyJ..."))
    await app.chat.send("Analyze the problem of food waste in restaurants")
"""

from dataclasses import dataclass
from functools import partial

from forgechat.chat import ChatService
from forgechat.client import ForgeClient
from forgechat.config import Settings, get_settings
from forgechat.conversation.adapter import BackingAdapter
from forgechat.conversation.adapters import EphemeralAdapter, PersistedAdapter
from forgechat.conversation.identity import Identity, IdentityBinding
from forgechat.conversation.session_store import SessionStore
from forgechat.observability.logging import get_logger, setup_logging
from forgechat.providers.llm import MockReplyProvider, ReplyProvider

logger = get_logger(__name__)


@dataclass
class ForgeApp:
    """The wired conversation core."""

    settings: Settings
    store: SessionStore
    identity: IdentityBinding
    chat: ChatService


def build_adapter(settings: Settings, identity: Identity) -> BackingAdapter:
    """Build the backing adapter configured in `settings.storage` for `identity`."""
    storage = settings.storage
    if storage.mode == "persisted":
        client = ForgeClient(
            base_url=storage.base_url,
            token=identity.token,
            timeout=storage.timeout,
        )
        logger.debug("persisted_adapter_built", base_url=storage.base_url, user_id=identity.user_id)
        return PersistedAdapter(client)

    logger.debug("ephemeral_adapter_built", user_id=identity.user_id)
    return EphemeralAdapter()


def build_store(settings: Settings, adapter: BackingAdapter | None = None) -> SessionStore:
    """Create a SessionStore using the chat settings."""
    return SessionStore(
        adapter,
        placeholder_title=settings.chat.placeholder_title,
        title_max_length=settings.chat.title_max_length,
        preview_length=settings.chat.preview_length,
    )


def bootstrap(
    settings: Settings | None = None,
    provider: ReplyProvider | None = None,
    configure_logging: bool = True,
) -> ForgeApp:
    """Wire the conversation core.

    The store starts unbound; call `app.identity.set_identity(...)` to
    seed it for a user.

    Args:
        settings: Settings to use (default: loaded via get_settings)
        provider: Reply provider (default: MockReplyProvider)
        configure_logging: Whether to apply the logging settings
    """
    settings = settings or get_settings()

    if configure_logging:
        log_config = settings.observability.logging
        setup_logging(
            level=log_config.level,
            format=log_config.format,
            redact_pii=log_config.redact_pii,
        )

    store = build_store(settings)
    binding = IdentityBinding(store, partial(build_adapter, settings))
    chat = ChatService(
        store,
        provider or MockReplyProvider(),
        error_reply_prefix=settings.chat.error_reply_prefix,
    )

    logger.info("forgechat_bootstrapped", storage_mode=settings.storage.mode)
    return ForgeApp(settings=settings, store=store, identity=binding, chat=chat)
