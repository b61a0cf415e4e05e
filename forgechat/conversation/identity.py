"""Binding between the signed-in identity and the session store.

Conversations belong to a user. Whenever the identity changes, including
signing out, the store drops everything it holds and is seeded again
from a backing adapter built for the new identity.
"""

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from forgechat.conversation.adapter import BackingAdapter
from forgechat.conversation.models import Conversation
from forgechat.conversation.session_store import SessionStore
from forgechat.observability.logging import get_logger

logger = get_logger(__name__)

AdapterFactory = Callable[["Identity"], BackingAdapter]


class Identity(BaseModel):
    """The signed-in user as supplied by the authentication layer."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1, description="Stable user identifier")
    token: str | None = Field(default=None, description="Bearer token for the API")
    name: str | None = Field(default=None, description="Display name")


class IdentityBinding:
    """Rebinds a SessionStore whenever the active identity changes."""

    def __init__(self, store: SessionStore, adapter_factory: AdapterFactory) -> None:
        """Initialize the binding with no identity.

        Args:
            store: Store to rebind
            adapter_factory: Builds a backing adapter for an identity
        """
        self._store = store
        self._adapter_factory = adapter_factory
        self._identity: Identity | None = None

    @property
    def identity(self) -> Identity | None:
        return self._identity

    async def set_identity(self, identity: Identity | None) -> Conversation | None:
        """Switch the store to `identity` (None signs out).

        Setting the identity that is already bound changes nothing.

        Returns:
            The current conversation after the switch, None when signed out.

        Raises:
            BackendUnavailableError: If the new adapter cannot seed the
                store; the store is left empty and the identity stays bound
                so a later `store.initialize()` can retry.
        """
        if identity == self._identity:
            return self._store.current_conversation()

        previous = self._store.adapter
        adapter = self._adapter_factory(identity) if identity is not None else None
        self._identity = identity
        logger.info(
            "identity_changed",
            user_id=identity.user_id if identity is not None else None,
        )

        try:
            return await self._store.rebind(adapter)
        finally:
            if previous is not None and previous is not adapter:
                await previous.close()
