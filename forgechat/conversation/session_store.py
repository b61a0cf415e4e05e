"""SessionStore: owner of the conversation collection and current pointer.

All invariant bookkeeping lives here, once, for every backing adapter:

- conversation ids are unique within the collection
- exactly one conversation is current once the store is seeded
- a title is derived from the first user message and never again
- messages are append-only
- empty, non-current conversations are pruned whenever one is created

Mutations call the adapter first and commit to the collection only after
the adapter call returned, so a failed call leaves the collection exactly
as it was. The collection is a list of frozen snapshots that is replaced
wholesale on every commit; readers never observe a half-applied change.
"""

import asyncio

from forgechat.conversation.adapter import BackingAdapter
from forgechat.conversation.errors import (
    BackendUnavailableError,
    NoActiveConversationError,
    NotFoundError,
)
from forgechat.conversation.models import (
    PLACEHOLDER_TITLE,
    PREVIEW_LENGTH,
    TITLE_MAX_LENGTH,
    Conversation,
    ConversationSummary,
    Role,
    derive_title,
    summarize,
)
from forgechat.observability.logging import get_logger

logger = get_logger(__name__)


def select_replacement(conversations: list[Conversation]) -> Conversation | None:
    """Pick the conversation to show after the current one is deleted.

    Only conversations with messages qualify. The most recently created
    wins; ties go to the earlier position in the collection.
    """
    candidates = [c for c in conversations if not c.is_empty]
    if not candidates:
        return None
    # max() keeps the first of equal keys, i.e. collection order
    return max(candidates, key=lambda c: c.created_at)


def _normalize(conversations: list[Conversation]) -> list[Conversation]:
    """Drop duplicate ids and order most recently created first.

    The sort is stable, so equal timestamps keep the adapter's newest-first order.
    """
    seen: set[str] = set()
    unique: list[Conversation] = []
    for conversation in conversations:
        if conversation.id in seen:
            logger.warning("duplicate_conversation_dropped", conversation_id=conversation.id)
            continue
        seen.add(conversation.id)
        unique.append(conversation)
    unique.sort(key=lambda c: c.created_at, reverse=True)
    return unique


class SessionStore:
    """Conversation session state manager.

    Holds the user's conversations (most recently created first) and the
    pointer to the current one, and realizes every mutation through a
    BackingAdapter. Reads are synchronous and return immutable snapshots.

    Concurrency: runs on one event loop. Changes to the collection's shape
    (create, delete, clear, refresh, rebind) serialize on a store lock.
    Appends serialize per conversation, so two appends issued back to back
    for one conversation reach the adapter and the collection in order,
    while appends to different conversations proceed independently.
    """

    def __init__(
        self,
        adapter: BackingAdapter | None = None,
        *,
        placeholder_title: str = PLACEHOLDER_TITLE,
        title_max_length: int = TITLE_MAX_LENGTH,
        preview_length: int = PREVIEW_LENGTH,
    ) -> None:
        """Initialize an unseeded store.

        Args:
            adapter: Backing adapter, or None until an identity is bound
            placeholder_title: Title of a conversation without user messages
            title_max_length: Characters kept from the first user message
            preview_length: Characters of the first message in summaries
        """
        self._adapter = adapter
        self._placeholder_title = placeholder_title
        self._title_max_length = title_max_length
        self._preview_length = preview_length

        self._conversations: list[Conversation] = []
        self._current_id: str | None = None

        self._lock = asyncio.Lock()
        self._append_locks: dict[str, asyncio.Lock] = {}
        # Bumped on rebind so appends issued against a previous identity
        # are not applied to the new collection
        self._generation = 0
        # Ids whose removal is in flight; they cannot become current
        self._deleting: set[str] = set()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def adapter(self) -> BackingAdapter | None:
        return self._adapter

    def list_conversations(self) -> tuple[Conversation, ...]:
        """All conversations, most recently created first."""
        return tuple(self._conversations)

    def current_conversation(self) -> Conversation | None:
        """The current conversation, or None while the store is unseeded."""
        if self._current_id is None:
            return None
        return self._find(self._current_id)

    def get_conversation(self, conversation_id: str) -> Conversation:
        conversation = self._find(conversation_id)
        if conversation is None:
            raise NotFoundError(conversation_id)
        return conversation

    def summaries(self) -> tuple[ConversationSummary, ...]:
        """History-list rows in collection order."""
        return tuple(
            summarize(
                c,
                is_current=c.id == self._current_id,
                preview_length=self._preview_length,
                placeholder=self._placeholder_title,
            )
            for c in self._conversations
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> Conversation:
        """Load the collection from the adapter and seed a fresh current conversation.

        Raises:
            BackendUnavailableError: If loading or creating fails; local
                state is left untouched.
        """
        async with self._lock:
            return await self._initialize_locked()

    async def refresh(self) -> tuple[Conversation, ...]:
        """Reload the collection from the adapter.

        Keeps the current conversation when it still exists, otherwise
        applies replacement selection.

        Raises:
            BackendUnavailableError: If the reload fails; local state is kept.
        """
        async with self._lock:
            adapter = self._require_adapter()
            loaded = _normalize(await adapter.list())

            current_id = self._current_id
            if current_id is not None and any(c.id == current_id for c in loaded):
                self._commit(loaded, current_id)
            else:
                replacement = select_replacement(loaded)
                if replacement is not None:
                    self._commit(loaded, replacement.id)
                else:
                    fresh = await adapter.create(self._placeholder_title)
                    self._conversations = loaded
                    pruned = self._install_fresh(fresh)
                    await self._remove_pruned(pruned)

            logger.info(
                "conversations_refreshed",
                count=len(self._conversations),
                current_id=self._current_id,
            )
            return tuple(self._conversations)

    async def rebind(self, adapter: BackingAdapter | None) -> Conversation | None:
        """Discard all state and start over against another adapter.

        Used when the signed-in identity changes. With None the store stays
        empty with no current conversation; with an adapter it is seeded as
        in `initialize`.

        Raises:
            BackendUnavailableError: If seeding from the new adapter fails;
                the store is left empty and unseeded.
        """
        async with self._lock:
            self._generation += 1
            self._adapter = adapter
            self._conversations = []
            self._current_id = None
            self._append_locks = {}
            logger.info("session_store_reset", bound=adapter is not None)

            if adapter is None:
                return None
            return await self._initialize_locked()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_conversation(self) -> Conversation:
        """Create an empty conversation, prune stale empty ones, and make it current.

        Raises:
            BackendUnavailableError: If the adapter cannot create it; state
                is unchanged.
        """
        async with self._lock:
            adapter = self._require_adapter()
            fresh = await adapter.create(self._placeholder_title)
            pruned = self._install_fresh(fresh)
            await self._remove_pruned(pruned)
            return fresh

    async def start_fresh_conversation(self) -> Conversation:
        """Alias of `create_conversation` for the "new chat" action."""
        return await self.create_conversation()

    def switch_conversation(self, conversation_id: str) -> Conversation:
        """Make `conversation_id` current.

        Raises:
            NotFoundError: If it is not in the collection or is being
                deleted; state is unchanged.
        """
        conversation = self._find(conversation_id)
        if conversation is None:
            logger.warning("switch_target_not_found", conversation_id=conversation_id)
            raise NotFoundError(conversation_id)
        if conversation_id in self._deleting:
            logger.warning("switch_target_being_deleted", conversation_id=conversation_id)
            raise NotFoundError(
                conversation_id,
                f"Conversation {conversation_id} is being deleted",
            )

        self._current_id = conversation_id
        logger.debug("conversation_switched", conversation_id=conversation_id)
        return conversation

    async def add_message(
        self,
        role: Role | str,
        content: str,
        target_id: str | None = None,
    ) -> Conversation:
        """Append a message to `target_id` (default: the current conversation).

        The target is fixed when the call is made; switching conversations
        while the adapter call is in flight does not redirect the message.

        Returns:
            The updated conversation snapshot.

        Raises:
            NoActiveConversationError: If no target is given and there is
                no current conversation.
            NotFoundError: If the target does not exist, or was deleted
                while the append was in flight.
            BackendUnavailableError: If the adapter call fails; the
                conversation's messages are unchanged.
        """
        role = Role(role)
        conversation_id = target_id if target_id is not None else self._current_id
        if conversation_id is None:
            logger.error("add_message_without_conversation", role=role.value)
            raise NoActiveConversationError()

        adapter = self._require_adapter()
        generation = self._generation

        async with self._append_lock(conversation_id):
            before = self._find(conversation_id)
            if before is None:
                logger.warning("append_target_not_found", conversation_id=conversation_id)
                raise NotFoundError(conversation_id)

            title = derive_title(before, role, content, self._title_max_length)
            message = await adapter.append(
                conversation_id,
                role,
                content,
                title=title if title != before.title else None,
            )

            latest = self._find(conversation_id) if generation == self._generation else None
            if latest is None:
                logger.warning(
                    "append_target_removed",
                    conversation_id=conversation_id,
                    message_id=message.id,
                )
                raise NotFoundError(
                    conversation_id,
                    f"Conversation {conversation_id} was removed before the message was recorded",
                )

            if any(m.id == message.id for m in latest.messages):
                # Already picked up by a refresh that ran during the call
                updated = latest
            else:
                updated = latest.with_message(message, title)
            self._replace(updated)

        logger.debug(
            "message_added",
            conversation_id=conversation_id,
            message_id=message.id,
            role=role.value,
        )
        return updated

    async def delete_conversation(self, conversation_id: str) -> Conversation | None:
        """Delete a conversation.

        If it is still current once the adapter call returns, the most
        recent conversation with messages becomes current; when none has
        messages, a fresh empty conversation is created and made current.
        A switch made while the call was in flight is kept.

        Returns:
            The current conversation after the deletion.

        Raises:
            NotFoundError: If the id is not in the collection (non-fatal).
            BackendUnavailableError: If the adapter fails; state is unchanged.
        """
        async with self._lock:
            if self._find(conversation_id) is None:
                logger.warning("delete_target_not_found", conversation_id=conversation_id)
                raise NotFoundError(conversation_id)

            adapter = self._require_adapter()
            remaining = [c for c in self._conversations if c.id != conversation_id]
            fresh = None
            self._deleting.add(conversation_id)
            try:
                if conversation_id == self._current_id and select_replacement(remaining) is None:
                    fresh = await adapter.create(self._placeholder_title)
                await self._remove_or_compensate(adapter, conversation_id, fresh)
            finally:
                self._deleting.discard(conversation_id)

            # The pointer may have moved while the adapter calls were pending
            still_current = conversation_id == self._current_id
            self._conversations = [c for c in self._conversations if c.id != conversation_id]
            self._append_locks.pop(conversation_id, None)
            if still_current and fresh is not None:
                pruned = self._install_fresh(fresh)
                await self._remove_pruned(pruned)
            elif still_current:
                # Conversations with messages cannot disappear while the lock is held
                self._current_id = select_replacement(self._conversations).id
            elif fresh is not None:
                await self._discard_unused(fresh)

            logger.info(
                "conversation_deleted",
                conversation_id=conversation_id,
                current_id=self._current_id,
            )
            return self.current_conversation()

    async def clear_current_conversation(self) -> Conversation:
        """Delete the current conversation and start a fresh empty one.

        If the user switched to another conversation while the adapter
        calls were pending, that switch is kept and the fresh
        conversation is discarded.

        Returns:
            The current conversation afterwards.

        Raises:
            NoActiveConversationError: If there is no current conversation.
            BackendUnavailableError: If the adapter fails; state is unchanged.
        """
        async with self._lock:
            cleared_id = self._current_id
            if cleared_id is None:
                logger.error("clear_without_conversation")
                raise NoActiveConversationError("No current conversation to clear")

            adapter = self._require_adapter()
            self._deleting.add(cleared_id)
            try:
                fresh = await adapter.create(self._placeholder_title)
                await self._remove_or_compensate(adapter, cleared_id, fresh)
            finally:
                self._deleting.discard(cleared_id)

            still_current = cleared_id == self._current_id
            self._conversations = [c for c in self._conversations if c.id != cleared_id]
            self._append_locks.pop(cleared_id, None)
            if still_current:
                pruned = self._install_fresh(fresh)
                await self._remove_pruned(pruned)
            else:
                await self._discard_unused(fresh)

            logger.info(
                "conversation_cleared",
                conversation_id=cleared_id,
                current_id=self._current_id,
            )
            return self.current_conversation()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_adapter(self) -> BackingAdapter:
        if self._adapter is None:
            raise BackendUnavailableError("No backing store is bound; sign in first")
        return self._adapter

    def _find(self, conversation_id: str) -> Conversation | None:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def _append_lock(self, conversation_id: str) -> asyncio.Lock:
        lock = self._append_locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._append_locks[conversation_id] = lock
        return lock

    def _has_pending_append(self, conversation_id: str) -> bool:
        lock = self._append_locks.get(conversation_id)
        return lock is not None and lock.locked()

    def _commit(self, conversations: list[Conversation], current_id: str | None) -> None:
        self._conversations = conversations
        self._current_id = current_id

    def _replace(self, updated: Conversation) -> None:
        self._conversations = [
            updated if c.id == updated.id else c for c in self._conversations
        ]

    def _install_fresh(self, fresh: Conversation) -> list[Conversation]:
        """Insert `fresh` at the front as current and prune empty conversations.

        Conversations with an append in flight are not pruned; their first
        message is about to land.

        Returns:
            The pruned conversations.
        """
        kept: list[Conversation] = []
        pruned: list[Conversation] = []
        for conversation in self._conversations:
            if conversation.id == fresh.id:
                continue
            if conversation.is_empty and not self._has_pending_append(conversation.id):
                pruned.append(conversation)
            else:
                kept.append(conversation)

        self._commit([fresh, *kept], fresh.id)
        for conversation in pruned:
            self._append_locks.pop(conversation.id, None)

        logger.info(
            "conversation_created",
            conversation_id=fresh.id,
            pruned_ids=[c.id for c in pruned],
        )
        return pruned

    async def _remove_pruned(self, pruned: list[Conversation]) -> None:
        """Remove pruned conversations from the backing space.

        Runs after the local commit. A conversation that cannot be removed
        is empty, so nothing is lost; it is pruned again after the next load.
        """
        adapter = self._require_adapter()
        for conversation in pruned:
            try:
                await adapter.remove(conversation.id)
            except NotFoundError:
                continue
            except BackendUnavailableError as e:
                logger.warning(
                    "prune_remove_failed",
                    conversation_id=conversation.id,
                    error=e.message,
                )

    async def _discard_unused(self, fresh: Conversation) -> None:
        """Remove a replacement that was created but is no longer needed."""
        logger.info("replacement_discarded", conversation_id=fresh.id)
        await self._remove_pruned([fresh])

    async def _remove_or_compensate(
        self,
        adapter: BackingAdapter,
        conversation_id: str,
        fresh: Conversation | None,
    ) -> None:
        """Remove `conversation_id`, undoing the creation of `fresh` on failure."""
        try:
            await adapter.remove(conversation_id)
        except NotFoundError:
            # Already gone from the backing space; finish the local removal
            logger.info("remove_target_already_gone", conversation_id=conversation_id)
        except BackendUnavailableError:
            if fresh is not None:
                try:
                    await adapter.remove(fresh.id)
                except (NotFoundError, BackendUnavailableError) as e:
                    logger.warning(
                        "replacement_rollback_failed",
                        conversation_id=fresh.id,
                        error=str(e),
                    )
            raise

    async def _initialize_locked(self) -> Conversation:
        adapter = self._require_adapter()
        loaded = _normalize(await adapter.list())
        fresh = await adapter.create(self._placeholder_title)

        self._conversations = loaded
        pruned = self._install_fresh(fresh)
        await self._remove_pruned(pruned)

        logger.info(
            "session_store_initialized",
            count=len(self._conversations),
            current_id=fresh.id,
        )
        return fresh
