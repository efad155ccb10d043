from __future__ import annotations

from typing import Protocol
from uuid import UUID

from office_chat.application.dto.conversation import ConversationSummary
from office_chat.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_direct_by_key(self, direct_key: str) -> Conversation | None: ...

    async def list_summaries_for_user(self, user_id: int) -> list[ConversationSummary]:
        """Conversations of a member, most recent message first, empty ones last."""
        ...


class ConversationWriter(Protocol):
    async def create(self, conversation: Conversation) -> Conversation: ...

    async def create_direct_if_not_exists(
        self, conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        """Insert a direct conversation. On pair-key conflict return the existing one."""
        ...
