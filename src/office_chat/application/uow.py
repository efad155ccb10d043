from __future__ import annotations

from typing import Protocol, Self

from office_chat.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from office_chat.application.repositories.membership import (
    MembershipReader,
    MembershipWriter,
)
from office_chat.application.repositories.message import MessageReader, MessageWriter
from office_chat.application.repositories.user import UserDirectory


class UnitOfWork(Protocol):
    conversations: ConversationReader
    conversations_w: ConversationWriter
    memberships: MembershipReader
    memberships_w: MembershipWriter
    messages: MessageReader
    messages_w: MessageWriter
    users: UserDirectory

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...

    async def __aenter__(self) -> Self: ...
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
