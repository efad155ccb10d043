"""Send path of the push channel: persist, then fan out to every member."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from office_chat.application.dto.events import RECEIVE_MESSAGE, MessageEvent, event_data
from office_chat.application.dto.message import SendMessageDTO
from office_chat.application.policies.permissions import assert_conversation_access
from office_chat.application.ports.push import PushChannel
from office_chat.application.uow import UnitOfWork
from office_chat.domain.entities.message import Message
from office_chat.domain.value_objects.enums import MessageType
from office_chat.domain.value_objects.rooms import personal_room
from office_chat.services.membership_router import MembershipRouter

logger = logging.getLogger(__name__)


async def send_message(
    sender_id: int,
    data: SendMessageDTO,
    router: MembershipRouter,
    push: PushChannel,
    uow: UnitOfWork,
) -> tuple[Message, bool]:
    """Persist a message from a connected user and fan it out.

    ``sender_id`` comes from the authenticated connection, never from the
    payload. Returns (message, created); a retry with a known
    ``client_msg_id`` returns the stored message with created=False and is
    not fanned out again. Nothing is pushed unless the insert committed,
    and once it has committed the send counts as done: fan-out errors are
    logged, never raised.
    """
    conversation = await uow.conversations.get_by_id(data.conversation_id)
    await assert_conversation_access(sender_id, conversation, uow.memberships)

    is_read = router.is_anyone_else_present(data.conversation_id, sender_id)

    msg = Message(
        id=uuid.uuid4(),
        conversation_id=data.conversation_id,
        sender_id=sender_id,
        type=MessageType.ATTACHMENT if data.attachment else MessageType.TEXT,
        body=data.text,
        attachment_url=data.attachment.url if data.attachment else None,
        attachment_type=data.attachment.type if data.attachment else None,
        attachment_name=data.attachment.name if data.attachment else None,
        is_read=is_read,
        client_msg_id=data.client_msg_id,
        created_at=datetime.now(timezone.utc),
    )

    async with uow:
        msg, created = await uow.messages_w.create_if_not_exists(msg)
        if created:
            # same transaction as the insert: a failure here rolls it back
            recipients = await router.resolve_recipients(msg.conversation_id, uow)
            await uow.commit()

    if not created:
        logger.info(
            "Duplicate send of client_msg_id=%s in %s, skipping fan-out",
            msg.client_msg_id, msg.conversation_id,
        )
        return msg, False

    logger.debug(
        "Message %s in %s: sender=%s is_read=%s",
        msg.id, msg.conversation_id, sender_id, is_read,
    )

    payload = event_data(MessageEvent.from_message(msg))
    for user_id in recipients:
        try:
            await push.send_to_room(personal_room(user_id), RECEIVE_MESSAGE, payload)
        except Exception:
            logger.exception(
                "Fan-out of message %s to user %s failed", msg.id, user_id,
            )

    return msg, True
