from __future__ import annotations

import asyncio
import contextlib
import logging

import pydantic
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from office_chat.api.deps import authenticate, token_from_websocket
from office_chat.application.dto.events import (
    ERROR,
    MESSAGE_ACK,
    MESSAGE_NACK,
    ONLINE_USERS,
    PONG,
    ErrorEvent,
    MessageAckEvent,
    MessageNackEvent,
    OnlineUsersEvent,
    event_data,
)
from office_chat.application.exceptions import AppError, UnauthenticatedError
from office_chat.application.policies.permissions import assert_conversation_access
from office_chat.config import settings
from office_chat.infrastructure.ws.manager import Connection, ConnectionManager
from office_chat.infrastructure.ws.protocol import (
    JoinChatPayload,
    LeaveChatPayload,
    SendMessagePayload,
    UnknownEventError,
    parse_inbound,
)
from office_chat.services import delivery_service
from office_chat.services.membership_router import MembershipRouter
from office_chat.services.presence import PresenceTracker

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

WS_CLOSE_UNAUTHENTICATED = 4001


@router.websocket("/ws/chat")
async def ws_chat(websocket: WebSocket) -> None:
    try:
        principal = await authenticate(token_from_websocket(websocket))
    except UnauthenticatedError as exc:
        logger.info("WS handshake rejected: %s", exc.detail)
        await websocket.close(code=WS_CLOSE_UNAUTHENTICATED, reason="Authentication failed")
        return

    state = websocket.app.state
    manager: ConnectionManager = state.connections
    presence: PresenceTracker = state.presence
    user_id = principal.subject_id

    conn = await manager.connect(websocket, user_id)
    heartbeat_task: asyncio.Task[None] | None = None
    try:
        online = await presence.register(user_id)
        await manager.send(conn, ONLINE_USERS, event_data(OnlineUsersEvent(sorted(online))))

        heartbeat_task = asyncio.create_task(
            _heartbeat(manager, conn), name=f"ws-heartbeat-{conn.id}",
        )
        await _read_loop(websocket, conn)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %r", conn)
    finally:
        if heartbeat_task is not None:
            heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await heartbeat_task
        manager.disconnect(conn)
        await presence.unregister(user_id)


async def _heartbeat(manager: ConnectionManager, conn: Connection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    while True:
        await asyncio.sleep(interval)
        if not await manager.send(conn, PONG, {}):
            return


async def _read_loop(ws: WebSocket, conn: Connection) -> None:
    manager: ConnectionManager = ws.app.state.connections
    while True:
        raw = await ws.receive_text()
        try:
            event_type, payload = parse_inbound(raw)
        except UnknownEventError as exc:
            await manager.send(conn, ERROR, event_data(ErrorEvent("unknown_type", exc.event_type)))
            continue
        except pydantic.ValidationError as exc:
            await manager.send(
                conn, ERROR, event_data(ErrorEvent("invalid_payload", str(exc.errors()[0]["msg"]))),
            )
            continue

        if event_type == "ping":
            await manager.send(conn, PONG, {})
        elif isinstance(payload, JoinChatPayload):
            await _handle_join(ws, conn, payload)
        elif isinstance(payload, LeaveChatPayload):
            membership_router: MembershipRouter = ws.app.state.membership_router
            membership_router.leave(conn, payload.conversation_id)
        elif isinstance(payload, SendMessagePayload):
            await _handle_send(ws, conn, payload)


async def _handle_join(ws: WebSocket, conn: Connection, payload: JoinChatPayload) -> None:
    state = ws.app.state
    try:
        async with state.uow_factory() as uow:
            conversation = await uow.conversations.get_by_id(payload.conversation_id)
            await assert_conversation_access(conn.user_id, conversation, uow.memberships)
    except AppError as exc:
        await state.connections.send(conn, ERROR, event_data(ErrorEvent(exc.code, exc.detail)))
        return
    state.membership_router.join(conn, payload.conversation_id)


async def _handle_send(ws: WebSocket, conn: Connection, payload: SendMessagePayload) -> None:
    state = ws.app.state
    manager: ConnectionManager = state.connections
    try:
        async with state.uow_factory() as uow:
            msg, created = await delivery_service.send_message(
                conn.user_id, payload.to_dto(), state.membership_router, manager, uow,
            )
    except AppError as exc:
        await manager.send(
            conn,
            MESSAGE_NACK,
            event_data(MessageNackEvent(
                payload.conversation_id, payload.client_msg_id, exc.code, exc.detail,
            )),
        )
        return
    except Exception:
        logger.exception("send_message failed for %r in %s", conn, payload.conversation_id)
        await manager.send(
            conn,
            MESSAGE_NACK,
            event_data(MessageNackEvent(
                payload.conversation_id, payload.client_msg_id, "internal", "Message was not stored",
            )),
        )
        return

    await manager.send(
        conn,
        MESSAGE_ACK,
        event_data(MessageAckEvent(msg.conversation_id, msg.id, msg.client_msg_id, created)),
    )
