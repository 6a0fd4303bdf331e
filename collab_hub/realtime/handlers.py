"""Handlers for inbound live events.

Storage calls go through ``database_sync_to_async``; what is to be sent is
returned as :class:`~collab_hub.realtime.router.Emit` values. ``sendMessage``
is the exception: its delivered upgrade depends on the outcome of the
notification push, so it sends through the hub before returning.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from channels.db import database_sync_to_async

from collab_hub.core.errors import AuthorizationError
from collab_hub.core.errors import ValidationError
from collab_hub.messaging import services as messaging
from collab_hub.realtime.events.messages import build_message_notification
from collab_hub.realtime.events.messages import build_message_payload
from collab_hub.realtime.rooms import conversation_room
from collab_hub.realtime.rooms import personal_room
from collab_hub.realtime.router import Emit
from collab_hub.realtime.router import EventRouter
from collab_hub.users import services as users

if TYPE_CHECKING:
    from collab_hub.realtime.hub import RealtimeHub
    from collab_hub.realtime.session import ConnectionSession

logger = logging.getLogger(__name__)

router = EventRouter()


def _conversation_id(payload: dict[str, Any]) -> int:
    value = payload.get("conversationId")
    try:
        conversation_id = int(value)
    except (TypeError, ValueError):
        msg = "conversationId is required"
        raise ValidationError(msg) from None
    if conversation_id <= 0:
        msg = "Invalid conversationId"
        raise ValidationError(msg)
    return conversation_id


def _joined_room(session: ConnectionSession, payload: dict[str, Any]) -> tuple[int, str]:
    conversation_id = _conversation_id(payload)
    room = conversation_room(conversation_id)
    if room not in session.rooms:
        msg = "Join the conversation first"
        raise AuthorizationError(msg)
    return conversation_id, room


@database_sync_to_async
def _join(user_id: int, conversation_id: int) -> list[int]:
    conversation = messaging.get_conversation_for(user_id, conversation_id)
    return messaging.mark_pending_delivered(conversation, user_id)


@router.on("joinConversation")
async def join_conversation(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    conversation_id = _conversation_id(payload)
    delivered = await _join(session.identity, conversation_id)
    room = conversation_room(conversation_id)
    hub.rooms.join(session, room)
    return [
        Emit.to_room(
            room,
            "messagesDelivered",
            {
                "conversationId": conversation_id,
                "userId": session.identity,
                "messageIds": delivered,
            },
        ),
    ]


@router.on("leaveConversation")
async def leave_conversation(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    hub.rooms.leave(session, conversation_room(_conversation_id(payload)))
    return []


@router.on("joinNotificationRoom")
async def join_notification_room(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    # Joined at connect already.
    hub.rooms.join(session, personal_room(session.identity))
    return []


@database_sync_to_async
def _persist_message(user_id: int, payload: dict[str, Any]):
    conversation = messaging.resolve_conversation(
        user_id,
        recipient_id=payload.get("recipientId"),
        conversation_id=payload.get("conversationId"),
    )
    message = messaging.create_message(
        conversation,
        user_id,
        payload.get("content"),
        payload.get("type"),
        file_name=payload.get("fileName") or "",
        file_size=payload.get("fileSize") or "",
        file_url=payload.get("fileUrl") or "",
    )
    others = [pk for pk in conversation.participant_ids() if pk != user_id]
    return message, build_message_payload(message), others


@database_sync_to_async
def _mark_delivered(message) -> bool:
    return messaging.mark_delivered(message)


@router.on(
    "sendMessage",
    error_event="messageError",
    correlation_key="tempId",
    failure_message="Failed to send message",
)
async def send_message(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    message, data, others = await _persist_message(session.identity, payload)
    room = conversation_room(message.conversation_id)
    await hub.deliver([Emit.to_room(room, "newMessage", dict(data))], session)

    # A registry entry with a dead socket counts as offline.
    notice = build_message_notification(message, session.user_name)
    reached = []
    for pk in others:
        if await hub.push_to_user(pk, "messageNotification", notice):
            reached.append(pk)
    if reached and await _mark_delivered(message):
        data["status"] = message.status

    logger.debug(
        "Message %s from %s to conversation %s (%s reached)",
        message.pk,
        session.identity,
        message.conversation_id,
        len(reached),
    )
    return [
        Emit.to_session(
            "messageSent",
            {**data, "tempId": payload.get("tempId"), "success": True},
        ),
    ]


@database_sync_to_async
def _mark_read(user_id: int, conversation_id: int, message_ids) -> list[int]:
    conversation = messaging.get_conversation_for(user_id, conversation_id)
    return messaging.mark_read(conversation, user_id, message_ids)


@router.on("markMessagesRead")
async def mark_messages_read(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    conversation_id = _conversation_id(payload)
    message_ids = payload.get("messageIds")
    if message_ids is not None and not isinstance(message_ids, list):
        msg = "messageIds must be a list"
        raise ValidationError(msg)
    updated = await _mark_read(session.identity, conversation_id, message_ids)
    return [
        Emit.to_room(
            conversation_room(conversation_id),
            "messagesRead",
            {
                "conversationId": conversation_id,
                "messageIds": updated,
                "readBy": session.identity,
            },
        ),
    ]


@router.on("typing")
async def typing(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    conversation_id, room = _joined_room(session, payload)
    return [
        Emit.to_room(
            room,
            "userTyping",
            {
                "userId": session.identity,
                "userName": session.user_name,
                "conversationId": conversation_id,
            },
        ),
    ]


@router.on("stopTyping")
async def stop_typing(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    conversation_id, room = _joined_room(session, payload)
    return [
        Emit.to_room(
            room,
            "userStoppedTyping",
            {
                "userId": session.identity,
                "userName": session.user_name,
                "conversationId": conversation_id,
            },
        ),
    ]


@router.on("updateStatus")
async def update_status(hub: RealtimeHub, session: ConnectionSession, payload: dict[str, Any]) -> list[Emit]:
    status = users.validate_status(payload.get("status"))
    await database_sync_to_async(users.set_status)(session.identity, status)
    return [Emit.broadcast("userStatusUpdate", {"userId": session.identity, "status": status})]
