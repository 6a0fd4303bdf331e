from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from collab_hub.messaging.models import Message


def build_message_payload(message: Message) -> dict[str, Any]:
    """Wire shape of a message; touches ``message.sender`` so call it from sync code."""

    sender = message.sender
    return {
        "id": message.pk,
        "conversationId": message.conversation_id,
        "senderId": sender.pk,
        "senderName": sender.display_name,
        "senderAvatar": sender.avatar,
        "content": message.content,
        "type": message.message_type,
        "status": message.status,
        "fileName": message.file_name,
        "fileSize": message.file_size,
        "fileUrl": message.file_url,
        "timestamp": message.created_at.isoformat(),
    }


def build_message_notification(message: Message, sender_name: str) -> dict[str, Any]:
    return {
        "conversationId": message.conversation_id,
        "messageId": message.pk,
        "senderName": sender_name,
        "content": message.content,
        "timestamp": message.created_at.isoformat(),
    }
