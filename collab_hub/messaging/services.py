"""Persistence half of the message delivery pipeline.

Every function here is synchronous ORM code; the realtime handlers call them
through ``database_sync_to_async`` and the REST views call them directly.
Each step commits on its own: a message can exist without the conversation
pointer having been moved, never the other way round.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db import transaction
from django.db.models import Count
from django.db.models import Q
from django.utils import timezone

from collab_hub.core.errors import AuthorizationError
from collab_hub.core.errors import NotFoundError
from collab_hub.core.errors import ValidationError
from collab_hub.messaging.models import Conversation
from collab_hub.messaging.models import Message
from collab_hub.messaging.models import direct_key_for
from collab_hub.users.models import User

if TYPE_CHECKING:
    from collections.abc import Iterable

    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

STATUS_RANK = {
    Message.Status.SENT: 0,
    Message.Status.DELIVERED: 1,
    Message.Status.READ: 2,
}


def _user_id(user: User | int) -> int:
    return int(getattr(user, "pk", user))


def _parse_id(value, field: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        msg = f"{field} is required"
        raise ValidationError(msg) from None
    if parsed <= 0:
        msg = f"Invalid {field}"
        raise ValidationError(msg)
    return parsed


# Conversations
# ------------------------------------------------------------------------------


def find_or_create_direct_conversation(user_a: User | int, user_b: User | int) -> Conversation:
    """Return the direct conversation of a pair, creating it on first contact.

    Commutative in its arguments. Two callers racing on first contact both
    end up with the same row: the loser of the unique ``direct_key`` insert
    re-reads the winner's conversation.
    """

    a_id, b_id = _user_id(user_a), _user_id(user_b)
    if a_id == b_id:
        msg = "Cannot create conversation with yourself"
        raise ValidationError(msg)
    if User.objects.filter(pk__in=[a_id, b_id]).count() != 2:  # noqa: PLR2004
        msg = "Recipient not found"
        raise NotFoundError(msg)

    key = direct_key_for(a_id, b_id)
    try:
        with transaction.atomic():
            conversation, created = Conversation.objects.get_or_create(
                direct_key=key,
                defaults={
                    "kind": Conversation.Kind.DIRECT,
                    "created_by_id": a_id,
                    "last_activity": timezone.now(),
                },
            )
            if created:
                conversation.participants.add(a_id, b_id)
    except IntegrityError:
        conversation = Conversation.objects.get(direct_key=key)
        created = False

    if created:
        logger.info("Created direct conversation %s for %s", conversation.pk, key)
    return conversation


def get_conversation_for(user: User | int, conversation_id) -> Conversation:
    """Load a conversation, checking that ``user`` takes part in it."""

    conversation_id = _parse_id(conversation_id, "conversationId")
    try:
        conversation = Conversation.objects.get(pk=conversation_id)
    except Conversation.DoesNotExist:
        msg = "Conversation not found"
        raise NotFoundError(msg) from None
    if not conversation.has_participant(_user_id(user)):
        msg = "Access denied to this conversation"
        raise AuthorizationError(msg)
    return conversation


def resolve_conversation(
    sender: User | int,
    recipient_id=None,
    conversation_id=None,
) -> Conversation:
    if conversation_id:
        return get_conversation_for(sender, conversation_id)
    if recipient_id in (None, ""):
        msg = "recipientId or conversationId is required"
        raise ValidationError(msg)
    return find_or_create_direct_conversation(sender, _parse_id(recipient_id, "recipientId"))


def user_conversations(user: User | int) -> QuerySet[Conversation]:
    """Conversations of ``user``, most recently active first, with unread counts."""

    user_id = _user_id(user)
    unread = Count(
        "messages",
        filter=Q(messages__is_deleted=False)
        & ~Q(messages__sender_id=user_id)
        & ~Q(messages__status=Message.Status.READ),
        distinct=True,
    )
    return (
        Conversation.objects.filter(pk__in=Conversation.objects.filter(participants=user_id).values("pk"))
        .select_related("last_message")
        .prefetch_related("participants")
        .annotate(unread_count=unread)
        .order_by("-last_activity", "-pk")
    )


# Messages
# ------------------------------------------------------------------------------


def create_message(  # noqa: PLR0913
    conversation: Conversation,
    sender: User | int,
    content: str | None,
    message_type: str | None = None,
    *,
    file_name: str = "",
    file_size: str = "",
    file_url: str = "",
) -> Message:
    """Persist a ``sent`` message, then move the conversation pointer.

    The pointer update only runs once the message row exists.
    """

    if content is None:
        content = ""
    if not isinstance(content, str):
        msg = "content must be a string"
        raise ValidationError(msg)
    content = content.strip()
    message_type = message_type or Message.Type.TEXT
    if message_type not in Message.Type.values:
        msg = f"Invalid message type: {message_type}"
        raise ValidationError(msg)
    if not content and not file_url:
        msg = "empty message"
        raise ValidationError(msg)

    message = Message.objects.create(
        conversation=conversation,
        sender_id=_user_id(sender),
        content=content,
        message_type=message_type,
        status=Message.Status.SENT,
        file_name=file_name or "",
        file_size=file_size or "",
        file_url=file_url or "",
    )
    Conversation.objects.filter(pk=conversation.pk).update(
        last_message=message,
        last_activity=message.created_at,
        updated_at=timezone.now(),
    )
    return message


def advance_status(queryset: QuerySet[Message], target: str) -> list[int]:
    """Move every message in ``queryset`` forward to ``target``.

    Rows already at or past ``target`` are filtered out, so status never
    regresses. Returns the ids that actually changed.
    """

    rank = STATUS_RANK[target]
    lower = [status for status, r in STATUS_RANK.items() if r < rank]
    pending = queryset.filter(status__in=lower)
    ids = list(pending.values_list("pk", flat=True))
    if ids:
        Message.objects.filter(pk__in=ids, status__in=lower).update(status=target)
    return ids


def mark_delivered(message: Message) -> bool:
    changed = bool(advance_status(Message.objects.filter(pk=message.pk), Message.Status.DELIVERED))
    if changed:
        message.status = Message.Status.DELIVERED
    return changed


def mark_pending_delivered(conversation: Conversation | int, reader: User | int) -> list[int]:
    """Upgrade other senders' ``sent`` messages once ``reader`` opens the conversation."""

    queryset = Message.objects.filter(
        conversation_id=getattr(conversation, "pk", conversation),
        is_deleted=False,
    ).exclude(sender_id=_user_id(reader))
    return advance_status(queryset, Message.Status.DELIVERED)


def mark_read(
    conversation: Conversation | int,
    reader: User | int,
    message_ids: Iterable | None = None,
) -> list[int]:
    """Mark messages read for ``reader``; never touches the reader's own messages.

    With ``message_ids`` only those are considered, otherwise every unread
    message in the conversation.
    """

    queryset = Message.objects.filter(
        conversation_id=getattr(conversation, "pk", conversation),
        is_deleted=False,
    ).exclude(sender_id=_user_id(reader))
    if message_ids is not None:
        ids = []
        for value in message_ids:
            try:
                ids.append(int(value))
            except (TypeError, ValueError):
                continue
        queryset = queryset.filter(pk__in=ids)
    return advance_status(queryset, Message.Status.READ)


def _owned_message(message_id, actor: User | int, verb: str) -> Message:
    message_id = _parse_id(message_id, "messageId")
    try:
        message = Message.objects.select_related("sender").get(pk=message_id, is_deleted=False)
    except Message.DoesNotExist:
        msg = "Message not found"
        raise NotFoundError(msg) from None
    if message.sender_id != _user_id(actor):
        msg = f"You can only {verb} your own messages"
        raise AuthorizationError(msg)
    return message


def edit_message(message_id, actor: User | int, content: str | None) -> Message:
    if not isinstance(content, str) or not content.strip():
        msg = "Message content is required"
        raise ValidationError(msg)
    message = _owned_message(message_id, actor, "edit")
    message.content = content.strip()
    message.is_edited = True
    message.edited_at = timezone.now()
    message.save(update_fields=["content", "is_edited", "edited_at", "updated_at"])
    return message


def delete_message(message_id, actor: User | int) -> Message:
    message = _owned_message(message_id, actor, "delete")
    message.is_deleted = True
    message.deleted_at = timezone.now()
    message.save(update_fields=["is_deleted", "deleted_at", "updated_at"])
    return message


@dataclass(frozen=True)
class MessagePage:
    messages: list[Message]
    page: int
    limit: int
    total: int

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


def list_messages(
    conversation: Conversation,
    reader: User | int,
    page: int = 1,
    limit: int = 50,
) -> MessagePage:
    """Newest page first, returned oldest-first; marks the page read for ``reader``."""

    page, limit = max(int(page), 1), max(int(limit), 1)
    queryset = conversation.messages.filter(is_deleted=False).select_related("sender")
    total = queryset.count()
    offset = (page - 1) * limit
    messages = list(queryset.order_by("-created_at", "-pk")[offset : offset + limit])
    messages.reverse()

    updated = set(mark_read(conversation, reader, [m.pk for m in messages]))
    for message in messages:
        if message.pk in updated:
            message.status = Message.Status.READ
    return MessagePage(messages=messages, page=page, limit=limit, total=total)


def search_messages(
    user: User | int,
    query: str | None,
    conversation_id=None,
) -> QuerySet[Message]:
    query = (query or "").strip()
    if not query:
        msg = "Search query is required"
        raise ValidationError(msg)

    user_id = _user_id(user)
    queryset = Message.objects.filter(
        conversation__participants=user_id,
        content__icontains=query,
        is_deleted=False,
    )
    if conversation_id:
        queryset = queryset.filter(conversation=get_conversation_for(user_id, conversation_id))
    return queryset.select_related("sender").order_by("-created_at", "-pk").distinct()


def unread_counts(user: User | int) -> dict:
    """Unread messages per conversation, plus the total."""

    user_id = _user_id(user)
    rows = (
        Message.objects.filter(conversation__participants=user_id, is_deleted=False)
        .exclude(sender_id=user_id)
        .exclude(status=Message.Status.READ)
        .values("conversation_id")
        .annotate(count=Count("pk", distinct=True))
    )
    by_conversation = {row["conversation_id"]: row["count"] for row in rows}
    return {"total": sum(by_conversation.values()), "by_conversation": by_conversation}
