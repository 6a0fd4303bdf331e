"""Notification dispatch: persist first, then attempt a live push.

Business workflows (follow, collaboration, ...) call :func:`notify` and never
reach into the socket layer. The realtime app installs the concrete
publisher at startup; until then :class:`NullPublisher` reports every
recipient as offline, so notifications are still stored and fetched on the
next poll.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

from django.db import transaction

from collab_hub.core.errors import ValidationError
from collab_hub.notifications.models import Notification

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Callable

    from collab_hub.users.models import User

logger = logging.getLogger(__name__)


class NotificationPublisher(Protocol):
    def is_online(self, user_id: int) -> bool: ...

    def publish_notification(self, notification: Notification, unread_count: int) -> bool: ...

    def publish_to_user(self, user_id: int, event: str, payload: dict[str, Any]) -> bool: ...


class NullPublisher:
    def is_online(self, user_id: int) -> bool:
        return False

    def publish_notification(self, notification: Notification, unread_count: int) -> bool:
        return False

    def publish_to_user(self, user_id: int, event: str, payload: dict[str, Any]) -> bool:
        return False


_publisher: NotificationPublisher = NullPublisher()


def install_publisher(publisher: NotificationPublisher) -> NotificationPublisher:
    """Install the live publisher; returns the previous one."""

    global _publisher  # noqa: PLW0603
    previous = _publisher
    _publisher = publisher
    return previous


def get_publisher() -> NotificationPublisher:
    return _publisher


@dataclass(frozen=True)
class DispatchResult:
    notification: Notification
    unread_count: int
    live_delivery: bool
    persisted: bool = True

    def as_status(self) -> dict[str, bool]:
        return {"sent": self.live_delivery, "stored": self.persisted}


def _user_id(user: User | int) -> int:
    return int(getattr(user, "pk", user))


def deliver_after_commit(push: Callable[[], bool], description: str) -> bool:
    """Run a live push once the current transaction commits.

    Outside a transaction the push runs straight away and its outcome is
    returned. Inside one (``ATOMIC_REQUESTS``) it is deferred with
    ``on_commit`` and ``True`` is returned; a failure at that point is only
    logged, and a rollback drops the push altogether.
    """

    def run() -> bool:
        try:
            return bool(push())
        except Exception:
            # Stored already; the recipient picks it up on the next fetch.
            logger.exception("Live delivery of %s failed", description)
            return False

    if not transaction.get_connection().in_atomic_block:
        return run()
    transaction.on_commit(run)
    return True


def notify(  # noqa: PLR0913
    recipient: User | int,
    sender: User | int,
    notification_type: str,
    message: str,
    related_data: dict[str, Any] | None = None,
    *,
    publisher: NotificationPublisher | None = None,
) -> DispatchResult:
    """Persist a notification and push it live if the recipient is online.

    Not idempotent: calling twice for one logical event stores two rows.
    """

    if notification_type not in Notification.Type.values:
        msg = f"Unknown notification type: {notification_type!r}"
        raise ValidationError(msg)
    if not message:
        msg = "Notification message is required."
        raise ValidationError(msg)

    recipient_id = _user_id(recipient)
    notification = Notification.objects.create(
        recipient_id=recipient_id,
        sender_id=_user_id(sender),
        notification_type=notification_type,
        message=message,
        related_data=related_data or {},
    )
    unread_count = Notification.objects.unread_count(recipient_id)

    publisher = publisher or get_publisher()
    live_delivery = False
    if publisher.is_online(recipient_id):
        live_delivery = deliver_after_commit(
            partial(publisher.publish_notification, notification, unread_count),
            f"notification {notification.pk} to user {recipient_id}",
        )
    else:
        logger.debug("User %s offline; notification %s stored", recipient_id, notification.pk)

    return DispatchResult(
        notification=notification,
        unread_count=unread_count,
        live_delivery=live_delivery,
    )
