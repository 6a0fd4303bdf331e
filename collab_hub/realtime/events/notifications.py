"""Live side of notification dispatch.

:class:`HubPublisher` is what ``collab_hub.notifications.dispatch.notify``
talks to once the realtime app is ready. ``notify`` runs in sync Django code,
so pushes are bridged onto the hub with ``async_to_sync``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from asgiref.sync import async_to_sync

from collab_hub.notifications.api.serializers import NotificationSerializer

if TYPE_CHECKING:  # import for type checking only
    from collab_hub.notifications.models import Notification
    from collab_hub.realtime.hub import RealtimeHub

logger = logging.getLogger(__name__)

NEW_NOTIFICATION = "newNotification"


def build_notification_payload(notification: Notification, unread_count: int) -> dict[str, Any]:
    return {
        "notification": NotificationSerializer(notification).data,
        "unreadCount": unread_count,
    }


class HubPublisher:
    def __init__(self, hub: RealtimeHub) -> None:
        self.hub = hub

    def is_online(self, user_id: int) -> bool:
        return self.hub.is_online(user_id)

    def publish_notification(self, notification: Notification, unread_count: int) -> bool:
        payload = build_notification_payload(notification, unread_count)
        return self.publish_to_user(notification.recipient_id, NEW_NOTIFICATION, payload)

    def publish_to_user(self, user_id: int, event: str, payload: dict[str, Any]) -> bool:
        if not self.is_online(user_id):
            return False
        return bool(async_to_sync(self.hub.push_to_user)(user_id, event, payload))
