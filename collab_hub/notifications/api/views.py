from __future__ import annotations

from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from collab_hub.core.api import envelope
from collab_hub.notifications.models import Notification

from .serializers import NotificationSerializer


@extend_schema_view(
    list=extend_schema(tags=["Notifications"]),
    destroy=extend_schema(tags=["Notifications"]),
    mark_read=extend_schema(tags=["Notifications"]),
    mark_all_read=extend_schema(tags=["Notifications"]),
    unread_count=extend_schema(tags=["Notifications"]),
)
class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Notifications for the authenticated user.

    - list: request.user's notifications, newest first, with the unread count
    - destroy: deletes a notification (recipient only)
    - mark_read / mark_all_read / unread_count
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer
    filterset_fields = ["is_read", "notification_type"]

    def get_queryset(self):
        return Notification.objects.for_recipient(self.request.user.pk).select_related(
            "sender"
        )

    def _unread_count(self) -> int:
        return Notification.objects.unread_count(self.request.user.pk)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        response = self.get_paginated_response(serializer.data)
        response.data["unread_count"] = self._unread_count()
        return response

    def destroy(self, request, *args, **kwargs):
        notification = self.get_object()
        notification.delete()
        return Response(envelope(message="Notification deleted successfully"))

    @action(detail=True, methods=["post", "put"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read"])
        return Response(
            envelope(
                notification=self.get_serializer(notification).data,
                unread_count=self._unread_count(),
            )
        )

    @action(detail=False, methods=["post", "put"], url_path="mark-all-read")
    def mark_all_read(self, request):
        updated = self.get_queryset().filter(is_read=False).update(is_read=True)
        return Response(envelope(updated=updated, unread_count=0))

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response(envelope(unread_count=self._unread_count()))
