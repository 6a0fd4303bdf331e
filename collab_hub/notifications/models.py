from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


def retention_cutoff(now=None):
    """Rows created before this instant are past the retention window."""

    now = now or timezone.now()
    return now - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)


class NotificationQuerySet(models.QuerySet):
    def live(self):
        return self.filter(created_at__gte=retention_cutoff())

    def expired(self):
        return self.filter(created_at__lt=retention_cutoff())

    def for_recipient(self, user_id: int):
        return self.live().filter(recipient_id=user_id)

    def unread(self):
        return self.filter(is_read=False)

    def unread_count(self, user_id: int) -> int:
        return self.for_recipient(user_id).unread().count()


class Notification(models.Model):
    class Type(models.TextChoices):
        FOLLOW = "follow", _("Follow")
        PROJECT_INVITE = "project_invite", _("Project Invite")
        MESSAGE = "message", _("Message")
        PROJECT_UPDATE = "project_update", _("Project Update")
        COLLABORATION_REQUEST = "collaboration_request", _("Collaboration Request")
        COLLABORATION_ACCEPTED = "collaboration_accepted", _("Collaboration Accepted")
        COLLABORATION_REJECTED = "collaboration_rejected", _("Collaboration Rejected")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_notifications",
    )
    notification_type = models.CharField(max_length=50, choices=Type.choices)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    related_data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx"),
            models.Index(
                fields=["recipient", "-created_at"],
                name="notif_recipient_created_idx",
            ),
        ]

    def __str__(self):
        return f"{self.notification_type} - {self.recipient}"

    @property
    def expires_at(self):
        return self.created_at + timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
