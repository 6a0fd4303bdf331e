from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


def direct_key_for(user_a_id: int, user_b_id: int) -> str:
    """Order-independent key identifying the direct conversation of a pair."""

    low, high = sorted((int(user_a_id), int(user_b_id)))
    return f"{low}:{high}"


class Conversation(models.Model):
    class Kind(models.TextChoices):
        DIRECT = "direct", _("Direct")
        GROUP = "group", _("Group")

    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="conversations",
    )
    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.DIRECT)
    name = models.CharField(max_length=255, blank=True)
    # Only set for direct conversations; the unique index collapses concurrent
    # first-contact creates for the same pair onto one row.
    direct_key = models.CharField(max_length=64, unique=True, null=True, blank=True)
    last_message = models.ForeignKey(
        "messaging.Message",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    last_activity = models.DateTimeField(default=timezone.now, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-last_activity"]

    def __str__(self):
        return f"{self.kind} conversation {self.pk}"

    def has_participant(self, user_id: int) -> bool:
        return self.participants.filter(pk=user_id).exists()

    def participant_ids(self) -> list[int]:
        return list(self.participants.values_list("pk", flat=True))


class Message(models.Model):
    class Type(models.TextChoices):
        TEXT = "text", _("Text")
        IMAGE = "image", _("Image")
        FILE = "file", _("File")
        CODE = "code", _("Code")
        LINK = "link", _("Link")

    class Status(models.TextChoices):
        SENT = "sent", _("Sent")
        DELIVERED = "delivered", _("Delivered")
        READ = "read", _("Read")

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    content = models.TextField(blank=True)
    message_type = models.CharField(max_length=10, choices=Type.choices, default=Type.TEXT)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.SENT)

    file_name = models.CharField(max_length=255, blank=True)
    file_size = models.CharField(max_length=50, blank=True)
    file_url = models.URLField(max_length=500, blank=True)

    is_edited = models.BooleanField(default=False)
    edited_at = models.DateTimeField(null=True, blank=True)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-pk"]
        indexes = [
            models.Index(
                fields=["conversation", "-created_at"],
                name="msg_conversation_created_idx",
            ),
            models.Index(fields=["status"], name="msg_status_idx"),
        ]

    def __str__(self):
        return f"Message {self.pk} in {self.conversation_id}"
