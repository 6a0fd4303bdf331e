from django.contrib import admin

from collab_hub.notifications import models


@admin.register(models.Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["id", "recipient", "sender", "notification_type", "is_read"]
    search_fields = ["message", "notification_type"]
    list_filter = ["notification_type", "is_read", "created_at"]
    raw_id_fields = ["recipient", "sender"]
