from django.contrib import admin

from collab_hub.messaging import models


@admin.register(models.Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ["id", "kind", "name", "last_activity"]
    list_filter = ["kind"]
    filter_horizontal = ["participants"]
    raw_id_fields = ["last_message", "created_by"]


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["id", "conversation", "sender", "message_type", "status", "is_deleted"]
    search_fields = ["content"]
    list_filter = ["message_type", "status", "is_deleted", "created_at"]
    raw_id_fields = ["conversation", "sender"]
