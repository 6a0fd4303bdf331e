from __future__ import annotations

from rest_framework import serializers

from collab_hub.messaging.models import Conversation
from collab_hub.messaging.models import Message
from collab_hub.users.api.serializers import UserSummarySerializer


class MessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)
    type = serializers.CharField(source="message_type", read_only=True)

    class Meta:
        model = Message
        fields = (
            "id",
            "conversation",
            "sender",
            "content",
            "type",
            "status",
            "file_name",
            "file_size",
            "file_url",
            "is_edited",
            "edited_at",
            "created_at",
        )
        read_only_fields = fields


class LastMessageSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source="message_type", read_only=True)
    text = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = ("id", "sender", "type", "text", "created_at")
        read_only_fields = fields

    def get_text(self, obj: Message) -> str:
        if obj.is_deleted:
            return "Message deleted"
        if obj.message_type == Message.Type.FILE:
            return obj.file_name or "File"
        return obj.content


class ConversationSerializer(serializers.ModelSerializer):
    """Conversation as seen by the requesting user."""

    participants = UserSummarySerializer(many=True, read_only=True)
    last_message = LastMessageSerializer(read_only=True)
    unread_count = serializers.IntegerField(read_only=True, default=0)
    display_name = serializers.SerializerMethodField()
    is_online = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = (
            "id",
            "kind",
            "name",
            "participants",
            "display_name",
            "is_online",
            "last_message",
            "last_activity",
            "unread_count",
            "created_at",
        )
        read_only_fields = fields

    def _other(self, obj: Conversation):
        request = self.context.get("request")
        user_id = getattr(getattr(request, "user", None), "pk", None)
        for participant in obj.participants.all():
            if participant.pk != user_id:
                return participant
        return None

    def get_display_name(self, obj: Conversation) -> str:
        if obj.kind == Conversation.Kind.GROUP:
            return obj.name
        other = self._other(obj)
        return other.display_name if other else obj.name

    def get_is_online(self, obj: Conversation) -> bool:
        other = self._other(obj)
        return bool(other and other.status == other.Status.ACTIVE)


class DirectConversationSerializer(serializers.Serializer):
    recipient_id = serializers.IntegerField(min_value=1)


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(choices=Message.Type.choices, default=Message.Type.TEXT)
    file_name = serializers.CharField(required=False, allow_blank=True, default="")
    file_size = serializers.CharField(required=False, allow_blank=True, default="")
    file_url = serializers.URLField(required=False, allow_blank=True, default="")


class MessageUpdateSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=False, trim_whitespace=True)


class MarkReadSerializer(serializers.Serializer):
    message_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        allow_empty=True,
    )
