from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from collab_hub.core.api import envelope
from collab_hub.messaging import services
from collab_hub.messaging.models import Conversation
from collab_hub.messaging.models import Message

from .serializers import ConversationSerializer
from .serializers import DirectConversationSerializer
from .serializers import MarkReadSerializer
from .serializers import MessageCreateSerializer
from .serializers import MessageSerializer
from .serializers import MessageUpdateSerializer


def _positive_int(value, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


@extend_schema_view(
    list=extend_schema(tags=["Messaging"]),
    direct=extend_schema(tags=["Messaging"], request=DirectConversationSerializer),
    messages=extend_schema(tags=["Messaging"], request=MessageCreateSerializer),
    read=extend_schema(tags=["Messaging"], request=MarkReadSerializer),
)
class ConversationViewSet(mixins.ListModelMixin, GenericViewSet):
    """Conversations of the authenticated user.

    Request/response only: nothing here pushes over the live channel.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ConversationSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Conversation.objects.none()
        return services.user_conversations(self.request.user)

    @action(detail=False, methods=["post"])
    def direct(self, request):
        serializer = DirectConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        conversation = services.find_or_create_direct_conversation(
            request.user,
            serializer.validated_data["recipient_id"],
        )
        conversation = self.get_queryset().get(pk=conversation.pk)
        return Response(
            envelope(conversation=ConversationSerializer(conversation, context={"request": request}).data)
        )

    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        conversation = services.get_conversation_for(request.user, pk)
        if request.method == "POST":
            return self._send(request, conversation)

        page = services.list_messages(
            conversation,
            request.user,
            page=_positive_int(request.query_params.get("page"), 1),
            limit=min(
                _positive_int(request.query_params.get("limit"), settings.MESSAGES_PAGE_SIZE),
                100,
            ),
        )
        return Response(
            envelope(
                messages=MessageSerializer(page.messages, many=True).data,
                pagination={
                    "page": page.page,
                    "limit": page.limit,
                    "total": page.total,
                    "has_more": page.has_more,
                },
            )
        )

    def _send(self, request, conversation):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        message = services.create_message(
            conversation,
            request.user,
            data["content"],
            data["type"],
            file_name=data["file_name"],
            file_size=data["file_size"],
            file_url=data["file_url"],
        )
        return Response(
            envelope(message=MessageSerializer(message).data),
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["patch"])
    def read(self, request, pk=None):
        conversation = services.get_conversation_for(request.user, pk)
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = services.mark_read(
            conversation,
            request.user,
            serializer.validated_data.get("message_ids"),
        )
        return Response(envelope(updated=len(updated), message_ids=updated))


@extend_schema_view(
    partial_update=extend_schema(tags=["Messaging"], request=MessageUpdateSerializer),
    destroy=extend_schema(tags=["Messaging"]),
    search=extend_schema(
        tags=["Messaging"],
        parameters=[
            OpenApiParameter("query", str),
            OpenApiParameter("conversation_id", int),
        ],
    ),
    unread_count=extend_schema(tags=["Messaging"]),
)
class MessageViewSet(GenericViewSet):
    """Edit, soft-delete and search messages."""

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Message.objects.none()
        return (
            Message.objects.filter(
                conversation__participants=self.request.user,
                is_deleted=False,
            )
            .select_related("sender")
            .distinct()
        )

    def partial_update(self, request, pk=None):
        serializer = MessageUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.edit_message(pk, request.user, serializer.validated_data["content"])
        return Response(envelope(message=MessageSerializer(message).data))

    def destroy(self, request, pk=None):
        services.delete_message(pk, request.user)
        return Response(envelope(message="Message deleted successfully"))

    @action(detail=False, methods=["get"])
    def search(self, request):
        queryset = services.search_messages(
            request.user,
            request.query_params.get("query") or request.query_params.get("q"),
            request.query_params.get("conversation_id"),
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(self.get_serializer(page, many=True).data)

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        counts = services.unread_counts(request.user)
        return Response(
            envelope(
                total_unread=counts["total"],
                conversations={str(k): v for k, v in counts["by_conversation"].items()},
            )
        )
