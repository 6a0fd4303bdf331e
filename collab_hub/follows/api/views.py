from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from collab_hub.core.api import envelope
from collab_hub.follows import services
from collab_hub.users.models import User

from .serializers import FollowUserSerializer


@extend_schema(tags=["Follows"])
class FollowView(APIView):
    """POST follows ``user_id``; DELETE unfollows."""

    permission_classes = [IsAuthenticated]

    def post(self, request, user_id: int):
        outcome = services.follow_user(request.user, user_id)
        data = {
            "follow_id": outcome.follow.pk,
            "followed_user": {
                **FollowUserSerializer(outcome.target).data,
                "stats": services.follow_counts(outcome.target.pk),
            },
            "notification": outcome.dispatch.as_status(),
        }
        return Response(
            envelope(message="Successfully followed user", data=data),
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request, user_id: int):
        outcome = services.unfollow_user(request.user, user_id)
        data = {
            "unfollowed_user": FollowUserSerializer(outcome.target).data,
            "stats": services.follow_counts(outcome.target.pk),
            "notification": {"sent": outcome.live_delivery, "removed": True},
        }
        return Response(envelope(message="Successfully unfollowed user", data=data))


@extend_schema(tags=["Follows"])
class FollowersView(ListAPIView):
    permission_classes = [AllowAny]
    serializer_class = FollowUserSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return User.objects.none()
        return services.followers_of(self.kwargs["user_id"])


@extend_schema(tags=["Follows"])
class FollowingView(ListAPIView):
    permission_classes = [AllowAny]
    serializer_class = FollowUserSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return User.objects.none()
        return services.following_of(self.kwargs["user_id"])


@extend_schema(tags=["Follows"])
class FollowStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        if user_id == request.user.pk:
            return Response(envelope(data={"is_following": False, "is_self": True}))
        return Response(
            envelope(
                data={
                    "is_following": services.is_following(request.user, user_id),
                    "is_self": False,
                },
            )
        )
