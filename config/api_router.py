from django.conf import settings
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from collab_hub.follows.api.views import FollowersView
from collab_hub.follows.api.views import FollowingView
from collab_hub.follows.api.views import FollowStatusView
from collab_hub.follows.api.views import FollowView
from collab_hub.messaging.api.views import ConversationViewSet
from collab_hub.messaging.api.views import MessageViewSet
from collab_hub.notifications.api.views import NotificationViewSet
from collab_hub.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("conversations", ConversationViewSet, basename="conversations")
router.register("messages", MessageViewSet, basename="messages")
router.register("notifications", NotificationViewSet, basename="notifications")


app_name = "api"
urlpatterns = [
    path("follow/<int:user_id>/", FollowView.as_view(), name="follow"),
    path("followers/<int:user_id>/", FollowersView.as_view(), name="followers"),
    path("following/<int:user_id>/", FollowingView.as_view(), name="following"),
    path(
        "follow-status/<int:user_id>/",
        FollowStatusView.as_view(),
        name="follow-status",
    ),
    *router.urls,
]
