"""Follow workflows.

Following a user stores a ``follow`` notification through the dispatch port;
the caller learns whether it was also pushed live.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db import transaction
from django.db.models import OuterRef
from django.db.models import Subquery
from django.utils import timezone

from collab_hub.core.errors import ConflictError
from collab_hub.core.errors import NotFoundError
from collab_hub.core.errors import ValidationError
from collab_hub.follows.models import Follow
from collab_hub.notifications.dispatch import DispatchResult
from collab_hub.notifications.dispatch import deliver_after_commit
from collab_hub.notifications.dispatch import get_publisher
from collab_hub.notifications.dispatch import notify
from collab_hub.notifications.models import Notification
from collab_hub.users.models import User

if TYPE_CHECKING:  # import for type checking only
    from django.db.models import QuerySet


@dataclass(frozen=True)
class FollowOutcome:
    follow: Follow
    target: User
    dispatch: DispatchResult


@dataclass(frozen=True)
class UnfollowOutcome:
    target: User
    live_delivery: bool


def _get_target(actor: User, target_id: int | str | None, verb: str) -> User:
    try:
        target_pk = int(target_id)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        msg = "Invalid user ID"
        raise ValidationError(msg) from None
    if target_pk == actor.pk:
        msg = f"You cannot {verb} yourself"
        raise ValidationError(msg)
    try:
        return User.objects.get(pk=target_pk, is_active=True)
    except User.DoesNotExist:
        msg = "User not found"
        raise NotFoundError(msg) from None


def follow_user(actor: User, target_id: int | str | None) -> FollowOutcome:
    target = _get_target(actor, target_id, "follow")
    try:
        with transaction.atomic():
            follow = Follow.objects.create(follower=actor, following=target)
    except IntegrityError:
        msg = "Already following this user"
        raise ConflictError(msg) from None

    dispatch = notify(
        recipient=target,
        sender=actor,
        notification_type=Notification.Type.FOLLOW,
        message=f"{actor.display_name} started following you",
        related_data={
            "followerId": actor.pk,
            "followerName": actor.display_name,
            "followerAvatar": actor.avatar or None,
        },
    )
    return FollowOutcome(follow=follow, target=target, dispatch=dispatch)


def unfollow_user(actor: User, target_id: int | str | None) -> UnfollowOutcome:
    target = _get_target(actor, target_id, "unfollow")
    deleted, _ = Follow.objects.filter(follower=actor, following=target).delete()
    if not deleted:
        msg = "Not following this user"
        raise NotFoundError(msg)

    # The original follow notification no longer describes anything
    Notification.objects.filter(
        recipient=target,
        sender=actor,
        notification_type=Notification.Type.FOLLOW,
    ).delete()

    publisher = get_publisher()
    live_delivery = False
    if publisher.is_online(target.pk):
        payload = {
            "unfollowedBy": {
                "id": actor.pk,
                "fullname": actor.display_name,
                "avatar": actor.avatar or None,
            },
            "message": f"{actor.display_name} unfollowed you",
            "unreadCount": Notification.objects.unread_count(target.pk),
            "timestamp": timezone.now().isoformat(),
        }
        live_delivery = deliver_after_commit(
            partial(publisher.publish_to_user, target.pk, "userUnfollowed", payload),
            f"unfollow event to user {target.pk}",
        )
    return UnfollowOutcome(target=target, live_delivery=live_delivery)


def followers_of(user_id: int) -> QuerySet[User]:
    followed_at = Follow.objects.filter(
        following_id=user_id, follower=OuterRef("pk")
    ).values("created_at")[:1]
    return (
        User.objects.filter(following_set__following_id=user_id)
        .annotate(followed_at=Subquery(followed_at))
        .order_by("-followed_at", "-pk")
    )


def following_of(user_id: int) -> QuerySet[User]:
    followed_at = Follow.objects.filter(
        follower_id=user_id, following=OuterRef("pk")
    ).values("created_at")[:1]
    return (
        User.objects.filter(follower_set__follower_id=user_id)
        .annotate(followed_at=Subquery(followed_at))
        .order_by("-followed_at", "-pk")
    )


def follow_counts(user_id: int) -> dict[str, int]:
    return {
        "followers": Follow.objects.filter(following_id=user_id).count(),
        "following": Follow.objects.filter(follower_id=user_id).count(),
    }


def is_following(actor: User, target_id: int) -> bool:
    return Follow.objects.filter(follower=actor, following_id=target_id).exists()
