import pytest

from collab_hub.core.errors import ConflictError
from collab_hub.core.errors import NotFoundError
from collab_hub.core.errors import ValidationError
from collab_hub.follows import services
from collab_hub.follows.models import Follow
from collab_hub.notifications.models import Notification

pytestmark = pytest.mark.django_db


def test_follow_stores_notification(alice, bob):
    outcome = services.follow_user(alice, bob.pk)

    assert outcome.follow.following == bob
    assert outcome.dispatch.persisted is True
    note = Notification.objects.get(recipient=bob)
    assert note.notification_type == Notification.Type.FOLLOW
    assert note.message == "Alice Adams started following you"
    assert note.related_data["followerId"] == alice.pk


def test_follow_rules(alice, bob):
    with pytest.raises(ValidationError):
        services.follow_user(alice, alice.pk)
    with pytest.raises(ValidationError):
        services.follow_user(alice, "abc")
    with pytest.raises(NotFoundError):
        services.follow_user(alice, 999_999)

    services.follow_user(alice, bob.pk)
    with pytest.raises(ConflictError):
        services.follow_user(alice, bob.pk)
    assert Follow.objects.count() == 1


def test_unfollow_removes_follow_and_notification(alice, bob):
    services.follow_user(alice, bob.pk)

    outcome = services.unfollow_user(alice, bob.pk)

    assert outcome.live_delivery is False
    assert not Follow.objects.exists()
    assert not Notification.objects.filter(recipient=bob).exists()
    with pytest.raises(NotFoundError):
        services.unfollow_user(alice, bob.pk)


def test_listings_and_counts(alice, bob, carol):
    services.follow_user(alice, bob.pk)
    services.follow_user(carol, bob.pk)
    services.follow_user(bob, alice.pk)

    assert [u.username for u in services.followers_of(bob.pk)] == ["carol", "alice"]
    assert [u.username for u in services.following_of(bob.pk)] == ["alice"]
    assert services.follow_counts(bob.pk) == {"followers": 2, "following": 1}
    assert services.is_following(alice, bob.pk) is True
    assert services.is_following(bob, carol.pk) is False
