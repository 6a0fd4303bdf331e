from datetime import timedelta

import pytest
from django.utils import timezone

from collab_hub.notifications.models import Notification
from collab_hub.notifications.tasks import cleanup_read_notifications
from collab_hub.notifications.tasks import purge_expired_notifications

pytestmark = pytest.mark.django_db


def make(recipient, sender, *, age_days, is_read=False):
    return Notification.objects.create(
        recipient=recipient,
        sender=sender,
        notification_type=Notification.Type.MESSAGE,
        message="m",
        is_read=is_read,
        created_at=timezone.now() - timedelta(days=age_days),
    )


def test_purge_expired(alice, bob):
    fresh = make(bob, alice, age_days=1)
    make(bob, alice, age_days=40)
    make(bob, alice, age_days=31, is_read=True)

    assert purge_expired_notifications.apply().get() == 2
    assert list(Notification.objects.all()) == [fresh]


def test_cleanup_read_keeps_unread(alice, bob):
    make(bob, alice, age_days=1, is_read=True)
    old_unread = make(bob, alice, age_days=45)
    make(bob, alice, age_days=45, is_read=True)

    assert cleanup_read_notifications() == 1
    assert Notification.objects.count() == 2
    assert Notification.objects.filter(pk=old_unread.pk).exists()


def test_expires_at(alice, bob):
    note = make(bob, alice, age_days=0)
    assert note.expires_at - note.created_at == timedelta(days=30)
