import pytest
from django.db import transaction

from collab_hub.core.errors import ValidationError
from collab_hub.notifications.dispatch import NullPublisher
from collab_hub.notifications.dispatch import notify
from collab_hub.notifications.models import Notification

pytestmark = pytest.mark.django_db


class FakePublisher:
    def __init__(self, *, online=True, fail=False):
        self.online = online
        self.fail = fail
        self.published = []

    def is_online(self, user_id):
        return self.online

    def publish_notification(self, notification, unread_count):
        if self.fail:
            msg = "socket closed"
            raise ConnectionError(msg)
        self.published.append((notification.pk, unread_count))
        return True

    def publish_to_user(self, user_id, event, payload):
        return True


def test_offline_recipient_is_stored_only(alice, bob):
    result = notify(bob, alice, Notification.Type.FOLLOW, "hi", publisher=NullPublisher())

    assert result.persisted is True
    assert result.live_delivery is False
    assert result.unread_count == 1
    assert result.as_status() == {"sent": False, "stored": True}
    assert Notification.objects.get().recipient == bob


def test_online_recipient_gets_fresh_unread_count(alice, bob, django_capture_on_commit_callbacks):
    publisher = FakePublisher()
    with django_capture_on_commit_callbacks(execute=True):
        notify(bob, alice, Notification.Type.MESSAGE, "one", publisher=publisher)
        result = notify(bob, alice, Notification.Type.MESSAGE, "two", publisher=publisher)

    assert result.live_delivery is True
    assert publisher.published[-1] == (result.notification.pk, 2)


def test_push_waits_for_commit(alice, bob, django_capture_on_commit_callbacks):
    publisher = FakePublisher()
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        result = notify(bob, alice, Notification.Type.FOLLOW, "hi", publisher=publisher)
        assert publisher.published == []

    assert len(callbacks) == 1
    assert publisher.published == [(result.notification.pk, 1)]


def test_rolled_back_notification_is_never_pushed(alice, bob, django_capture_on_commit_callbacks):
    publisher = FakePublisher()
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(RuntimeError), transaction.atomic():
            notify(bob, alice, Notification.Type.FOLLOW, "hi", publisher=publisher)
            msg = "view failed"
            raise RuntimeError(msg)

    assert callbacks == []
    assert publisher.published == []
    assert not Notification.objects.exists()


@pytest.mark.django_db(transaction=True)
def test_live_failure_outside_transaction_keeps_the_notification(alice, bob):
    result = notify(
        bob,
        alice,
        Notification.Type.PROJECT_UPDATE,
        "update",
        {"projectId": 3},
        publisher=FakePublisher(fail=True),
    )

    assert result.live_delivery is False
    assert Notification.objects.filter(pk=result.notification.pk).exists()
    assert result.notification.related_data == {"projectId": 3}


def test_deferred_live_failure_is_logged(alice, bob, django_capture_on_commit_callbacks, caplog):
    with django_capture_on_commit_callbacks(execute=True):
        result = notify(bob, alice, Notification.Type.FOLLOW, "hi", publisher=FakePublisher(fail=True))

    assert "Live delivery of notification" in caplog.text
    assert Notification.objects.filter(pk=result.notification.pk).exists()


def test_unread_count_tracks_notify_calls(alice, bob):
    for i in range(3):
        notify(bob, alice, Notification.Type.FOLLOW, f"n{i}", publisher=NullPublisher())
    assert Notification.objects.unread_count(bob.pk) == 3

    first = Notification.objects.for_recipient(bob.pk).first()
    first.is_read = True
    first.save(update_fields=["is_read"])
    assert Notification.objects.unread_count(bob.pk) == 2


def test_not_idempotent(alice, bob):
    notify(bob, alice, Notification.Type.FOLLOW, "same", publisher=NullPublisher())
    notify(bob, alice, Notification.Type.FOLLOW, "same", publisher=NullPublisher())
    assert Notification.objects.count() == 2


@pytest.mark.parametrize(("notification_type", "message"), [("poke", "hi"), ("follow", "")])
def test_rejects_bad_input(alice, bob, notification_type, message):
    with pytest.raises(ValidationError):
        notify(bob, alice, notification_type, message, publisher=NullPublisher())
    assert not Notification.objects.exists()
