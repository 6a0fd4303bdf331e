from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from collab_hub.notifications.models import Notification

pytestmark = pytest.mark.django_db

URL = "/api/v1/notifications/"


def make(recipient, sender, n=1, **extra):
    return [
        Notification.objects.create(
            recipient=recipient,
            sender=sender,
            notification_type=Notification.Type.FOLLOW,
            message=f"note {i}",
            **extra,
        )
        for i in range(n)
    ]


def test_list_is_scoped_and_paginated(api_client, alice, bob):
    make(bob, alice, 3)
    make(alice, bob, 1)
    api_client.force_authenticate(user=bob)

    r = api_client.get(URL, {"limit": 2})

    assert r.status_code == status.HTTP_200_OK
    assert r.data["success"] is True
    assert len(r.data["results"]) == 2
    assert r.data["unread_count"] == 3
    assert r.data["pagination"]["total"] == 3
    assert r.data["pagination"]["has_more"] is True
    assert r.data["results"][0]["sender"]["username"] == "alice"


def test_expired_notifications_are_hidden(api_client, alice, bob):
    make(bob, alice, 1, created_at=timezone.now() - timedelta(days=31))
    api_client.force_authenticate(user=bob)

    r = api_client.get(URL)

    assert r.data["results"] == []
    assert r.data["unread_count"] == 0


def test_mark_read_decrements_by_one(api_client, alice, bob):
    first, _ = make(bob, alice, 2)
    api_client.force_authenticate(user=bob)

    r = api_client.post(f"{URL}{first.pk}/mark-read/")

    assert r.status_code == status.HTTP_200_OK
    assert r.data["notification"]["is_read"] is True
    assert r.data["unread_count"] == 1


def test_mark_all_read(api_client, alice, bob):
    make(bob, alice, 4)
    api_client.force_authenticate(user=bob)

    r = api_client.post(f"{URL}mark-all-read/")
    assert r.data["updated"] == 4

    r = api_client.get(f"{URL}unread-count/")
    assert r.data == {"success": True, "unread_count": 0}


def test_cannot_touch_someone_elses_notification(api_client, alice, bob):
    [note] = make(bob, alice)
    api_client.force_authenticate(user=alice)

    r = api_client.delete(f"{URL}{note.pk}/")

    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.data["success"] is False
    assert Notification.objects.filter(pk=note.pk).exists()


def test_delete(api_client, alice, bob):
    [note] = make(bob, alice)
    api_client.force_authenticate(user=bob)

    r = api_client.delete(f"{URL}{note.pk}/")

    assert r.status_code == status.HTTP_200_OK
    assert not Notification.objects.filter(pk=note.pk).exists()


def test_filter_by_read_state(api_client, alice, bob):
    read, unread = make(bob, alice, 2)
    read.is_read = True
    read.save(update_fields=["is_read"])
    api_client.force_authenticate(user=bob)

    r = api_client.get(URL, {"is_read": "false"})

    assert [n["id"] for n in r.data["results"]] == [unread.pk]
