"""Presence-status writes against the user table.

These are plain ORM updates so they can be called from sync views or wrapped
with ``database_sync_to_async`` by the realtime hub.
"""

from __future__ import annotations

from django.utils import timezone

from collab_hub.core.errors import ValidationError
from collab_hub.users.models import User

STATUS_VALUES = frozenset(User.Status.values)


def validate_status(status: object) -> str:
    if not isinstance(status, str) or status not in STATUS_VALUES:
        allowed = ", ".join(sorted(STATUS_VALUES))
        msg = f"Invalid status. Expected one of: {allowed}."
        raise ValidationError(msg)
    return status


def set_status(user_id: int, status: str) -> int:
    status = validate_status(status)
    return User.objects.filter(pk=user_id).update(status=status)


def mark_online(user_id: int) -> int:
    return User.objects.filter(pk=user_id).update(
        status=User.Status.ACTIVE,
        last_active=timezone.now(),
    )


def mark_offline(user_id: int) -> int:
    return User.objects.filter(pk=user_id).update(
        status=User.Status.INACTIVE,
        last_active=timezone.now(),
    )
