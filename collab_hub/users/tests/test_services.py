import pytest

from collab_hub.core.errors import ValidationError
from collab_hub.users import services
from collab_hub.users.models import User

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize("value", ["active", "inactive", "busy"])
def test_valid_statuses(value):
    assert services.validate_status(value) == value


@pytest.mark.parametrize("value", ["away", "", None, 3, "ACTIVE"])
def test_invalid_statuses(value):
    with pytest.raises(ValidationError):
        services.validate_status(value)


def test_online_offline_round(alice):
    before = alice.last_active

    services.mark_online(alice.pk)
    alice.refresh_from_db()
    assert alice.status == User.Status.ACTIVE

    services.mark_offline(alice.pk)
    alice.refresh_from_db()
    assert alice.status == User.Status.INACTIVE
    assert alice.last_active >= before


def test_set_status(alice):
    assert services.set_status(alice.pk, "busy") == 1
    alice.refresh_from_db()
    assert alice.status == User.Status.BUSY


def test_display_name_falls_back_to_username(db):
    user = User.objects.create_user(username="nameless", email="n@example.com", password="x")  # noqa: S106
    assert user.display_name == "nameless"
    user.first_name, user.last_name = "Nia", "Long"
    user.save()
    assert user.name == "Nia Long"
