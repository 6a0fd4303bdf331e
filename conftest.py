import pytest
from rest_framework.test import APIClient

from collab_hub.notifications.dispatch import install_publisher
from collab_hub.realtime.events.notifications import HubPublisher
from collab_hub.realtime.hub import RealtimeHub
from tests.factories import RecordingTransport
from tests.factories import create_user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def alice(db):
    return create_user("alice", first_name="Alice", last_name="Adams")


@pytest.fixture
def bob(db):
    return create_user("bob", first_name="Bob", last_name="Brown")


@pytest.fixture
def carol(db):
    return create_user("carol", first_name="Carol", last_name="Clark")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def hub(transport):
    return RealtimeHub(transport=transport)


@pytest.fixture
def live_hub(hub):
    """``hub`` installed as the live side of ``notify()`` for the test."""

    previous = install_publisher(HubPublisher(hub))
    yield hub
    install_publisher(previous)
