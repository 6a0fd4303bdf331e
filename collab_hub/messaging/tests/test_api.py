import pytest
from rest_framework import status

from collab_hub.messaging import services
from collab_hub.messaging.models import Message

pytestmark = pytest.mark.django_db

API = "/api/v1"


@pytest.fixture
def conversation(alice, bob):
    return services.find_or_create_direct_conversation(alice, bob)


def test_requires_authentication(api_client):
    r = api_client.get(f"{API}/conversations/")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.data["success"] is False


def test_create_direct_conversation_is_idempotent(api_client, alice, bob):
    api_client.force_authenticate(user=alice)
    first = api_client.post(f"{API}/conversations/direct/", {"recipient_id": bob.pk}, format="json")
    api_client.force_authenticate(user=bob)
    second = api_client.post(f"{API}/conversations/direct/", {"recipient_id": alice.pk}, format="json")

    assert first.status_code == status.HTTP_200_OK, first.data
    assert first.data["success"] is True
    assert first.data["conversation"]["id"] == second.data["conversation"]["id"]
    assert first.data["conversation"]["display_name"] == "Bob Brown"
    assert second.data["conversation"]["display_name"] == "Alice Adams"


def test_direct_conversation_with_self(api_client, alice):
    api_client.force_authenticate(user=alice)
    r = api_client.post(f"{API}/conversations/direct/", {"recipient_id": alice.pk}, format="json")
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.data == {"success": False, "message": "Cannot create conversation with yourself"}


def test_direct_conversation_missing_recipient(api_client, alice):
    api_client.force_authenticate(user=alice)
    r = api_client.post(f"{API}/conversations/direct/", {}, format="json")
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.data["message"] == "Invalid request data"
    assert "recipient_id" in r.data["detail"]


def test_send_and_list_messages(api_client, conversation, alice, bob):
    api_client.force_authenticate(user=alice)
    r = api_client.post(
        f"{API}/conversations/{conversation.pk}/messages/",
        {"content": "hi bob"},
        format="json",
    )
    assert r.status_code == status.HTTP_201_CREATED, r.data
    assert r.data["message"]["status"] == Message.Status.SENT
    assert r.data["message"]["sender"]["id"] == alice.pk

    api_client.force_authenticate(user=bob)
    r = api_client.get(f"{API}/conversations/{conversation.pk}/messages/")
    assert r.status_code == status.HTTP_200_OK
    assert [m["content"] for m in r.data["messages"]] == ["hi bob"]
    assert r.data["messages"][0]["status"] == Message.Status.READ
    assert r.data["pagination"] == {"page": 1, "limit": 50, "total": 1, "has_more": False}


def test_empty_message_is_rejected(api_client, conversation, alice):
    api_client.force_authenticate(user=alice)
    r = api_client.post(f"{API}/conversations/{conversation.pk}/messages/", {"content": ""}, format="json")
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.data["message"] == "empty message"


def test_outsider_cannot_read_conversation(api_client, conversation, carol):
    api_client.force_authenticate(user=carol)
    r = api_client.get(f"{API}/conversations/{conversation.pk}/messages/")
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.data["success"] is False


def test_list_conversations_with_unread(api_client, conversation, alice, bob):
    services.create_message(conversation, alice, "one")
    services.create_message(conversation, alice, "two")
    api_client.force_authenticate(user=bob)

    r = api_client.get(f"{API}/conversations/")

    assert r.status_code == status.HTTP_200_OK
    assert r.data["success"] is True
    [row] = r.data["results"]
    assert row["unread_count"] == 2
    assert row["last_message"]["text"] == "two"
    assert r.data["pagination"]["total"] == 1


def test_mark_conversation_read(api_client, conversation, alice, bob):
    message = services.create_message(conversation, alice, "read me")
    api_client.force_authenticate(user=bob)

    r = api_client.patch(f"{API}/conversations/{conversation.pk}/read/", {}, format="json")

    assert r.status_code == status.HTTP_200_OK
    assert r.data["message_ids"] == [message.pk]
    message.refresh_from_db()
    assert message.status == Message.Status.READ


def test_edit_message_by_other_user_is_forbidden(api_client, conversation, alice, bob):
    message = services.create_message(conversation, alice, "mine")
    api_client.force_authenticate(user=bob)

    r = api_client.patch(f"{API}/messages/{message.pk}/", {"content": "ours"}, format="json")

    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.data["message"] == "You can only edit your own messages"
    message.refresh_from_db()
    assert message.content == "mine"


def test_edit_and_delete_own_message(api_client, conversation, alice):
    message = services.create_message(conversation, alice, "typo")
    api_client.force_authenticate(user=alice)

    r = api_client.patch(f"{API}/messages/{message.pk}/", {"content": "fixed"}, format="json")
    assert r.status_code == status.HTTP_200_OK
    assert r.data["message"]["is_edited"] is True

    r = api_client.delete(f"{API}/messages/{message.pk}/")
    assert r.status_code == status.HTTP_200_OK
    assert r.data["success"] is True
    assert Message.objects.get(pk=message.pk).is_deleted is True


def test_search_and_unread_count(api_client, conversation, alice, bob):
    services.create_message(conversation, alice, "Release notes are ready")
    services.create_message(conversation, alice, "coffee?")
    api_client.force_authenticate(user=bob)

    r = api_client.get(f"{API}/messages/search/", {"query": "release"})
    assert r.status_code == status.HTTP_200_OK
    assert [m["content"] for m in r.data["results"]] == ["Release notes are ready"]

    r = api_client.get(f"{API}/messages/unread-count/")
    assert r.data["total_unread"] == 2
    assert r.data["conversations"] == {str(conversation.pk): 2}
