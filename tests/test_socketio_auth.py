import pytest
from asgiref.sync import async_to_sync
from rest_framework_simplejwt.tokens import AccessToken

from collab_hub.realtime import socketio as binding
from collab_hub.realtime.session import SessionState
from collab_hub.realtime.socketio import _extract_token
from collab_hub.realtime.socketio import authenticate


def test_token_from_asgi_query_string():
    assert _extract_token({"query_string": b"EIO=4&token=abc"}, None) == "abc"


def test_token_from_wsgi_query_string():
    assert _extract_token({"QUERY_STRING": "token=xyz"}, None) == "xyz"


def test_token_from_auth_payload():
    assert _extract_token({}, {"token": "from-auth"}) == "from-auth"
    assert _extract_token({}, {"token": ""}) is None
    assert _extract_token({}, None) is None


@pytest.mark.django_db(transaction=True)
class TestAuthenticate:
    def test_missing_token(self):
        with pytest.raises(ConnectionRefusedError, match="unauthorized"):
            async_to_sync(authenticate)({}, None)

    def test_garbage_token(self):
        with pytest.raises(ConnectionRefusedError, match="unauthorized"):
            async_to_sync(authenticate)({}, {"token": "not-a-jwt"})

    def test_asgi_scope_is_unwrapped(self, alice):
        token = str(AccessToken.for_user(alice))
        environ = {"asgi.scope": {"query_string": f"EIO=4&token={token}".encode()}}
        assert async_to_sync(authenticate)(environ, None).pk == alice.pk

    def test_query_token_wins_over_auth_payload(self, alice, bob):
        token = str(AccessToken.for_user(alice))
        other = str(AccessToken.for_user(bob))
        user = async_to_sync(authenticate)({"QUERY_STRING": f"token={token}"}, {"token": other})
        assert user.pk == alice.pk

    def test_valid_token_resolves_user(self, alice):
        token = str(AccessToken.for_user(alice))
        user = async_to_sync(authenticate)({"QUERY_STRING": f"token={token}"}, None)
        assert user.pk == alice.pk

    def test_inactive_user_is_refused(self, alice):
        token = str(AccessToken.for_user(alice))
        alice.is_active = False
        alice.save(update_fields=["is_active"])
        with pytest.raises(ConnectionRefusedError, match="unauthorized"):
            async_to_sync(authenticate)({}, {"token": token})

    def test_connect_and_disconnect_drive_the_hub(self, alice):
        token = str(AccessToken.for_user(alice))

        async_to_sync(binding.connect)("sid-x", {"QUERY_STRING": f"token={token}"})
        assert binding.hub.registry.lookup(alice.pk) == "sid-x"

        async_to_sync(binding.disconnect)("sid-x")
        assert not binding.hub.is_online(alice.pk)
        alice.refresh_from_db()
        assert alice.status == "inactive"

    def test_refused_handshake_closes_the_pending_session(self, alice, monkeypatch):
        seen = []
        original = binding.hub.close_session

        async def recording_close(sid):
            session = binding.hub.sessions.get(sid)
            seen.append(session.state if session else None)
            return await original(sid)

        monkeypatch.setattr(binding.hub, "close_session", recording_close)
        with pytest.raises(ConnectionRefusedError, match="unauthorized"):
            async_to_sync(binding.connect)("sid-refused", {}, {"token": "not-a-jwt"})

        assert seen == [SessionState.CONNECTING]
        assert "sid-refused" not in binding.hub.sessions
        assert not binding.hub.is_online(alice.pk)


def test_every_routed_event_is_bound():
    bound = set(binding.sio.handlers["/"])
    assert set(binding.hub.router.events) <= bound
    assert {"connect", "disconnect"} <= bound
