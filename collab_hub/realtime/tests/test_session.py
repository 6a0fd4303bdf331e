import pytest

from collab_hub.realtime.session import ConnectionSession
from collab_hub.realtime.session import InvalidTransition
from collab_hub.realtime.session import SessionState


def test_happy_path():
    session = ConnectionSession(sid="s1")
    assert session.state is SessionState.CONNECTING

    session.authenticate(5, "Eve")
    assert session.state is SessionState.AUTHENTICATED
    assert session.identity == 5

    session.advance(SessionState.ACTIVE)
    assert session.is_active

    session.advance(SessionState.CLOSED)
    assert session.is_closed


def test_failed_handshake_goes_straight_to_closed():
    session = ConnectionSession(sid="s1")
    session.advance(SessionState.CLOSED)
    assert session.is_closed


@pytest.mark.parametrize(
    ("start", "target"),
    [
        (SessionState.CONNECTING, SessionState.ACTIVE),
        (SessionState.ACTIVE, SessionState.AUTHENTICATED),
        (SessionState.CLOSED, SessionState.ACTIVE),
        (SessionState.CLOSED, SessionState.CLOSED),
    ],
)
def test_illegal_transitions_are_rejected(start, target):
    session = ConnectionSession(sid="s1", state=start)
    with pytest.raises(InvalidTransition):
        session.advance(target)
    assert session.state is start
