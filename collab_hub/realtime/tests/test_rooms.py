from collab_hub.realtime.rooms import RoomMembership
from collab_hub.realtime.rooms import conversation_room
from collab_hub.realtime.rooms import personal_room
from collab_hub.realtime.session import ConnectionSession


def test_room_names():
    assert personal_room(7) == "user_7"
    assert conversation_room("12") == "conversation_12"


def test_join_is_idempotent():
    rooms = RoomMembership()
    session = ConnectionSession(sid="s1", identity=1)
    rooms.join(session, "conversation_1")
    rooms.join(session, "conversation_1")
    assert rooms.members("conversation_1") == ["s1"]
    assert rooms.rooms_of(session) == {"conversation_1"}


def test_leave_is_idempotent_and_drops_empty_rooms():
    rooms = RoomMembership()
    session = ConnectionSession(sid="s1", identity=1)
    rooms.leave(session, "conversation_9")

    rooms.join(session, "conversation_1")
    rooms.leave(session, "conversation_1")
    rooms.leave(session, "conversation_1")
    assert rooms.members("conversation_1") == []
    assert "conversation_1" not in rooms
    assert session.rooms == set()


def test_members_excludes_origin():
    rooms = RoomMembership()
    a = ConnectionSession(sid="a", identity=1)
    b = ConnectionSession(sid="b", identity=2)
    rooms.join(a, "conversation_1")
    rooms.join(b, "conversation_1")
    assert sorted(rooms.members("conversation_1")) == ["a", "b"]
    assert rooms.members("conversation_1", exclude="a") == ["b"]


def test_leave_all_clears_reverse_index():
    rooms = RoomMembership()
    a = ConnectionSession(sid="a", identity=1)
    b = ConnectionSession(sid="b", identity=2)
    for room in ("user_1", "conversation_1", "conversation_2"):
        rooms.join(a, room)
    rooms.join(b, "conversation_1")

    rooms.leave_all(a)

    assert a.rooms == set()
    assert rooms.members("conversation_1") == ["b"]
    assert rooms.members("conversation_2") == []
    assert rooms.members("user_1") == []
