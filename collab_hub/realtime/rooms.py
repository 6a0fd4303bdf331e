"""Explicit room membership: per-session room sets plus a reverse index.

Broadcasts resolve their recipients from the reverse index; the transport's
own room feature is not used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collab_hub.realtime.session import ConnectionSession


def personal_room(identity: int) -> str:
    return f"user_{int(identity)}"


def conversation_room(conversation_id: int) -> str:
    return f"conversation_{int(conversation_id)}"


class RoomMembership:
    def __init__(self) -> None:
        self._members: dict[str, set[str]] = {}

    def join(self, session: ConnectionSession, room: str) -> None:
        self._members.setdefault(room, set()).add(session.sid)
        session.rooms.add(room)

    def leave(self, session: ConnectionSession, room: str) -> None:
        session.rooms.discard(room)
        members = self._members.get(room)
        if members is None:
            return
        members.discard(session.sid)
        if not members:
            del self._members[room]

    def leave_all(self, session: ConnectionSession) -> None:
        for room in list(session.rooms):
            self.leave(session, room)

    def members(self, room: str, exclude: str | None = None) -> list[str]:
        return [sid for sid in self._members.get(room, ()) if sid != exclude]

    def rooms_of(self, session: ConnectionSession) -> frozenset[str]:
        return frozenset(session.rooms)

    def clear(self) -> None:
        self._members.clear()

    def __contains__(self, room: str) -> bool:
        return room in self._members
