"""The realtime hub: sessions, presence, rooms and delivery for one process.

A single :class:`RealtimeHub` lives for the lifetime of the process (see
``collab_hub.realtime.socketio``). Tests build their own with a recording
transport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

from channels.db import database_sync_to_async

from collab_hub.core.errors import DeliveryError
from collab_hub.realtime.presence import PresenceRegistry
from collab_hub.realtime.rooms import RoomMembership
from collab_hub.realtime.rooms import personal_room
from collab_hub.realtime.router import BROADCAST
from collab_hub.realtime.router import ROOM
from collab_hub.realtime.router import USER
from collab_hub.realtime.router import Emit
from collab_hub.realtime.router import EventRouter
from collab_hub.realtime.session import ConnectionSession
from collab_hub.realtime.session import SessionState
from collab_hub.users import services as users

if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Iterable

    from collab_hub.users.models import User

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, sid: str, event: str, payload: dict[str, Any]) -> None: ...


class SocketIOTransport:
    def __init__(self, server) -> None:
        self.server = server

    async def send(self, sid: str, event: str, payload: dict[str, Any]) -> None:
        await self.server.emit(event, payload, to=sid)


class RealtimeHub:
    def __init__(self, transport: Transport | None = None, router: EventRouter | None = None) -> None:
        if router is None:
            from collab_hub.realtime.handlers import router  # noqa: PLC0415
        self.router = router
        self.transport = transport
        self.registry = PresenceRegistry()
        self.rooms = RoomMembership()
        self.sessions: dict[str, ConnectionSession] = {}

    # Lifecycle
    # --------------------------------------------------------------------------

    def begin_session(self, sid: str) -> ConnectionSession:
        """Track a handshake that has not been authenticated yet."""

        session = ConnectionSession(sid=sid)
        self.sessions[sid] = session
        return session

    async def open_session(self, sid: str, user: User) -> ConnectionSession:
        session = self.sessions.get(sid)
        if session is None or session.state is not SessionState.CONNECTING:
            session = self.begin_session(sid)
        session.authenticate(int(user.pk), user.display_name)
        self.registry.register(session.identity, sid)
        self.rooms.join(session, personal_room(session.identity))
        session.advance(SessionState.ACTIVE)
        logger.info("User %s connected (sid=%s)", session.identity, sid)

        await self._record_presence(users.mark_online, session.identity)
        return session

    async def close_session(self, sid: str) -> ConnectionSession | None:
        """Tear a session down. Never raises on storage trouble."""

        session = self.sessions.pop(sid, None)
        if session is None or session.is_closed:
            return None
        session.advance(SessionState.CLOSED)
        self.rooms.leave_all(session)
        if session.identity is None:
            logger.info("Handshake refused (sid=%s)", sid)
            return session
        self.registry.unregister(session.identity, handle=sid)
        logger.info("User %s disconnected (sid=%s)", session.identity, sid)

        # A newer connection for the same user keeps them online.
        if not self.registry.is_online(session.identity):
            await self._record_presence(users.mark_offline, session.identity)
        return session

    async def _record_presence(self, func: Callable[[int], Any], user_id: int) -> None:
        try:
            await database_sync_to_async(func)(user_id)
        except Exception:
            logger.exception("Failed to record presence for user %s", user_id)

    # Inbound
    # --------------------------------------------------------------------------

    async def handle(self, sid: str, event: str, payload: Any = None) -> list[Emit]:
        session = self.sessions.get(sid)
        if session is None or not session.is_active:
            logger.debug("Dropping %r for unknown session %s", event, sid)
            return []
        async with session.lock:
            emits = await self.router.dispatch(self, session, event, payload)
            await self.deliver(emits, session)
        return emits

    # Outbound
    # --------------------------------------------------------------------------

    def is_online(self, identity: int) -> bool:
        return self.registry.is_online(int(identity))

    def recipients(self, emit: Emit, origin: ConnectionSession | None = None) -> list[str]:
        exclude = origin.sid if origin is not None and emit.exclude_origin else None
        if emit.target == ROOM:
            return self.rooms.members(emit.room, exclude=exclude)
        if emit.target == USER:
            sid = self.registry.lookup(emit.identity)
            if sid is None or sid not in self.rooms.members(personal_room(emit.identity)):
                return []
            return [sid]
        if emit.target == BROADCAST:
            return [sid for sid, s in self.sessions.items() if s.is_active and sid != exclude]
        return [origin.sid] if origin is not None else []

    async def deliver(self, emits: Iterable[Emit], origin: ConnectionSession | None = None) -> int:
        """Send ``emits``; failed sends are logged and skipped. Returns the send count."""

        sent = 0
        for emit in emits:
            for sid in self.recipients(emit, origin):
                try:
                    await self._send(sid, emit.event, emit.payload)
                except DeliveryError:
                    logger.warning("Could not deliver %s to %s", emit.event, sid, exc_info=True)
                else:
                    sent += 1
        return sent

    async def push_to_user(self, identity: int, event: str, payload: dict[str, Any]) -> bool:
        """Best-effort push to a user's current session; ``False`` means offline."""

        recipients = self.recipients(Emit.to_user(identity, event, payload))
        if not recipients:
            return False
        try:
            await self._send(recipients[0], event, payload)
        except DeliveryError:
            logger.warning("Live push of %s to user %s failed", event, identity, exc_info=True)
            return False
        return True

    async def _send(self, sid: str, event: str, payload: dict[str, Any]) -> None:
        if self.transport is None:
            msg = "No transport configured"
            raise DeliveryError(msg)
        try:
            await self.transport.send(sid, event, payload)
        except Exception as exc:
            raise DeliveryError(str(exc)) from exc

    def reset(self) -> None:
        self.sessions.clear()
        self.registry.clear()
        self.rooms.clear()
