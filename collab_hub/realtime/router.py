"""Name-based dispatch of inbound live events.

Handlers are plain coroutines ``(hub, session, payload) -> list[Emit]``. They
never touch the transport: what they want sent comes back as :class:`Emit`
values that the hub delivers afterwards, so handlers can be tested without a
socket.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any

from collab_hub.core.errors import CollabHubError

if TYPE_CHECKING:
    from collab_hub.realtime.hub import RealtimeHub
    from collab_hub.realtime.session import ConnectionSession

logger = logging.getLogger(__name__)

SESSION = "session"
ROOM = "room"
USER = "user"
BROADCAST = "broadcast"

GENERIC_ERROR_MESSAGE = "Something went wrong"


@dataclass(frozen=True)
class Emit:
    event: str
    payload: dict[str, Any] = field(default_factory=dict)
    target: str = SESSION
    room: str | None = None
    identity: int | None = None
    exclude_origin: bool = False

    @classmethod
    def to_session(cls, event: str, payload: dict[str, Any]) -> Emit:
        return cls(event, payload)

    @classmethod
    def to_room(cls, room: str, event: str, payload: dict[str, Any], *, exclude_origin: bool = True) -> Emit:
        return cls(event, payload, target=ROOM, room=room, exclude_origin=exclude_origin)

    @classmethod
    def to_user(cls, identity: int, event: str, payload: dict[str, Any]) -> Emit:
        return cls(event, payload, target=USER, identity=int(identity))

    @classmethod
    def broadcast(cls, event: str, payload: dict[str, Any], *, exclude_origin: bool = True) -> Emit:
        return cls(event, payload, target=BROADCAST, exclude_origin=exclude_origin)


Handler = Callable[["RealtimeHub", "ConnectionSession", dict[str, Any]], Awaitable[list[Emit]]]


@dataclass(frozen=True)
class Route:
    name: str
    handler: Handler
    error_event: str = "error"
    correlation_key: str | None = None
    failure_message: str = GENERIC_ERROR_MESSAGE


class EventRouter:
    def __init__(self) -> None:
        self._routes: dict[str, Route] = {}

    def on(
        self,
        name: str,
        *,
        error_event: str = "error",
        correlation_key: str | None = None,
        failure_message: str = GENERIC_ERROR_MESSAGE,
    ):
        """Register the decorated coroutine as the handler for ``name``."""

        def decorator(handler: Handler) -> Handler:
            self._routes[name] = Route(name, handler, error_event, correlation_key, failure_message)
            return handler

        return decorator

    @property
    def events(self) -> list[str]:
        return list(self._routes)

    def __contains__(self, name: str) -> bool:
        return name in self._routes

    async def dispatch(
        self,
        hub: RealtimeHub,
        session: ConnectionSession,
        name: str,
        payload: Any,
    ) -> list[Emit]:
        """Run the handler for ``name``; any failure becomes an error emit."""

        route = self._routes.get(name)
        if route is None:
            logger.debug("Ignoring unknown event %r from %s", name, session.sid)
            return [Emit.to_session("error", {"success": False, "event": name, "message": "Unknown event"})]

        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            return [self._error(route, {}, "Payload must be an object")]

        try:
            return list(await route.handler(hub, session, payload) or [])
        except CollabHubError as exc:
            logger.info("%s from user %s rejected: %s", name, session.identity, exc.message)
            return [self._error(route, payload, exc.message)]
        except Exception:
            logger.exception("Unhandled error in %s handler for user %s", name, session.identity)
            return [self._error(route, payload, route.failure_message)]

    def _error(self, route: Route, payload: dict[str, Any], message: str) -> Emit:
        body: dict[str, Any] = {"success": False, "message": message}
        if route.correlation_key is not None:
            body[route.correlation_key] = payload.get(route.correlation_key)
        if route.error_event == "error":
            body["event"] = route.name
        return Emit.to_session(route.error_event, body)
