"""Socket.IO server for the live channel.

Frontend convention:
- Socket.IO path: ``settings.SOCKETIO_PATH`` (``/ws/socket.io`` by default)
- Auth: ``query.token`` or ``auth.token`` (JWT access token)

The server only authenticates and forwards; session state, rooms and
delivery belong to :data:`hub`.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qs

import socketio
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

from collab_hub.realtime.hub import RealtimeHub
from collab_hub.realtime.hub import SocketIOTransport

logger = logging.getLogger(__name__)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.SOCKETIO_CORS_ALLOWED_ORIGINS,
    logger=False,
    engineio_logger=False,
)

hub = RealtimeHub(transport=SocketIOTransport(sio))


@database_sync_to_async
def _get_user_from_access_token(token: str):
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    return jwt_auth.get_user(validated)


def _query_token(scope: dict[str, Any]) -> str | None:
    raw = scope.get("query_string") or scope.get("QUERY_STRING") or ""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode(errors="ignore")
    return parse_qs(str(raw)).get("token", [None])[0]


def _extract_token(scope: dict[str, Any], auth: Any | None) -> str | None:
    """Query string first (``?token=``), then the Socket.IO ``auth`` payload."""

    candidates = [_query_token(scope)]
    if isinstance(auth, dict):
        candidates.append(auth.get("token"))
    for token in candidates:
        if isinstance(token, str) and token:
            return token
    return None


async def authenticate(environ: dict[str, Any], auth: Any | None = None):
    """Resolve the handshake credential to a user or refuse the connection."""

    # ASGI servers nest the request scope; WSGI ones pass the environ itself.
    scope = environ.get("asgi.scope")
    token = _extract_token(scope if isinstance(scope, dict) else environ, auth)
    if not token:
        msg = "unauthorized"
        raise ConnectionRefusedError(msg)

    try:
        return await _get_user_from_access_token(token)
    except TokenError as exc:
        if "expired" in str(exc).lower():
            msg = "jwt_expired"
            raise ConnectionRefusedError(msg) from exc
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except AuthenticationFailed as exc:  # user not found / inactive, etc.
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except Exception as exc:
        logger.exception("Socket.IO connect error")
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    hub.begin_session(sid)
    try:
        user = await authenticate(environ, auth)
    except ConnectionRefusedError:
        await hub.close_session(sid)
        raise
    await hub.open_session(sid, user)


@sio.event
async def disconnect(sid: str, *args):
    await hub.close_session(sid)


def _forward(event: str):
    async def handler(sid: str, data: Any = None):
        await hub.handle(sid, event, data)

    handler.__name__ = f"on_{event}"
    return handler


for _event in hub.router.events:
    sio.on(_event, handler=_forward(_event))
