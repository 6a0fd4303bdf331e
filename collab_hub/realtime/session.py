from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime

from django.utils import timezone


class SessionState(enum.Enum):
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    ACTIVE = "active"
    CLOSED = "closed"


_TRANSITIONS = {
    SessionState.CONNECTING: {SessionState.AUTHENTICATED, SessionState.CLOSED},
    SessionState.AUTHENTICATED: {SessionState.ACTIVE, SessionState.CLOSED},
    SessionState.ACTIVE: {SessionState.CLOSED},
    SessionState.CLOSED: set(),
}


class InvalidTransition(RuntimeError):
    pass


@dataclass(eq=False)
class ConnectionSession:
    """State kept for one live connection.

    A session is created in ``CONNECTING`` when the handshake arrives and is
    closed from there if the credential is refused.

    ``lock`` serialises event handling so a client's events run one at a
    time, in the order they arrived.
    """

    sid: str
    identity: int | None = None
    user_name: str = ""
    state: SessionState = SessionState.CONNECTING
    created_at: datetime = field(default_factory=timezone.now)
    rooms: set[str] = field(default_factory=set)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def advance(self, state: SessionState) -> None:
        if state not in _TRANSITIONS[self.state]:
            msg = f"Session {self.sid}: {self.state.value} -> {state.value} is not allowed"
            raise InvalidTransition(msg)
        self.state = state

    def authenticate(self, identity: int, user_name: str = "") -> None:
        self.advance(SessionState.AUTHENTICATED)
        self.identity = identity
        self.user_name = user_name

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED
