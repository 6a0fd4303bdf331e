from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.contrib.auth import get_user_model

User = get_user_model()
TEST_PASSWORD = "TestPass123!"  # noqa: S105


def create_user(username: str, **extra: Any):
    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create_user(username=username, password=TEST_PASSWORD, **extra)


@dataclass(frozen=True)
class Sent:
    sid: str
    event: str
    payload: dict[str, Any]


class RecordingTransport:
    """In-memory transport; sids in ``broken`` fail like a dead socket."""

    def __init__(self) -> None:
        self.sent: list[Sent] = []
        self.broken: set[str] = set()

    async def send(self, sid: str, event: str, payload: dict[str, Any]) -> None:
        if sid in self.broken:
            msg = f"socket {sid} is gone"
            raise ConnectionResetError(msg)
        self.sent.append(Sent(sid, event, payload))

    def events(self, sid: str) -> list[str]:
        return [s.event for s in self.sent if s.sid == sid]

    def payloads(self, sid: str, event: str) -> list[dict[str, Any]]:
        return [s.payload for s in self.sent if s.sid == sid and s.event == event]

    def clear(self) -> None:
        self.sent.clear()
