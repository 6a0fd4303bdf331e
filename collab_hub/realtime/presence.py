"""Who is connected right now, by user id.

One handle (the Socket.IO sid) per identity; a newer connection replaces
the older one. Nothing is persisted, so after a restart everyone is offline
until they reconnect.
"""

from __future__ import annotations

from collections.abc import Hashable


class PresenceRegistry:
    def __init__(self) -> None:
        self._handles: dict[Hashable, str] = {}

    def register(self, identity: Hashable, handle: str) -> None:
        self._handles[identity] = handle

    def unregister(self, identity: Hashable, handle: str | None = None) -> bool:
        """Drop ``identity``; when ``handle`` is given, only if it is still current.

        Returns whether a mapping was removed.
        """

        current = self._handles.get(identity)
        if current is None:
            return False
        if handle is not None and current != handle:
            return False
        del self._handles[identity]
        return True

    def lookup(self, identity: Hashable) -> str | None:
        return self._handles.get(identity)

    def is_online(self, identity: Hashable) -> bool:
        return identity in self._handles

    def online_identities(self) -> list[Hashable]:
        return list(self._handles)

    def clear(self) -> None:
        self._handles.clear()

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, identity: Hashable) -> bool:
        return self.is_online(identity)
