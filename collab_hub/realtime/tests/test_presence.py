from collab_hub.realtime.presence import PresenceRegistry


def test_register_then_lookup():
    registry = PresenceRegistry()
    registry.register(1, "sid-a")
    assert registry.lookup(1) == "sid-a"
    assert registry.is_online(1)
    assert len(registry) == 1


def test_unregister_removes_and_is_noop_when_absent():
    registry = PresenceRegistry()
    registry.register(1, "sid-a")
    assert registry.unregister(1) is True
    assert registry.lookup(1) is None
    assert registry.unregister(1) is False
    assert registry.unregister(42) is False


def test_newer_register_replaces_handle():
    registry = PresenceRegistry()
    registry.register(1, "sid-a")
    registry.register(1, "sid-b")
    assert registry.lookup(1) == "sid-b"
    assert len(registry) == 1


def test_stale_handle_does_not_evict_newer_connection():
    registry = PresenceRegistry()
    registry.register(1, "sid-a")
    registry.register(1, "sid-b")

    assert registry.unregister(1, handle="sid-a") is False
    assert registry.lookup(1) == "sid-b"

    assert registry.unregister(1, handle="sid-b") is True
    assert 1 not in registry


def test_online_identities():
    registry = PresenceRegistry()
    registry.register(1, "a")
    registry.register(2, "b")
    registry.unregister(1)
    assert registry.online_identities() == [2]
