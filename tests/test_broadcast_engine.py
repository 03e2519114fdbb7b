"""Tests for event fan-out."""
import pytest

from lan_chat_hub.broadcast import BroadcastEngine
from lan_chat_hub.history import MessageLog
from lan_chat_hub.hub_errors import UnknownParticipant
from lan_chat_hub.hub_models import SYSTEM_AUTHOR, EventType, UserListMessage
from lan_chat_hub.registry import ConnectionRegistry
from .conftest import FakeTransport


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def engine(registry):
    return BroadcastEngine(registry, MessageLog())


def _join(registry, pid: str, name: str, **kwargs) -> FakeTransport:
    transport = FakeTransport(**kwargs)
    registry.add(pid, transport)
    registry.set_name(pid, name)
    return transport


def test_publish_appends_and_fans_out(engine, registry):
    a = _join(registry, "a", "A")
    b = _join(registry, "b", "B")

    event = engine.new_event("A", "hello")
    delivered = engine.publish(event)

    assert delivered == 2
    assert engine.log.history() == [event]
    for transport in (a, b):
        assert transport.sent == [{"type": "message", "data": event.model_dump(mode="json")}]


def test_history_length_matches_publish_calls(engine, registry):
    _join(registry, "a", "A")
    texts = [f"m{i}" for i in range(10)]
    for text in texts:
        engine.publish(engine.new_event("A", text))
    assert [e.message for e in engine.log.history()] == texts


def test_publish_excluding_skips_one_participant(engine, registry):
    a = _join(registry, "a", "A")
    b = _join(registry, "b", "B")

    engine.publish_excluding(engine.new_event("A", "quiet"), "a")

    assert a.sent == []
    assert len(b.chat_events()) == 1
    assert engine.log.size() == 1


def test_unjoined_and_closed_participants_get_nothing(engine, registry):
    registry.add("lurker", FakeTransport())
    lurker = registry.get("lurker").transport
    closed = _join(registry, "c", "C", is_open=False)

    engine.publish(engine.new_event("X", "hi"))

    assert lurker.sent == []
    assert closed.sent == []
    assert engine.log.size() == 1


def test_failing_transport_does_not_abort_fanout(engine, registry):
    bad = _join(registry, "bad", "Bad", fail=True)
    good = _join(registry, "good", "Good")

    delivered = engine.publish(engine.new_event("Good", "still here"))

    assert delivered == 1
    assert len(good.chat_events()) == 1
    assert bad.sent == []
    assert "bad" in registry


def test_publish_user_list(engine, registry):
    a = _join(registry, "a", "A")
    _join(registry, "b", "B")

    engine.publish_user_list()

    assert a.of_type("user_list") == [{"type": "user_list", "data": ["A", "B"]}]
    assert engine.log.size() == 0


def test_send_to_single_participant(engine, registry):
    a = _join(registry, "a", "A")
    b = _join(registry, "b", "B")

    assert engine.send_to("b", UserListMessage(data=["x"]))
    assert a.sent == []
    assert b.sent == [{"type": "user_list", "data": ["x"]}]


def test_send_to_unknown_participant(engine):
    with pytest.raises(UnknownParticipant):
        engine.send_to("ghost", UserListMessage(data=[]))


def test_system_event_uses_reserved_author():
    event = BroadcastEngine.system_event("maintenance")
    assert event.username == SYSTEM_AUTHOR
    assert event.type == EventType.SYSTEM
    assert event.model_dump(mode="json")["type"] == "system"
