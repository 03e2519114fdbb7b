"""Tests for the participant registry."""
import pytest

from lan_chat_hub.hub_errors import AlreadyJoined, DuplicateId, InvalidName, UnknownParticipant
from lan_chat_hub.registry import ConnectionRegistry
from .conftest import FakeTransport


@pytest.fixture
def registry():
    return ConnectionRegistry()


def test_add_registers_unjoined_participant(registry):
    participant = registry.add("p1", FakeTransport())
    assert "p1" in registry
    assert not participant.joined
    assert registry.list() == []
    assert registry.connection_count == 1
    assert registry.joined_count == 0


def test_add_duplicate_id_fails(registry):
    registry.add("p1", FakeTransport())
    with pytest.raises(DuplicateId) as exc_info:
        registry.add("p1", FakeTransport())
    assert exc_info.value.participant_id == "p1"


def test_distinct_joins_are_all_listed(registry):
    names = ["Alice", "Bob", "Carol", "Dave"]
    for i, name in enumerate(names):
        registry.add(f"p{i}", FakeTransport())
        registry.set_name(f"p{i}", name)
    assert sorted(registry.list()) == sorted(names)
    assert registry.joined_count == 4


def test_duplicate_display_names_are_allowed(registry):
    registry.add("p1", FakeTransport())
    registry.add("p2", FakeTransport())
    registry.set_name("p1", "Sam")
    registry.set_name("p2", "Sam")
    assert registry.list() == ["Sam", "Sam"]


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_set_name_rejects_blank_names(registry, name):
    registry.add("p1", FakeTransport())
    with pytest.raises(InvalidName):
        registry.set_name("p1", name)
    assert not registry.get("p1").joined
    assert registry.list() == []


def test_set_name_strips_whitespace(registry):
    registry.add("p1", FakeTransport())
    participant = registry.set_name("p1", "  Alice ")
    assert participant.name == "Alice"


def test_set_name_unknown_participant(registry):
    with pytest.raises(UnknownParticipant):
        registry.set_name("ghost", "Alice")


def test_name_is_fixed_after_join(registry):
    registry.add("p1", FakeTransport())
    registry.set_name("p1", "Alice")
    with pytest.raises(AlreadyJoined):
        registry.set_name("p1", "Mallory")
    assert registry.get("p1").name == "Alice"


def test_remove_is_idempotent(registry):
    registry.add("p1", FakeTransport())
    assert registry.remove("p1") is not None
    assert registry.remove("p1") is None
    assert "p1" not in registry


def test_for_each_skips_closed_unjoined_and_excluded(registry):
    registry.add("open", FakeTransport())
    registry.add("closed", FakeTransport(is_open=False))
    registry.add("unjoined", FakeTransport())
    registry.add("excluded", FakeTransport())
    for pid in ("open", "closed", "excluded"):
        registry.set_name(pid, pid)

    visited = []
    count = registry.for_each(lambda p: visited.append(p.id), exclude_id="excluded")

    assert visited == ["open"]
    assert count == 1


def test_for_each_tolerates_removal_during_iteration(registry):
    for pid in ("a", "b", "c"):
        registry.add(pid, FakeTransport())
        registry.set_name(pid, pid)
    registry.for_each(lambda p: registry.remove(p.id))
    assert registry.connection_count == 0
