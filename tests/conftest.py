"""Test configuration and fixtures."""
import json

import pytest

from lan_chat_hub.config import HubConfig
from lan_chat_hub.hub import ChatHub
from lan_chat_hub.hub_errors import TransportError


class FakeTransport:
    """In-memory transport recording every frame it is handed."""

    def __init__(self, is_open: bool = True, fail: bool = False):
        self.sent: list[dict] = []
        self.open = is_open
        self.fail = fail

    @property
    def is_open(self) -> bool:
        return self.open

    def send_text(self, text: str) -> None:
        if self.fail:
            raise TransportError("fake", "simulated failure")
        self.sent.append(json.loads(text))

    def of_type(self, msg_type: str) -> list[dict]:
        return [m for m in self.sent if m["type"] == msg_type]

    def chat_events(self) -> list[dict]:
        return [m["data"] for m in self.of_type("message")]


@pytest.fixture
def hub_config(tmp_path) -> HubConfig:
    """Config that keeps all durable output inside the test's tmp dir."""
    return HubConfig(
        received_dir=tmp_path / "received",
        chat_log_path=tmp_path / "chatlog.txt",
        send_queue_size=16,
    )


@pytest.fixture
def hub(hub_config) -> ChatHub:
    return ChatHub(hub_config)


async def connect_and_join(hub: ChatHub, name: str):
    """Open a session on a fake transport and join it under ``name``."""
    transport = FakeTransport()
    session = await hub.connect(transport)
    await session.join(name)
    return session, transport
