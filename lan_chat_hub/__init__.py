"""lan-chat-hub — real-time LAN chat and file relay hub."""

from lan_chat_hub.hub_models import ChatEvent, EventType, FilePayload, Participant, SYSTEM_AUTHOR
from lan_chat_hub.config import HubConfig
from lan_chat_hub.registry import ConnectionRegistry
from lan_chat_hub.history import ChatLogWriter, MessageLog
from lan_chat_hub.broadcast import BroadcastEngine
from lan_chat_hub.files import FileRelay, FileStore, format_file_size
from lan_chat_hub.api import SessionProtocol, SessionState
from lan_chat_hub.hub import ChatHub

__all__ = [
    "ChatEvent",
    "EventType",
    "FilePayload",
    "Participant",
    "SYSTEM_AUTHOR",
    "HubConfig",
    "ConnectionRegistry",
    "ChatLogWriter",
    "MessageLog",
    "BroadcastEngine",
    "FileRelay",
    "FileStore",
    "format_file_size",
    "SessionProtocol",
    "SessionState",
    "ChatHub",
    "create_app",
]


def __getattr__(name: str):
    if name == "create_app":
        from lan_chat_hub.standalone import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
