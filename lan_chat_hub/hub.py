"""The chat hub: one object owning all shared state of a running server."""
import asyncio
import logging
from typing import Optional

from lan_chat_hub.api.session_protocol import SessionProtocol
from lan_chat_hub.broadcast import BroadcastEngine
from lan_chat_hub.config import HubConfig
from lan_chat_hub.files import FileRelay, FileStore
from lan_chat_hub.history import ChatLogWriter, MessageLog
from lan_chat_hub.hub_models import Transport, new_id
from lan_chat_hub.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class ChatHub:
    """Registry, log, fan-out and file relay behind a single lock.

    Each connection handler gets a reference to the hub through the
    :class:`SessionProtocol` returned by :meth:`connect`.
    """

    def __init__(self, config: Optional[HubConfig] = None, *, persist_log: bool = True):
        self.config = config or HubConfig()
        self.registry = ConnectionRegistry()
        writer = ChatLogWriter(self.config.chat_log_path) if persist_log else None
        self.log = MessageLog(writer)
        self.engine = BroadcastEngine(self.registry, self.log)
        self.store = FileStore(self.config.received_dir)
        self.relay = FileRelay(self.registry, self.store)
        self.lock = asyncio.Lock()

    async def connect(self, transport: Transport, participant_id: Optional[str] = None) -> SessionProtocol:
        """Register a new, unjoined connection and return its session."""
        participant_id = participant_id or new_id()
        async with self.lock:
            self.registry.add(participant_id, transport)
        logger.info(f"[HUB] New connection: {participant_id}")
        return SessionProtocol(self, participant_id)

    def health(self) -> dict:
        return {
            "status": "healthy",
            "users": self.registry.joined_count,
            "messages": self.log.size(),
        }
