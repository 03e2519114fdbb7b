"""Models for the chat hub: participants, chat events and wire messages."""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Protocol, runtime_checkable
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SYSTEM_AUTHOR = "System"
"""Reserved author name for events generated by the hub itself."""


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@runtime_checkable
class Transport(Protocol):
    """Outbound half of a client connection.

    ``send_text`` must not block; implementations buffer and raise
    :class:`~lan_chat_hub.hub_errors.TransportError` if the frame cannot be queued.
    """

    @property
    def is_open(self) -> bool: ...

    def send_text(self, text: str) -> None: ...


@dataclass
class Participant:
    """One connected client. Joined once ``name`` is set."""
    id: str
    transport: Transport
    name: Optional[str] = None

    @property
    def joined(self) -> bool:
        return self.name is not None


class EventType(str, Enum):
    """Kind of a chat event."""
    MESSAGE = "message"
    FILE = "file"
    SYSTEM = "system"


class ChatEvent(BaseModel):
    """An immutable, broadcastable record in the chat log."""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str = Field(default_factory=new_id)
    username: str
    message: str
    timestamp: datetime = Field(default_factory=utc_now)
    type: EventType = EventType.MESSAGE


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# ── Inbound ───────────────────────────────────────────────────────


class JoinRequest(WireModel):
    type: Literal["join"] = "join"
    username: str


class ChatRequest(WireModel):
    type: Literal["message"] = "message"
    message: str


class FilePayload(WireModel):
    """A file as sent by a client: base64 content plus metadata."""
    filename: str
    file_data: str
    file_size: Optional[int] = None
    sender: Optional[str] = None


class FileRequest(WireModel):
    type: Literal["file"] = "file"
    data: FilePayload


# ── Outbound ──────────────────────────────────────────────────────


class JoinedMessage(WireModel):
    """Private snapshot sent once to a participant that just joined."""
    type: Literal["joined"] = "joined"
    chat_history: List[ChatEvent]
    users: List[str]


class EventMessage(WireModel):
    type: Literal["message"] = "message"
    data: ChatEvent


class UserListMessage(WireModel):
    type: Literal["user_list"] = "user_list"
    data: List[str]


class FileReceivedData(WireModel):
    filename: str
    file_data: str
    sender: str
    file_size: int
    download_url: str


class FileReceivedMessage(WireModel):
    type: Literal["file_received"] = "file_received"
    data: FileReceivedData
