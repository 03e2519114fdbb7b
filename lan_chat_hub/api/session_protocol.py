"""Per-connection session state machine and inbound message dispatch.

A session starts CONNECTED (no display name), becomes ACTIVE after a
successful ``join`` and ends CLOSED when the transport goes away. Every
request runs under the hub lock, so registry and log mutations from
different connections never interleave.
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Type, Union

from pydantic import ValidationError as PydanticValidationError

from lan_chat_hub.files import download_url, format_file_size
from lan_chat_hub.hub_errors import (
    AlreadyJoined,
    InvalidName,
    ProtocolError,
    UnknownParticipant,
    ValidationError,
)
from lan_chat_hub.hub_models import (
    ChatEvent,
    ChatRequest,
    EventType,
    FilePayload,
    FileReceivedData,
    FileReceivedMessage,
    FileRequest,
    JoinedMessage,
    JoinRequest,
    WireModel,
)

if TYPE_CHECKING:
    from lan_chat_hub.hub import ChatHub

logger = logging.getLogger(__name__)

InboundRequest = Union[JoinRequest, ChatRequest, FileRequest]

_REQUEST_TYPES: Dict[str, Type[WireModel]] = {
    "join": JoinRequest,
    "message": ChatRequest,
    "file": FileRequest,
}


class SessionState(str, Enum):
    CONNECTED = "connected"
    ACTIVE = "active"
    CLOSED = "closed"


def parse_request(raw: str) -> InboundRequest:
    """Parse one inbound text frame.

    :raises ProtocolError: if the frame is not JSON, not an object, has an
        unknown ``type`` or lacks the fields that type needs
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ProtocolError(f"Invalid JSON: {e}", raw) from e
    if not isinstance(data, dict):
        raise ProtocolError("Frame is not a JSON object", raw)

    msg_type = data.get("type")
    model = _REQUEST_TYPES.get(msg_type) if isinstance(msg_type, str) else None
    if model is None:
        raise ProtocolError(f"Unknown message type: {msg_type!r}", raw)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ProtocolError(f"Invalid '{msg_type}' request ({e.error_count()} error(s))", raw) from e


class SessionProtocol:
    """Lifecycle and request handling for one client connection."""

    def __init__(self, hub: "ChatHub", participant_id: str):
        self.hub = hub
        self.participant_id = participant_id
        self._state = SessionState.CONNECTED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def display_name(self) -> Optional[str]:
        participant = self.hub.registry.get(self.participant_id)
        return participant.name if participant else None

    # ── Inbound frames ────────────────────────────────────────

    async def handle_frame(self, raw: str) -> None:
        """Parse and dispatch one frame. Malformed frames are logged and dropped."""
        try:
            request = parse_request(raw)
        except ProtocolError as e:
            logger.warning(f"[PROTOCOL] Dropped frame from {self.participant_id}: {e}")
            return
        await self.dispatch(request)

    async def dispatch(self, request: InboundRequest) -> None:
        if isinstance(request, JoinRequest):
            await self.join(request.username)
        elif isinstance(request, ChatRequest):
            await self.message(request.message)
        elif isinstance(request, FileRequest):
            await self.file_transfer(request.data)

    # ── Transitions ───────────────────────────────────────────

    async def join(self, name: str) -> bool:
        """CONNECTED → ACTIVE. Returns False if the join was ignored."""
        async with self.hub.lock:
            if self._state != SessionState.CONNECTED:
                logger.debug(f"[SESSION] Ignored join from {self.participant_id} in state {self._state.value}")
                return False
            registry = self.hub.registry
            engine = self.hub.engine
            try:
                participant = registry.set_name(self.participant_id, name)
            except (InvalidName, AlreadyJoined, UnknownParticipant) as e:
                logger.debug(f"[JOIN] Rejected join from {self.participant_id}: {e}")
                return False

            self._state = SessionState.ACTIVE
            engine.publish(engine.system_event(f"{participant.name} joined the chat"))
            logger.info(f"[SESSION] {participant.name} joined the chat")

            engine.send_to(
                self.participant_id,
                JoinedMessage(chat_history=self.hub.log.history(), users=registry.list()),
            )
            engine.publish_user_list()
            return True

    async def message(self, text: str) -> Optional[ChatEvent]:
        """Publish a chat message from this participant. No-op unless ACTIVE."""
        async with self.hub.lock:
            participant = self._active_participant("message")
            if participant is None:
                return None
            engine = self.hub.engine
            event = engine.new_event(participant.name, text)
            engine.publish(event)
            logger.info(f"[SESSION] {participant.name}: {text}")
            return event

    async def file_transfer(self, payload: FilePayload) -> Optional[ChatEvent]:
        """Store a file and announce it. The sender does not get the file echoed back."""
        async with self.hub.lock:
            participant = self._active_participant("file")
            if participant is None:
                return None
            try:
                result = self.hub.relay.receive(self.participant_id, payload)
            except (ValidationError, UnknownParticipant) as e:
                logger.warning(f"[FILE] Rejected file from {participant.name}: {e}")
                return None
            except (OSError, ValueError) as e:
                logger.error(f"[FILE] Could not store {payload.filename!r} from {participant.name}: {e}")
                return None

            size = payload.file_size if payload.file_size is not None else result.bytes_written
            human_size = format_file_size(size)
            engine = self.hub.engine
            event = engine.new_event(
                participant.name,
                f"📎 Shared file: {result.filename} ({human_size})",
                EventType.FILE,
            )
            engine.publish(event)
            logger.info(f"[FILE] {participant.name} shared file: {result.filename} ({human_size})")

            engine.broadcast_excluding(
                FileReceivedMessage(data=FileReceivedData(
                    filename=result.filename,
                    file_data=payload.file_data,
                    sender=participant.name,
                    file_size=size,
                    download_url=download_url(result.filename),
                )),
                self.participant_id,
            )
            return event

    async def close(self) -> None:
        """Any state → CLOSED. Safe to call more than once."""
        async with self.hub.lock:
            if self._state == SessionState.CLOSED:
                return
            was_active = self._state == SessionState.ACTIVE
            self._state = SessionState.CLOSED
            participant = self.hub.registry.remove(self.participant_id)
            if not (was_active and participant and participant.joined):
                logger.debug(f"[SESSION] Connection {self.participant_id} closed before joining")
                return
            engine = self.hub.engine
            engine.publish(engine.system_event(f"{participant.name} left the chat"))
            logger.info(f"[SESSION] {participant.name} left the chat")
            engine.publish_user_list()

    # ── Helpers ───────────────────────────────────────────────

    def _active_participant(self, action: str):
        if self._state != SessionState.ACTIVE:
            logger.debug(f"[SESSION] Ignored {action} from {self.participant_id} in state {self._state.value}")
            return None
        participant = self.hub.registry.get(self.participant_id)
        if participant is None or not participant.joined:
            return None
        return participant
