"""Fan-out of chat events and notifications to connected participants."""
import logging
from typing import Optional, Union

from lan_chat_hub.history import MessageLog
from lan_chat_hub.hub_errors import TransportError, UnknownParticipant
from lan_chat_hub.hub_models import (
    SYSTEM_AUTHOR,
    ChatEvent,
    EventMessage,
    EventType,
    Participant,
    UserListMessage,
    WireModel,
)
from lan_chat_hub.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

Outbound = Union[WireModel, str]


class BroadcastEngine:
    """Publishes events into the log and out to every open participant.

    Delivery is best-effort: a failed send is logged and skipped, the
    participant stays registered until its connection reports a close.
    """

    def __init__(self, registry: ConnectionRegistry, log: MessageLog):
        self.registry = registry
        self.log = log

    # ── Event factories ───────────────────────────────────────

    @staticmethod
    def new_event(username: str, message: str, event_type: EventType = EventType.MESSAGE) -> ChatEvent:
        return ChatEvent(username=username, message=message, type=event_type)

    @classmethod
    def system_event(cls, message: str) -> ChatEvent:
        return cls.new_event(SYSTEM_AUTHOR, message, EventType.SYSTEM)

    # ── Publishing ────────────────────────────────────────────

    def publish(self, event: ChatEvent) -> int:
        """Append ``event`` to the log and send it to everyone.

        :return: Number of participants the frame was handed to
        """
        return self.publish_excluding(event, None)

    def publish_excluding(self, event: ChatEvent, excluded_id: Optional[str]) -> int:
        """Append ``event`` to the log and send it to everyone but ``excluded_id``."""
        self.log.append(event)
        return self.broadcast_excluding(EventMessage(data=event), excluded_id)

    def publish_user_list(self) -> int:
        """Send the current list of joined names to everyone."""
        return self.broadcast(UserListMessage(data=self.registry.list()))

    def broadcast(self, message: Outbound) -> int:
        return self.broadcast_excluding(message, None)

    def broadcast_excluding(self, message: Outbound, excluded_id: Optional[str]) -> int:
        """Send a frame that is not a chat event (not logged) to all but one participant."""
        text = self._serialize(message)
        delivered = 0

        def _deliver(participant: Participant) -> None:
            nonlocal delivered
            if self._send(participant, text):
                delivered += 1

        self.registry.for_each(_deliver, exclude_id=excluded_id)
        logger.debug(f"[BROADCAST] Frame delivered to {delivered} participant(s)")
        return delivered

    def send_to(self, participant_id: str, message: Outbound) -> bool:
        """Send a frame to a single participant.

        :raises UnknownParticipant: if the id is not registered
        :return: True if the frame was handed to the transport
        """
        participant = self.registry.get(participant_id)
        if participant is None:
            raise UnknownParticipant(participant_id)
        if not participant.transport.is_open:
            return False
        return self._send(participant, self._serialize(message))

    # ── Internals ─────────────────────────────────────────────

    @staticmethod
    def _serialize(message: Outbound) -> str:
        if isinstance(message, str):
            return message
        return message.to_json()

    @staticmethod
    def _send(participant: Participant, text: str) -> bool:
        try:
            participant.transport.send_text(text)
            return True
        except TransportError as e:
            logger.warning(f"[BROADCAST] {e}")
        except Exception as e:
            logger.warning(f"[BROADCAST] Send to {participant.id} failed: {type(e).__name__}: {e}")
        return False
