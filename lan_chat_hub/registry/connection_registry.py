"""Registry of connected participants and their transports."""
import logging
from typing import Callable, Dict, List, Optional

from lan_chat_hub.hub_errors import AlreadyJoined, DuplicateId, InvalidName, UnknownParticipant
from lan_chat_hub.hub_models import Participant, Transport

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps participant id → Participant.

    Not locked itself; callers serialize access through the hub lock.
    Iteration order is insertion order.
    """

    def __init__(self):
        self._participants: Dict[str, Participant] = {}

    def add(self, participant_id: str, transport: Transport) -> Participant:
        """Register an unjoined participant.

        :raises DuplicateId: if the id is already registered
        """
        if participant_id in self._participants:
            raise DuplicateId(participant_id)
        participant = Participant(id=participant_id, transport=transport)
        self._participants[participant_id] = participant
        logger.debug(f"[REGISTRY] Added connection {participant_id}")
        return participant

    def set_name(self, participant_id: str, name: str) -> Participant:
        """Promote a participant to joined under the given display name.

        Surrounding whitespace is stripped; the name is fixed from then on.

        :raises UnknownParticipant: if the id is not registered
        :raises InvalidName: if the name is empty after stripping
        :raises AlreadyJoined: if the participant already has a name
        """
        participant = self._participants.get(participant_id)
        if participant is None:
            raise UnknownParticipant(participant_id)
        clean = name.strip() if isinstance(name, str) else ""
        if not clean:
            raise InvalidName(name)
        if participant.joined:
            raise AlreadyJoined(participant_id, participant.name)
        participant.name = clean
        logger.debug(f"[REGISTRY] {participant_id} joined as {clean!r}")
        return participant

    def remove(self, participant_id: str) -> Optional[Participant]:
        """Evict a participant. Returns it, or None if it was already gone."""
        participant = self._participants.pop(participant_id, None)
        if participant:
            logger.debug(f"[REGISTRY] Removed connection {participant_id}")
        return participant

    def get(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def list(self) -> List[str]:
        """Snapshot of joined participants' display names."""
        return [p.name for p in self._participants.values() if p.joined]

    def for_each(self, fn: Callable[[Participant], None], exclude_id: Optional[str] = None) -> int:
        """Call ``fn`` for every joined participant with an open transport.

        Works on a snapshot, so ``fn`` may mutate the registry.

        :return: Number of participants visited
        """
        visited = 0
        for participant in list(self._participants.values()):
            if participant.id == exclude_id or not participant.joined:
                continue
            if not participant.transport.is_open:
                continue
            fn(participant)
            visited += 1
        return visited

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    @property
    def joined_count(self) -> int:
        return sum(1 for p in self._participants.values() if p.joined)

    @property
    def connection_count(self) -> int:
        return len(self._participants)
