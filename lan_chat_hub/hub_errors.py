"""Error types raised inside the chat hub.

None of these are fatal to the hub process. The session layer absorbs them
with a log line and drops the offending request.
"""
from typing import Optional


class HubError(Exception):
    """Base class for all hub errors."""


class ProtocolError(HubError):
    """Raised when an inbound frame cannot be parsed into a known request."""
    def __init__(self, message: str, raw: Optional[str] = None):
        self.raw = raw
        super().__init__(message)


class ValidationError(HubError):
    """Raised when a well-formed request carries unacceptable values."""


class InvalidName(ValidationError):
    """Raised when a display name is empty after stripping whitespace."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid display name: {name!r}")


class AlreadyJoined(ValidationError):
    """Raised when a participant tries to change its name after joining."""
    def __init__(self, participant_id: str, name: str):
        self.participant_id = participant_id
        self.name = name
        super().__init__(f"Participant {participant_id} already joined as {name!r}")


class DecodeError(ValidationError):
    """Raised when file content is not valid base64."""
    def __init__(self, filename: str, reason: str = ""):
        self.filename = filename
        super().__init__(f"Could not decode content of {filename!r}: {reason}")


class InvalidFilename(ValidationError):
    """Raised when a filename reduces to nothing usable."""
    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Invalid filename: {filename!r}")


class UnknownParticipant(HubError):
    """Raised when an operation references an id that is not registered."""
    def __init__(self, participant_id: str):
        self.participant_id = participant_id
        super().__init__(f"Unknown participant: {participant_id}")


class DuplicateId(HubError):
    """Raised when a participant id is registered twice."""
    def __init__(self, participant_id: str):
        self.participant_id = participant_id
        super().__init__(f"Participant already registered: {participant_id}")


class TransportError(HubError):
    """Raised when a write to one participant's transport fails."""
    def __init__(self, participant_id: str, reason: str = ""):
        self.participant_id = participant_id
        super().__init__(f"Send to {participant_id} failed: {reason}")
