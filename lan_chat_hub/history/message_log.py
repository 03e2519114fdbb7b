"""Append-only chat log with a plain-text mirror on disk."""
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from lan_chat_hub.hub_models import ChatEvent

logger = logging.getLogger(__name__)


def format_log_line(event: ChatEvent) -> str:
    """Render one event as ``[local timestamp] author: text``."""
    local = event.timestamp.astimezone()
    return f"[{local.strftime('%x, %X')}] {event.username}: {event.message}"


class ChatLogWriter:
    """Writes the full event sequence to a text file, one line per event."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, events: Sequence[ChatEvent]) -> None:
        content = "\n".join(format_log_line(e) for e in events)
        self.path.write_text(content, encoding="utf-8")


class MessageLog:
    """Ordered, in-memory sequence of chat events.

    The sequence is never truncated. Every append rewrites the whole
    mirror through ``writer`` when one is configured.
    """

    def __init__(self, writer: Optional[ChatLogWriter] = None):
        self._events: List[ChatEvent] = []
        self._writer = writer

    def append(self, event: ChatEvent) -> None:
        self._events.append(event)
        if self._writer is None:
            return
        try:
            self._writer.write(self._events)
        except OSError as e:
            logger.error(f"[HISTORY] Failed to persist chat log to {self._writer.path}: {e}")

    def history(self) -> List[ChatEvent]:
        """All events in append order (a copy)."""
        return list(self._events)

    def size(self) -> int:
        return len(self._events)

    def __len__(self) -> int:
        return len(self._events)
