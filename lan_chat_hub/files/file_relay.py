"""Decoding and storage of files relayed between participants."""
from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from lan_chat_hub.hub_errors import DecodeError, InvalidFilename, UnknownParticipant
from lan_chat_hub.hub_models import FilePayload
from lan_chat_hub.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

DOWNLOAD_PREFIX = "/api/download"

_SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_file_size(size: int) -> str:
    """Human-readable size, e.g. ``1536`` → ``"1.5 KB"``."""
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


def safe_filename(filename: str) -> str:
    """Strip any directory part so the name stays inside the store.

    :raises InvalidFilename: if nothing usable remains or the name holds a NUL byte
    """
    name = Path(filename.replace("\\", "/")).name if filename else ""
    if name in ("", ".", "..") or "\x00" in name:
        raise InvalidFilename(filename)
    return name


def download_url(filename: str) -> str:
    return f"{DOWNLOAD_PREFIX}/{quote(filename)}"


def decode_file_data(payload: FilePayload) -> bytes:
    """Decode the base64 content of a payload.

    :raises DecodeError: if the content is not valid base64
    """
    try:
        return base64.b64decode(payload.file_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(payload.filename, str(e)) from e


def encode_file_data(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


class FileStore:
    """Directory of received files, keyed by filename. Last write wins."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        return self.base_dir / safe_filename(filename)

    def write(self, filename: str, content: bytes) -> Path:
        dest = self.path_for(filename)
        dest.write_bytes(content)
        return dest

    def read(self, filename: str) -> Optional[bytes]:
        """Return the stored bytes, or None if there is no such file."""
        try:
            path = self.path_for(filename)
        except InvalidFilename:
            return None
        if not path.is_file():
            return None
        return path.read_bytes()


@dataclass
class RelayResult:
    filename: str
    bytes_written: int
    path: Path


class FileRelay:
    """Accepts file payloads from joined participants and persists them.

    The file is written before anyone is notified; a later broadcast
    failure does not undo the write.
    """

    def __init__(self, registry: ConnectionRegistry, store: FileStore):
        self.registry = registry
        self.store = store

    def receive(self, sender_id: str, payload: FilePayload) -> RelayResult:
        """Decode and store a payload sent by ``sender_id``.

        :raises UnknownParticipant: if the sender is not registered or has not joined
        :raises DecodeError: if the content is not valid base64
        :raises InvalidFilename: if the filename is empty, a bare directory reference or holds a NUL byte
        """
        sender = self.registry.get(sender_id)
        if sender is None or not sender.joined:
            raise UnknownParticipant(sender_id)
        filename = safe_filename(payload.filename)
        content = decode_file_data(payload)
        path = self.store.write(filename, content)
        logger.info(f"[FILE] Stored {filename} ({len(content)} bytes) from {sender.name}")
        return RelayResult(filename=filename, bytes_written=len(content), path=path)
