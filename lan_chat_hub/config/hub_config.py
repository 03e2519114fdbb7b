import os
from dataclasses import dataclass
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass
class HubConfig:
    """Runtime configuration of a chat hub instance."""
    host: str = "0.0.0.0"
    """Interface the HTTP/WebSocket server binds to."""
    port: int = 3001
    """TCP port of the HTTP/WebSocket server."""
    received_dir: Path = Path("received")
    """Directory that receives relayed files, keyed by filename."""
    chat_log_path: Path = Path("chatlog.txt")
    """Text mirror of the chat log, rewritten on every append."""
    send_queue_size: int = 256
    """Maximum number of frames buffered per connection before sends fail."""
    log_level: str = "INFO"

    def __post_init__(self):
        self.received_dir = Path(self.received_dir)
        self.chat_log_path = Path(self.chat_log_path)
        if self.send_queue_size < 1:
            raise ValueError(f"send_queue_size must be positive, got {self.send_queue_size}")

    @classmethod
    def from_env(cls) -> "HubConfig":
        """Build a config from environment variables, falling back to defaults.

        :return: A config reflecting ``HOST``, ``PORT``, ``RECEIVED_DIR``, ``CHAT_LOG_PATH``,
            ``SEND_QUEUE_SIZE`` and ``LOG_LEVEL``
        """
        defaults = cls()
        return cls(
            host=os.environ.get("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            received_dir=Path(os.environ.get("RECEIVED_DIR", str(defaults.received_dir))),
            chat_log_path=Path(os.environ.get("CHAT_LOG_PATH", str(defaults.chat_log_path))),
            send_queue_size=_env_int("SEND_QUEUE_SIZE", defaults.send_queue_size),
            log_level=os.environ.get("LOG_LEVEL", defaults.log_level).upper(),
        )
