"""File relay: base64 payload decoding and the received-files store."""

from lan_chat_hub.files.file_relay import (
    DOWNLOAD_PREFIX,
    FileRelay,
    FileStore,
    RelayResult,
    decode_file_data,
    download_url,
    encode_file_data,
    format_file_size,
    safe_filename,
)

__all__ = [
    "DOWNLOAD_PREFIX",
    "FileRelay",
    "FileStore",
    "RelayResult",
    "decode_file_data",
    "download_url",
    "encode_file_data",
    "format_file_size",
    "safe_filename",
]
