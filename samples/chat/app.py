#!/usr/bin/env python3
"""Standalone LAN chat hub.

    cd samples/chat
    poetry run python app.py

Starts on http://localhost:3001. Received files land in ./received and the
chat log is mirrored to ./chatlog.txt unless overridden.

Environment variables:
    PORT            — Server port (default: 3001)
    RECEIVED_DIR    — Directory for relayed files
    CHAT_LOG_PATH   — Chat log text mirror
    LOG_LEVEL       — Logging level (default: INFO)
"""
from lan_chat_hub.standalone import main

if __name__ == "__main__":
    main()
