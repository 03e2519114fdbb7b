"""Standalone LAN chat server.

Usage::

    poetry run lan-chat-hub

    # Custom port / storage locations:
    PORT=9000 RECEIVED_DIR=/srv/chat/files poetry run lan-chat-hub

Environment variables:
    HOST            — Bind address (default: 0.0.0.0)
    PORT            — Server port (default: 3001)
    RECEIVED_DIR    — Directory for relayed files (default: received)
    CHAT_LOG_PATH   — Text mirror of the chat log (default: chatlog.txt)
    SEND_QUEUE_SIZE — Frames buffered per client before sends fail (default: 256)
    LOG_LEVEL       — Logging level (default: INFO)

Loads .env from the current working directory or any parent directory.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from lan_chat_hub.config import HubConfig

logger = logging.getLogger(__name__)


def create_app(config: Optional[HubConfig] = None):
    """Create the FastAPI application around a fresh ChatHub.

    Also called by uvicorn via the factory=True flag, in which case the
    configuration comes from the environment.
    """
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware

    from lan_chat_hub.hub import ChatHub
    from lan_chat_hub.server import build_http_router

    if config is None:
        from dotenv import load_dotenv, find_dotenv
        load_dotenv(find_dotenv(usecwd=True))
        config = HubConfig.from_env()

    hub = ChatHub(config)

    @asynccontextmanager
    async def lifespan(_a):
        logger.info(f"LAN chat hub running on port {config.port}")
        logger.info(f"Web API: http://localhost:{config.port}/api/health")
        logger.info("WebSocket ready for connections...")
        yield
        logger.info(f"Shutting down with {hub.registry.connection_count} open connection(s)")

    _app = FastAPI(title="LAN Chat Hub", docs_url=None, redoc_url=None, lifespan=lifespan)
    _app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    _app.state.hub = hub
    _app.include_router(build_http_router(hub))
    return _app


# ── Entry point ──────────────────────────────────────────────────

def main():
    """Load .env, configure logging, and start the server."""
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))

    import uvicorn

    config = HubConfig.from_env()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )

    print(f"\n  lan-chat-hub → http://localhost:{config.port}\n")
    uvicorn.run(
        "lan_chat_hub.standalone:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
