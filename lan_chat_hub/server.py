"""HTTP and WebSocket routes of the chat hub.

Host apps call build_http_router(hub) and include the router once at startup.
"""

import logging
from urllib.parse import quote

from starlette.websockets import WebSocketState

from lan_chat_hub.api import WebSocketTransport
from lan_chat_hub.files import DOWNLOAD_PREFIX, safe_filename
from lan_chat_hub.hub import ChatHub
from lan_chat_hub.hub_errors import InvalidFilename
from lan_chat_hub.hub_models import new_id

logger = logging.getLogger(__name__)

# API path constants
API_PREFIX = "/api"
API_HEALTH = f"{API_PREFIX}/health"
API_CHAT_HISTORY = f"{API_PREFIX}/chat-history"
API_USERS = f"{API_PREFIX}/users"
WS_PATHS = ("/", "/ws")


def _content_disposition(name: str) -> str:
    fallback = name.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(name)}"


async def serve_connection(hub: ChatHub, ws) -> None:
    """Run one WebSocket client until it disconnects."""
    await ws.accept()
    participant_id = new_id()
    transport = WebSocketTransport(ws, participant_id, max_queue=hub.config.send_queue_size)
    transport.start()
    session = await hub.connect(transport, participant_id)

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None and message.get("bytes") is not None:
                raw = message["bytes"].decode("utf-8", errors="replace")
            if raw is None:
                continue
            await session.handle_frame(raw)
    except Exception as e:
        logger.error(f"[WS] Error on connection {participant_id}: {type(e).__name__}: {e}")
    finally:
        await session.close()
        await transport.close()
        if ws.client_state == WebSocketState.CONNECTED:
            try:
                await ws.close(code=1011, reason="Internal error")
            except RuntimeError as e:
                logger.debug(f"[WS] Close of {participant_id} failed: {e}")
        logger.info(f"[WS] Connection {participant_id} closed")


def build_http_router(hub: ChatHub):
    """Build the FastAPI APIRouter with the REST endpoints and the chat WebSocket."""
    from fastapi import APIRouter
    from fastapi.responses import Response
    from starlette.websockets import WebSocket as _WS

    router = APIRouter()

    @router.get(API_HEALTH)
    async def health():
        return hub.health()

    @router.get(API_CHAT_HISTORY)
    async def chat_history():
        return [event.model_dump(mode="json") for event in hub.log.history()]

    @router.get(API_USERS)
    async def users():
        return hub.registry.list()

    @router.get(DOWNLOAD_PREFIX + "/{filename}")
    async def download(filename: str):
        try:
            name = safe_filename(filename)
        except InvalidFilename:
            logger.info(f"[HTTP] Download with unusable name {filename!r}")
            return Response(status_code=404, content="Not found")
        content = hub.store.read(name)
        if content is None:
            logger.info(f"[HTTP] Download of missing file {name!r}")
            return Response(status_code=404, content="Not found")
        return Response(
            content=content,
            media_type="application/octet-stream",
            headers={"Content-Disposition": _content_disposition(name)},
        )

    async def websocket_chat(ws: _WS):
        """WebSocket endpoint for chat clients."""
        await serve_connection(hub, ws)

    for path in WS_PATHS:
        router.add_api_websocket_route(path, websocket_chat)

    return router
