"""WebSocket session handling for the chat hub.

Provides SessionProtocol (per-connection state machine) and
WebSocketTransport (buffered outbound frames). The WS endpoint itself
lives in lan_chat_hub.server.build_http_router().
"""

from .session_protocol import SessionProtocol, SessionState, parse_request
from .ws_transport import WebSocketTransport

__all__ = ["SessionProtocol", "SessionState", "parse_request", "WebSocketTransport"]
