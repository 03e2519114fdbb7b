from .broadcast_engine import BroadcastEngine

__all__ = ["BroadcastEngine"]
