from .hub_config import HubConfig

__all__ = ["HubConfig"]
