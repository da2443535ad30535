"""Channel module."""

from .connector import IChannelConnector, LoopbackConnector, MessageHandler
from .reconnect import ConnectionState, ReconnectSupervisor

__all__ = [
    "ConnectionState",
    "IChannelConnector",
    "LoopbackConnector",
    "MessageHandler",
    "ReconnectSupervisor",
]
