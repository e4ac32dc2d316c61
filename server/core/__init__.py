from .connection import ConnectionContext
from .history import HistoryBuffer
from .registry import BroadcastRegistry
from .router import CommandResult, CommandRouter
from .server import SocketServer

__all__ = [
    "ConnectionContext",
    "HistoryBuffer",
    "BroadcastRegistry",
    "CommandResult",
    "CommandRouter",
    "SocketServer",
]
