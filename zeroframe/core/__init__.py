from .correlation import CorrelationTable
from .hooks import ClientHooks, Display, HookRunner
from .network import NetworkClient
from .outbox import OutboundQueue, QueuedMessage
from .reconnect import ReconnectController
from .session import ClientSession
from .transport import ConnectionState, Transport

__all__ = [
    "ClientHooks",
    "ClientSession",
    "ConnectionState",
    "CorrelationTable",
    "Display",
    "HookRunner",
    "NetworkClient",
    "OutboundQueue",
    "QueuedMessage",
    "ReconnectController",
    "Transport",
]
