"""
ZeroFrame WebSocket client.

Talks to the ZeroFrame API of a ZeroNet site: queues commands until the socket
is open, correlates responses with their commands, answers keep-alive pings and
reconnects according to the configured policy.
"""

from .client import ZeroFrame
from .config import ClientOptions, ConfigError, load_options
from .core import ClientHooks
from .protocol.errors import CommandError, NetworkError, ProtocolError, SessionError

__all__ = [
    "ZeroFrame",
    "ClientOptions",
    "ClientHooks",
    "ConfigError",
    "load_options",
    "CommandError",
    "NetworkError",
    "ProtocolError",
    "SessionError",
]

__version__ = "1.0.0"
