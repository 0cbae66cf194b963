"""Protocol-wide constants for the ZeroFrame WebSocket API."""

ENCODING = "utf-8"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 43110
WEBSOCKET_PATH = "/Websocket"
WRAPPER_KEY_PATTERN = r'wrapper_key = "(.*?)"'
MASTER_ADDRESS_COOKIE = "master_address"
FIRST_MESSAGE_ID = 1
DEFAULT_RECONNECT_DELAY = 5000  # milliseconds
MAX_PAYLOAD_SIZE = 10 * 1024 * 1024

__all__ = [
    "ENCODING",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "WEBSOCKET_PATH",
    "WRAPPER_KEY_PATTERN",
    "MASTER_ADDRESS_COOKIE",
    "FIRST_MESSAGE_ID",
    "DEFAULT_RECONNECT_DELAY",
    "MAX_PAYLOAD_SIZE",
]
