"""
Protocol package that centralizes command names, message models, framing helpers,
validation utilities and the error taxonomy of the ZeroFrame WebSocket API.
"""

from .commands import CONTROL_COMMANDS, MsgType, is_control_command, normalize_command
from .constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_RECONNECT_DELAY,
    ENCODING,
    FIRST_MESSAGE_ID,
    MASTER_ADDRESS_COOKIE,
    WEBSOCKET_PATH,
    WRAPPER_KEY_PATTERN,
)
from .errors import CommandError, ErrorCode, NetworkError, ProtocolError, SessionError, extract_error
from .framing import decode_msg, encode_msg
from .messages import BaseMsg, CommandMsg, Params, ResponseMsg
from .validator import validate_msg

__all__ = [
    "MsgType",
    "CONTROL_COMMANDS",
    "is_control_command",
    "normalize_command",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_RECONNECT_DELAY",
    "ENCODING",
    "FIRST_MESSAGE_ID",
    "MASTER_ADDRESS_COOKIE",
    "WEBSOCKET_PATH",
    "WRAPPER_KEY_PATTERN",
    "ErrorCode",
    "ProtocolError",
    "SessionError",
    "NetworkError",
    "CommandError",
    "extract_error",
    "encode_msg",
    "decode_msg",
    "BaseMsg",
    "CommandMsg",
    "ResponseMsg",
    "Params",
    "validate_msg",
]
