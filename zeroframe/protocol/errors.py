from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional


class ErrorCode(IntEnum):
    """Error codes raised by the client core."""

    WRAPPER_KEY_FETCH_FAILED = 1001
    WRAPPER_KEY_MISSING = 1002
    SESSION_NOT_READY = 1003
    NOT_CONNECTED = 1004
    SEND_FAILED = 1005
    ENCODE_FAILED = 1006
    DECODE_FAILED = 1007
    INVALID_MESSAGE = 1008
    COMMAND_FAILED = 1009


class ProtocolError(Exception):
    """Structured client exception carrying a code + message."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.name} ({int(code)}): {message}")


class SessionError(ProtocolError):
    """Session could not be initialised (wrapper key missing or unreachable)."""

    pass


class NetworkError(ProtocolError):
    """Transport level error surfaced to higher layers."""

    pass


class CommandError(ProtocolError):
    """The peer answered a command with an error result."""

    def __init__(self, command: str, error: Any) -> None:
        self.command = command
        self.error = error
        super().__init__(ErrorCode.COMMAND_FAILED, f"{command}: {error}")


def extract_error(result: Any) -> Optional[Any]:
    """Return the error marker of a command result, if it carries one."""
    if isinstance(result, dict) and result.get("error"):
        return result["error"]
    return None


__all__ = [
    "ErrorCode",
    "ProtocolError",
    "SessionError",
    "NetworkError",
    "CommandError",
    "extract_error",
]
