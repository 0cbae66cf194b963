from __future__ import annotations

from enum import StrEnum
from typing import Union


class MsgType(StrEnum):
    """
    Built-in command names handled by the transport core itself.
    Every other command name is application specific and passed through untouched.
    """

    RESPONSE = "response"
    PING = "ping"
    PONG = "pong"


CONTROL_COMMANDS = frozenset({MsgType.RESPONSE.value, MsgType.PING.value})


def normalize_command(command: Union[str, MsgType]) -> str:
    """Return the string value for a command (enum or raw string)."""
    if isinstance(command, MsgType):
        return command.value
    return str(command)


def is_control_command(command: Union[str, MsgType]) -> bool:
    """True when the dispatcher handles the command without application involvement."""
    return normalize_command(command) in CONTROL_COMMANDS


__all__ = ["MsgType", "CONTROL_COMMANDS", "normalize_command", "is_control_command"]
