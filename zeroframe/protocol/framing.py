from __future__ import annotations

import json
from typing import Union

from .constants import ENCODING, MAX_PAYLOAD_SIZE
from .errors import ErrorCode, ProtocolError


def encode_msg(msg: dict) -> str:
    """Encode message dict into a JSON text frame."""
    try:
        data = json.dumps(msg, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise ProtocolError(ErrorCode.ENCODE_FAILED, f"Encode failed: {exc}") from exc

    if len(data.encode(ENCODING)) > MAX_PAYLOAD_SIZE:
        raise ProtocolError(ErrorCode.ENCODE_FAILED, "Payload too large for a single frame")
    return data


def decode_msg(data: Union[str, bytes]) -> dict:
    """Decode a text or binary frame into a dictionary."""
    try:
        if isinstance(data, (bytes, bytearray)):
            data = data.decode(ENCODING)
        msg = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(ErrorCode.DECODE_FAILED, f"Decode failed: {exc}") from exc

    if not isinstance(msg, dict):
        raise ProtocolError(ErrorCode.DECODE_FAILED, f"Expected a JSON object, got {type(msg).__name__}")
    return msg


__all__ = ["encode_msg", "decode_msg"]
