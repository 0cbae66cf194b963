from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import jsonschema

from .commands import MsgType
from .errors import ErrorCode, ProtocolError

SCHEMA_DIR = Path(__file__).parent / "schemas"
GENERIC_SCHEMA = "message.json"

# Mapping command -> schema filename (relative to SCHEMA_DIR); every schema also requires "cmd"
SCHEMA_REGISTRY: Dict[str, str] = {
    MsgType.RESPONSE.value: "response.json",
    MsgType.PING.value: "ping.json",
}


def _schema_file(command: Any) -> str:
    if not isinstance(command, str):
        return GENERIC_SCHEMA
    return SCHEMA_REGISTRY.get(command, GENERIC_SCHEMA)


@lru_cache(maxsize=16)
def _read_schema(filename: str) -> dict:
    with (SCHEMA_DIR / filename).open("r", encoding="utf-8") as fp:
        return json.load(fp)


@lru_cache(maxsize=16)
def _validator(filename: str) -> jsonschema.Draft202012Validator:
    schema = _read_schema(filename)
    jsonschema.Draft202012Validator.check_schema(schema)
    return jsonschema.Draft202012Validator(schema)


def validate_msg(msg: Dict[str, Any]) -> None:
    """Validate an inbound frame against the schema of its command, once."""
    try:
        _validator(_schema_file(msg.get("cmd"))).validate(msg)
    except jsonschema.ValidationError as exc:
        raise ProtocolError(ErrorCode.INVALID_MESSAGE, f"Schema validation failed: {exc.message}") from exc


__all__ = ["validate_msg"]
