from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError

from .commands import MsgType
from .errors import ErrorCode, ProtocolError
from .framing import encode_msg

Params = Union[Dict[str, Any], List[Any]]


class BaseMsg(BaseModel):
    """Envelope shared by every frame: an optional numeric id and a command name."""

    model_config = ConfigDict(extra="allow")

    id: Optional[int] = Field(default=None, description="Correlation id, assigned on send when missing")
    cmd: str = Field(..., description="Command name such as siteInfo or response")

    def to_wire(self) -> Dict[str, Any]:
        try:
            return self.model_dump(mode="json")
        except PydanticSerializationError as exc:
            raise ProtocolError(ErrorCode.ENCODE_FAILED, f"Encode failed: {exc}") from exc

    def to_frame(self) -> str:
        """Serialize into the JSON text frame sent on the socket."""
        return encode_msg(self.to_wire())


class CommandMsg(BaseMsg):
    """Outbound (or inbound application) command carrying parameters."""

    params: Params = Field(default_factory=dict)


class ResponseMsg(BaseMsg):
    """Answer to a previously received message, addressed by its id."""

    cmd: str = Field(default=MsgType.RESPONSE.value, frozen=True)
    to: int
    result: Any = None


__all__ = ["Params", "BaseMsg", "CommandMsg", "ResponseMsg"]
