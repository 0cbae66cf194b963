from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from zeroframe.config import ShowOptions

logger = logging.getLogger(__name__)
display_logger = logging.getLogger("zeroframe")

HookResult = Union[None, Awaitable[None]]
RequestHook = Callable[[str, Dict[str, Any]], HookResult]
OpenHook = Callable[[], HookResult]
ErrorHook = Callable[[BaseException], HookResult]
CloseHook = Callable[[Optional[int], Optional[str]], HookResult]

PREFIX = "[ZeroFrame]"


@dataclass
class ClientHooks:
    """
    Optional application callbacks. Each may be a plain function or a coroutine
    function; a missing hook falls back to logging through :class:`Display`.
    """

    on_request: Optional[RequestHook] = None
    on_open: Optional[OpenHook] = None
    on_error: Optional[ErrorHook] = None
    on_close: Optional[CloseHook] = None


class Display:
    """User-facing output gated by the ``show`` options."""

    def __init__(self, show: Optional[ShowOptions] = None) -> None:
        self.show = show or ShowOptions()

    def log(self, *args: Any) -> None:
        if self.show.log:
            display_logger.info("%s %s", PREFIX, " ".join(str(arg) for arg in args))

    def error(self, *args: Any) -> None:
        if self.show.error:
            display_logger.error("%s %s", PREFIX, " ".join(str(arg) for arg in args))


class HookRunner:
    """Invokes application hooks, never letting their failures escape."""

    def __init__(self, hooks: Optional[ClientHooks] = None, display: Optional[Display] = None) -> None:
        self.hooks = hooks or ClientHooks()
        self.display = display or Display()

    async def request(self, cmd: str, message: Dict[str, Any]) -> None:
        if self.hooks.on_request is None:
            self.display.log("Unknown request", message)
            return
        await self._invoke("on_request", self.hooks.on_request, cmd, message)

    async def open(self) -> None:
        if self.hooks.on_open is None:
            self.display.log("Websocket open")
            return
        await self._invoke("on_open", self.hooks.on_open)

    async def error(self, exc: BaseException) -> None:
        if self.hooks.on_error is None:
            self.display.error("Websocket error")
            return
        await self._invoke("on_error", self.hooks.on_error, exc)

    async def close(self, code: Optional[int], reason: Optional[str]) -> None:
        if self.hooks.on_close is None:
            self.display.log("Websocket close")
            return
        await self._invoke("on_close", self.hooks.on_close, code, reason)

    async def _invoke(self, name: str, hook: Callable[..., HookResult], *args: Any) -> None:
        try:
            result = hook(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.exception("Hook %s failed: %s", name, exc)


__all__ = ["ClientHooks", "Display", "HookRunner"]
