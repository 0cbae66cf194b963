from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Dict, Optional, Tuple

from zeroframe.core.correlation import ResponseCallback
from zeroframe.core.network import NetworkClient
from zeroframe.protocol.commands import normalize_command
from zeroframe.protocol.errors import CommandError, extract_error
from zeroframe.protocol.messages import BaseMsg, CommandMsg, Params

logger = logging.getLogger(__name__)


def shape_params(args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Params:
    """
    Turn call arguments into command parameters.

    No arguments give ``{}``, keyword arguments give a keyword object, a single
    mapping or list is passed through, and anything else becomes a positional list.
    """
    if args and kwargs:
        raise TypeError("Pass either positional or keyword arguments, not both")
    if kwargs:
        return dict(kwargs)
    if not args:
        return {}
    if len(args) == 1 and isinstance(args[0], Mapping):
        return dict(args[0])
    if len(args) == 1 and isinstance(args[0], list):
        return args[0]
    return list(args)


class CommandManager:
    """Command facade: fire-and-forget, awaitable and call-by-name commands, plus responses."""

    def __init__(self, network: NetworkClient) -> None:
        self.network = network

    async def cmd(self, name: str, params: Optional[Params] = None, callback: Optional[ResponseCallback] = None) -> BaseMsg:
        message = CommandMsg(cmd=normalize_command(name), params=params if params is not None else {})
        return await self.network.send(message, callback)

    async def cmd_async(self, name: str, params: Optional[Params] = None) -> Any:
        """Send a command and wait for its result; an ``error`` in the result raises :class:`CommandError`."""
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        def _complete(result: Any) -> None:
            if future.done():
                return
            error = extract_error(result)
            if error is not None:
                future.set_exception(CommandError(name, error))
            else:
                future.set_result(result)

        await self.cmd(name, params, _complete)
        return await future

    async def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return await self.cmd_async(name, shape_params(args, kwargs))

    def command(self, name: str) -> Callable[..., Awaitable[Any]]:
        """Callable bound to one command name, e.g. ``site_info = commands.command("siteInfo")``."""
        return functools.partial(self.invoke, name)

    async def response(self, to: int, result: Any) -> BaseMsg:
        return await self.network.respond(to, result)


__all__ = ["CommandManager", "shape_params"]
