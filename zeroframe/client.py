from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Optional, Union

import httpx

from zeroframe.config import ClientOptions
from zeroframe.core.correlation import ResponseCallback
from zeroframe.core.hooks import ClientHooks, Display
from zeroframe.core.network import MessageHandler, NetworkClient
from zeroframe.core.session import ClientSession
from zeroframe.core.transport import Connector
from zeroframe.features.commands import CommandManager
from zeroframe.protocol.messages import BaseMsg, Params

logger = logging.getLogger(__name__)


class ZeroFrame:
    """
    Client for the ZeroFrame WebSocket API of one site.

    Options are given as a nested mapping (``{"instance": {"port": 43111}}``)
    or a ready :class:`ClientOptions`. Commands issued before :meth:`connect`
    completes are queued and sent once the socket opens.

    Usage::

        async with ZeroFrame("1HeLLo4uzjaLetFx6NH3PMwFP3qbRbTf3D") as zeroframe:
            info = await zeroframe.cmd_async("siteInfo")
    """

    def __init__(
        self,
        site: str,
        options: Union[ClientOptions, Mapping[str, Any], None] = None,
        hooks: Optional[ClientHooks] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        connector: Optional[Connector] = None,
    ) -> None:
        if isinstance(options, ClientOptions):
            self.options = options
        else:
            self.options = ClientOptions.from_mapping(options)
        self.display = Display(self.options.show)
        self.session = ClientSession(site, self.options, http_client=http_client)
        self.network = NetworkClient(self.session, hooks, display=self.display, connector=connector)
        self.commands = CommandManager(self.network)

    @property
    def site(self) -> str:
        return self.session.site

    @property
    def connected(self) -> bool:
        return self.network.connected

    async def connect(self) -> "ZeroFrame":
        await self.network.connect()
        return self

    async def wait_connected(self) -> None:
        await self.network.wait_connected()

    async def close(self) -> None:
        await self.network.close()

    async def __aenter__(self) -> "ZeroFrame":
        return await self.connect()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def register_handler(self, command: str, handler: MessageHandler) -> None:
        self.network.register_handler(command, handler)

    async def cmd(self, name: str, params: Optional[Params] = None, callback: Optional[ResponseCallback] = None) -> BaseMsg:
        return await self.commands.cmd(name, params, callback)

    async def cmd_async(self, name: str, params: Optional[Params] = None) -> Any:
        return await self.commands.cmd_async(name, params)

    async def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return await self.commands.invoke(name, *args, **kwargs)

    def command(self, name: str) -> Callable[..., Awaitable[Any]]:
        return self.commands.command(name)

    async def response(self, to: int, result: Any) -> BaseMsg:
        return await self.commands.response(to, result)

    def log(self, *args: Any) -> None:
        self.display.log(*args)

    def error(self, *args: Any) -> None:
        self.display.error(*args)


__all__ = ["ZeroFrame"]
