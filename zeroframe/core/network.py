from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Dict, Optional, Union

from zeroframe.core.correlation import CorrelationTable, ResponseCallback
from zeroframe.core.hooks import ClientHooks, Display, HookRunner
from zeroframe.core.outbox import OutboundQueue, QueuedMessage
from zeroframe.core.reconnect import ReconnectController
from zeroframe.core.session import ClientSession
from zeroframe.core.transport import Connector, Transport
from zeroframe.protocol import framing, validator
from zeroframe.protocol.commands import MsgType, is_control_command, normalize_command
from zeroframe.protocol.constants import FIRST_MESSAGE_ID
from zeroframe.protocol.errors import ErrorCode, NetworkError, ProtocolError
from zeroframe.protocol.messages import BaseMsg, ResponseMsg

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class NetworkClient:
    """WebSocket client that queues while offline, correlates responses, answers pings and reconnects."""

    def __init__(
        self,
        session: ClientSession,
        hooks: Optional[ClientHooks] = None,
        display: Optional[Display] = None,
        connector: Optional[Connector] = None,
    ) -> None:
        self.session = session
        self.options = session.options
        self.hooks = HookRunner(hooks, display or Display(self.options.show))
        self.transport: Optional[Transport] = None
        self.connected: bool = False
        self.outbox = OutboundQueue()
        self.callbacks = CorrelationTable()
        self.reconnect = ReconnectController(self.options.reconnect)
        self.next_message_id: int = FIRST_MESSAGE_ID
        self._connector = connector
        self._handlers: Dict[str, MessageHandler] = {}
        self._closed: bool = False
        self._opened = asyncio.Event()

    async def connect(self) -> None:
        """Resolve the wrapper key, then open the first transport."""
        self._closed = False
        await self.session.fetch_wrapper_key()
        await self._open_transport()

    async def wait_connected(self) -> None:
        await self._opened.wait()

    async def close(self) -> None:
        self._closed = True
        self.reconnect.cancel()
        if self.transport is not None:
            await self.transport.close()
        self.connected = False
        self._opened.clear()
        logger.info("Network client closed")

    async def send(self, message: BaseMsg, callback: Optional[ResponseCallback] = None) -> BaseMsg:
        """
        Transmit ``message`` now if the transport is open, otherwise queue it.

        A message without an id gets the next sequential one. The message is
        encoded first, so a payload that cannot be sent raises
        :class:`ProtocolError` here and never reaches the queue. The callback
        is registered before transmitting, so a fast response still finds it.
        """
        if message.id is None:
            message.id = self.next_message_id
            self.next_message_id += 1
        frame = message.to_frame()

        if callback is not None:
            self.callbacks.register(message.id, callback)

        if not self.connected:
            self.outbox.push(message, frame)
            return message

        try:
            await self._transmit(message, frame)
        except NetworkError as exc:
            # Connection dropped under us; the message goes out after reconnecting
            logger.warning("Send of message %s failed, queueing: %s", message.id, exc)
            self.outbox.push(message, frame)
        except Exception:
            self.callbacks.discard(message.id)
            raise
        return message

    async def respond(self, to: int, result: Any) -> BaseMsg:
        return await self.send(ResponseMsg(to=to, result=result))

    def register_handler(self, command: Union[str, MsgType], handler: MessageHandler) -> None:
        """
        Handle an application command pushed by the peer.

        Handlers run on the socket reader; awaiting a command result inside one
        would block the response it waits for, so schedule a task instead.
        """
        self._handlers[normalize_command(command)] = handler

    async def _transmit(self, message: BaseMsg, frame: str) -> None:
        if self.transport is None:
            raise NetworkError(ErrorCode.NOT_CONNECTED, "No transport")
        await self.transport.send(frame)
        logger.debug("Sent message %s (%s)", message.id, message.cmd)

    async def _transmit_queued(self, entry: QueuedMessage) -> None:
        await self._transmit(entry.message, entry.frame)

    def _drop_queued(self, entry: QueuedMessage) -> None:
        self.callbacks.discard(entry.message.id)

    async def _open_transport(self) -> None:
        if self._closed:
            return
        if self.transport is not None:
            self.transport.detach()
        self.transport = Transport(
            self.session.websocket_url,
            headers=self.session.build_headers(),
            on_message=self._on_message,
            on_open=self._on_open,
            on_error=self._on_error,
            on_close=self._on_close,
            connector=self._connector,
        )
        await self.transport.open()

    async def _on_open(self, transport: Transport) -> None:
        if transport is not self.transport:
            return
        self.reconnect.on_open()
        try:
            # Still marked offline, so sends issued meanwhile join the queue behind older messages
            await self.outbox.flush(self._transmit_queued, on_drop=self._drop_queued)
        except NetworkError as exc:
            logger.warning("Flushing queued messages failed: %s", exc)
            return
        self.connected = True
        self._opened.set()
        logger.info("Connected to %s", self.session.site)
        await self.hooks.open()

    async def _on_error(self, transport: Transport, exc: BaseException) -> None:
        if transport is not self.transport:
            return
        await self.hooks.error(exc)

    async def _on_close(self, transport: Transport, code: Optional[int], reason: Optional[str]) -> None:
        if transport is not self.transport:
            return
        self.connected = False
        self._opened.clear()
        await self.hooks.close(code, reason)

        if self._closed:
            return
        if self.reconnect.schedule(self._open_transport) is not None:
            logger.info("Connection lost (%s), reconnecting in %.1fs", code, self.options.reconnect.delay_seconds)

    async def _on_message(self, transport: Transport, raw: Union[str, bytes]) -> None:
        if transport is not self.transport:
            return
        try:
            msg = framing.decode_msg(raw)
            validator.validate_msg(msg)
        except ProtocolError as exc:
            logger.warning("Dropping inbound frame: %s", exc)
            return
        await self._dispatch(msg)

    async def _dispatch(self, msg: Dict[str, Any]) -> None:
        command = msg["cmd"]
        if is_control_command(command):
            await self._dispatch_control(command, msg)
        elif command in self._handlers:
            try:
                await self._handlers[command](msg)
            except Exception as exc:
                logger.exception("Handler error for %s: %s", command, exc)
        else:
            await self.hooks.request(command, msg)

    async def _dispatch_control(self, command: str, msg: Dict[str, Any]) -> None:
        if command == MsgType.RESPONSE:
            self.callbacks.resolve(msg["to"], msg.get("result"))
        elif command == MsgType.PING:
            await self.respond(msg["id"], MsgType.PONG.value)


__all__ = ["NetworkClient", "MessageHandler"]
