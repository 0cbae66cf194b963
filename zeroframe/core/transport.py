from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Dict, Optional, Union

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from zeroframe.protocol.constants import MAX_PAYLOAD_SIZE
from zeroframe.protocol.errors import ErrorCode, NetworkError

logger = logging.getLogger(__name__)

Connector = Callable[..., Awaitable[Any]]
OnMessage = Callable[["Transport", Union[str, bytes]], Awaitable[None]]
OnOpen = Callable[["Transport"], Awaitable[None]]
OnError = Callable[["Transport", BaseException], Awaitable[None]]
OnClose = Callable[["Transport", Optional[int], Optional[str]], Awaitable[None]]


class ConnectionState(str, Enum):
    """State of one socket connection."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class Transport:
    """
    One WebSocket connection and its lifecycle events.

    A transport is never reused: reconnecting creates a new instance and the
    superseded one is detached, after which it reports no further events.
    """

    def __init__(
        self,
        url: str,
        *,
        on_message: OnMessage,
        on_open: OnOpen,
        on_error: OnError,
        on_close: OnClose,
        headers: Optional[Dict[str, str]] = None,
        connector: Optional[Connector] = None,
    ) -> None:
        self.url = url
        self.headers = dict(headers or {})
        self.state = ConnectionState.CONNECTING
        self.close_code: Optional[int] = None
        self.close_reason: Optional[str] = None
        self._on_message = on_message
        self._on_open = on_open
        self._on_error = on_error
        self._on_close = on_close
        self._connector = connector or connect
        self._ws: Any = None
        self._reader_task: Optional[asyncio.Task] = None
        self._detached = False

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    async def open(self) -> None:
        """Start connecting; success and failure are both reported through the events."""
        if self._reader_task is not None:
            raise RuntimeError("Transport already started")
        self._reader_task = asyncio.create_task(self._run(), name="zeroframe-transport-reader")

    async def send(self, raw: str) -> None:
        if not self.is_open or self._ws is None:
            raise NetworkError(ErrorCode.NOT_CONNECTED, f"Transport is {self.state.value}")
        try:
            await self._ws.send(raw)
        except ConnectionClosed as exc:
            raise NetworkError(ErrorCode.SEND_FAILED, f"Connection lost: {exc}") from exc

    async def close(self) -> None:
        if self._ws is not None and self.state is not ConnectionState.CLOSED:
            await self._ws.close()
        task = self._reader_task
        if task is None or task.done() or task is asyncio.current_task():
            self.state = ConnectionState.CLOSED
            return
        if self._ws is None:
            # Still connecting
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.state = ConnectionState.CLOSED

    def detach(self) -> None:
        """Silence every further event from this connection."""
        self._detached = True

    async def _run(self) -> None:
        try:
            self._ws = await self._connector(
                self.url,
                additional_headers=self.headers or None,
                max_size=MAX_PAYLOAD_SIZE,
            )
        except asyncio.CancelledError:
            self.state = ConnectionState.CLOSED
            raise
        except (OSError, WebSocketException) as exc:
            logger.warning("Connect to %s failed: %s", self.url, exc)
            self.state = ConnectionState.CLOSED
            await self._emit(self._on_error, exc)
            await self._emit(self._on_close, None, str(exc))
            return

        self.state = ConnectionState.OPEN
        logger.debug("Connected to %s", self.url)
        await self._emit(self._on_open)
        try:
            async for raw in self._ws:
                await self._emit(self._on_message, raw)
        except ConnectionClosedError as exc:
            logger.warning("Receive loop terminated: %s", exc)
            await self._emit(self._on_error, exc)
        except asyncio.CancelledError:
            self.state = ConnectionState.CLOSED
            raise

        self.state = ConnectionState.CLOSED
        self.close_code = getattr(self._ws, "close_code", None)
        self.close_reason = getattr(self._ws, "close_reason", None)
        logger.debug("Connection to %s closed (%s)", self.url, self.close_code)
        await self._emit(self._on_close, self.close_code, self.close_reason)

    async def _emit(self, callback: Callable[..., Awaitable[None]], *args: Any) -> None:
        if self._detached:
            return
        try:
            await callback(self, *args)
        except Exception as exc:
            logger.exception("Transport event handler error: %s", exc)


__all__ = ["ConnectionState", "Connector", "Transport"]
