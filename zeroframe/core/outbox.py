from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import List, Optional

from zeroframe.protocol.errors import NetworkError, ProtocolError
from zeroframe.protocol.messages import BaseMsg

logger = logging.getLogger(__name__)


@dataclass
class QueuedMessage:
    message: BaseMsg
    frame: str
    processed: bool = False


class OutboundQueue:
    """Encoded messages produced while the transport is not open, kept in enqueue order."""

    def __init__(self) -> None:
        self._entries: List[QueuedMessage] = []

    def push(self, message: BaseMsg, frame: Optional[str] = None) -> QueuedMessage:
        """Queue ``message``; it is encoded here unless ``frame`` is given, so encode errors reach the caller."""
        entry = QueuedMessage(message, frame if frame is not None else message.to_frame())
        self._entries.append(entry)
        logger.debug("Queued message %s (%s)", message.id, message.cmd)
        return entry

    async def flush(
        self,
        transmit: Callable[[QueuedMessage], Awaitable[None]],
        on_drop: Optional[Callable[[QueuedMessage], None]] = None,
    ) -> int:
        """
        Transmit every unprocessed entry in order and mark it processed.

        Entries appended while flushing are picked up by the same pass. A
        :class:`NetworkError` stops the pass and leaves the failing entry and
        everything after it for the next flush. Any other protocol error only
        drops that entry; ``on_drop`` is told about it and the pass goes on.
        """
        sent = 0
        index = 0
        while index < len(self._entries):
            entry = self._entries[index]
            index += 1
            if entry.processed:
                continue
            try:
                await transmit(entry)
            except NetworkError:
                raise
            except ProtocolError as exc:
                logger.warning("Dropping queued message %s (%s): %s", entry.message.id, entry.message.cmd, exc)
                entry.processed = True
                if on_drop is not None:
                    on_drop(entry)
                continue
            entry.processed = True
            sent += 1
        if sent:
            logger.debug("Flushed %s queued message(s)", sent)
        return sent

    @property
    def pending_count(self) -> int:
        return sum(1 for entry in self._entries if not entry.processed)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["OutboundQueue", "QueuedMessage"]
