from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Dict

logger = logging.getLogger(__name__)

ResponseCallback = Callable[[Any], None]


class CorrelationTable:
    """Waiting callbacks keyed by the id of the message they answer."""

    def __init__(self) -> None:
        self._waiting: Dict[int, ResponseCallback] = {}

    def register(self, message_id: int, callback: ResponseCallback) -> None:
        self._waiting[message_id] = callback

    def resolve(self, message_id: Any, result: Any) -> bool:
        """Fire and drop the callback for ``message_id``; unknown ids are ignored."""
        callback = self._waiting.pop(message_id, None)
        if callback is None:
            logger.debug("No callback waiting for message %s", message_id)
            return False
        try:
            callback(result)
        except Exception as exc:
            logger.exception("Response callback for message %s failed: %s", message_id, exc)
        return True

    def discard(self, message_id: int) -> None:
        self._waiting.pop(message_id, None)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._waiting

    def __len__(self) -> int:
        return len(self._waiting)


__all__ = ["CorrelationTable", "ResponseCallback"]
