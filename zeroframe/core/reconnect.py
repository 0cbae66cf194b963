from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from zeroframe.config import ReconnectOptions

logger = logging.getLogger(__name__)

FIRST_ATTEMPT = 1
UNLIMITED = -1


class ReconnectController:
    """
    Decides whether a closed transport is reopened and schedules the retry.

    ``attempts`` of 0 disables reconnecting and -1 retries forever. A positive
    limit is checked before every attempt. The counter goes back to its start
    on a successful open unless ``reset_on_open`` is off, in which case the
    limit applies to the whole life of the session.
    """

    def __init__(self, policy: Optional[ReconnectOptions] = None) -> None:
        self.policy = policy or ReconnectOptions()
        self.attempt: int = FIRST_ATTEMPT
        self._timer: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self.policy.attempts != 0

    @property
    def exhausted(self) -> bool:
        return self.policy.attempts != UNLIMITED and self.attempt > self.policy.attempts

    def should_retry(self) -> bool:
        return self.enabled and not self.exhausted

    def schedule(self, reopen: Callable[[], Awaitable[None]]) -> Optional[asyncio.Task]:
        """Run ``reopen`` after the policy delay, or return None when retrying is over."""
        if not self.should_retry():
            if self.enabled:
                logger.warning("Giving up after %s reconnect attempt(s)", self.attempt - 1)
            return None

        attempt = self.attempt
        self.attempt += 1
        self._timer = asyncio.create_task(self._delayed(reopen, attempt), name="zeroframe-reconnect")
        return self._timer

    async def _delayed(self, reopen: Callable[[], Awaitable[None]], attempt: int) -> None:
        await asyncio.sleep(self.policy.delay_seconds)
        logger.info("Reconnect attempt %s", attempt)
        await reopen()

    def on_open(self) -> None:
        if self.policy.reset_on_open:
            self.attempt = FIRST_ATTEMPT

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None


__all__ = ["ReconnectController", "FIRST_ATTEMPT", "UNLIMITED"]
