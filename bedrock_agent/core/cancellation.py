"""
Cancellation — one token per orchestration run carrying a manual cancel
signal and an optional whole-run deadline.

Every suspension point of the agent loop is awaited through ``guard()``,
so a cancel or an expired deadline aborts the pending step before its
result is appended anywhere.

Usage:
    token = CancellationToken(timeout=120)

    # In the UI layer:
    token.cancel("user closed the sheet")

    # In the agent loop:
    response = await token.guard(provider.send_message(...))
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Optional, TypeVar

from .errors import ErrorCode, OrchestrationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Cooperative cancellation with an optional monotonic deadline."""

    def __init__(self, timeout: Optional[float] = None):
        self._event = asyncio.Event()
        self._cancel_reason: str = ""
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def cancel_reason(self) -> str:
        return self._cancel_reason

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: str = "Cancelled by caller") -> None:
        self._cancel_reason = reason
        self._event.set()
        logger.info(f"Orchestration cancellation requested: {reason}")

    def check(self) -> None:
        """Raise OrchestrationCancelledError if cancelled or past the deadline."""
        if self._event.is_set():
            raise OrchestrationCancelledError(self._cancel_reason or "Orchestration cancelled")
        if self.deadline_exceeded:
            raise OrchestrationCancelledError(
                "Orchestration deadline exceeded", code=ErrorCode.AGENT_DEADLINE_EXCEEDED,
            )

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first; then cancel it and raise."""
        try:
            self.check()
        except OrchestrationCancelledError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        self.check()
        # asyncio.wait returned on timeout fractionally before the deadline.
        raise OrchestrationCancelledError(
            "Orchestration deadline exceeded", code=ErrorCode.AGENT_DEADLINE_EXCEEDED,
        )
