"""Trailing-edge debounce for async callbacks."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger()


class Debouncer:
    """Run only the last of a burst of calls, ``delay`` seconds after it arrives.

    Each ``submit`` cancels the pending call. ``cancel`` must be awaited on
    teardown so no work outlives its owner.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, func: Callable[..., Awaitable[Any]], *args: Any) -> None:  # noqa: ANN401
        if self.pending:
            self._task.cancel()  # type: ignore[union-attr]
        self._task = asyncio.create_task(self._run(func, *args))

    async def _run(self, func: Callable[..., Awaitable[Any]], *args: Any) -> None:  # noqa: ANN401
        await asyncio.sleep(self.delay)
        try:
            await func(*args)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("debounced_call_failed")

    async def cancel(self) -> None:
        """Cancel the pending call, if any, and wait for it to finish."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
