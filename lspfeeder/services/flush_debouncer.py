"""Single-slot debounce timer in front of the diagnostics flush."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger


class FlushDebouncer:
    """Coalesce bursts of triggers into one flush after a quiet period.

    At most one timer is armed at any time; every trigger cancels the
    pending timer and arms a fresh one.
    """

    def __init__(self, flush: Callable[[], Awaitable[Any]], delay_ms: int):
        self._flush = flush
        self._delay = delay_ms / 1000.0
        self._handle: asyncio.TimerHandle | None = None
        self._flush_tasks: set[asyncio.Task] = set()
        self.fire_count = 0

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """(Re-)arm the timer. Must be called from the event loop thread."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.fire_count += 1
        task = asyncio.get_running_loop().create_task(self._run_flush())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    async def _run_flush(self) -> None:
        try:
            await self._flush()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Diagnostics flush failed: {e}")

    async def wait_idle(self) -> None:
        """Wait until no timer is armed and no flush is running."""
        while self._handle is not None or self._flush_tasks:
            if self._flush_tasks:
                await asyncio.gather(*list(self._flush_tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self._delay / 2 or 0.001)
