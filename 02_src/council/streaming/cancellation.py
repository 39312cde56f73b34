"""Cooperative cancellation token."""

import asyncio

from ..errors import CancellationError


class CancellationToken:
    """A one-shot flag checked at every suspension point.

    Waiters are woken as soon as `cancel()` is called, so a suspended read
    can be aborted instead of polled.
    """

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        """Block until cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationError("cancelled")

    async def sleep(self, seconds: float) -> None:
        """Sleep, raising CancellationError early if cancelled meanwhile."""
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise CancellationError("cancelled")
