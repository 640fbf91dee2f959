"""Cancellation token for abandoning an in-flight analysis."""

from __future__ import annotations

import asyncio


class CancellationToken:
    """
    One-shot cancellation signal.

    The owner of a capture calls ``cancel()`` when the UI is dismissed.
    The transport races its request against ``wait()``; callers check
    ``is_cancelled`` before applying a late result.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.is_cancelled
        True
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        """Block until cancelled."""
        await self._event.wait()
