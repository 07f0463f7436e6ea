"""Protection against out-of-order responses for repeated logical queries.

Requests are issued in call order but can complete in any order. A logical
query ("load module list for course 7") keeps a sequence counter; a result is
applied only when it belongs to the latest issued call. ``LatestQuery`` also
cancels the superseded call cooperatively, which aiohttp supports.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class StaleResponseGuard:
    """Monotonic sequence counter for one logical query."""

    def __init__(self, name: str = "query") -> None:
        self.name = name
        self._seq = 0

    @property
    def latest(self) -> int:
        return self._seq

    def next(self) -> int:
        """Issue a new sequence number, superseding all earlier ones."""
        self._seq += 1
        return self._seq

    def is_current(self, seq: int) -> bool:
        return seq == self._seq


class LatestQuery:
    """Run a fetch, applying its result only if no newer fetch was started.

    Example:
        >>> modules = LatestQuery("course-7-modules")
        >>> await modules.run(lambda: courses.get_curriculum(7), view.set_modules)
    """

    def __init__(self, name: str = "query", *, cancel_superseded: bool = True) -> None:
        self.guard = StaleResponseGuard(name)
        self.cancel_superseded = cancel_superseded
        self._pending: asyncio.Future[Any] | None = None

    @property
    def name(self) -> str:
        return self.guard.name

    async def run(
        self,
        fetch: Callable[[], Awaitable[T]],
        apply: Callable[[T], Any],
    ) -> bool:
        """Issue a fetch and apply its result if still current.

        Args:
            fetch: Zero-argument coroutine factory performing the request.
            apply: Called with the result when it is the latest one.

        Returns:
            True when the result was applied, False when it was superseded.

        Raises:
            Exception: Errors of the current fetch propagate; errors of a
                superseded fetch are dropped.
        """
        seq = self.guard.next()
        previous = self._pending
        if self.cancel_superseded and previous is not None and not previous.done():
            previous.cancel()
        task = asyncio.ensure_future(fetch())
        self._pending = task
        try:
            result = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logging.debug(f"🗑️ Superseded fetch cancelled query={self.name} seq={seq}")
            return False
        except Exception:
            if not self.guard.is_current(seq):
                logging.debug(f"🗑️ Dropped error of superseded fetch query={self.name} seq={seq}")
                return False
            raise
        if not self.guard.is_current(seq):
            logging.debug(
                f"🗑️ Dropped stale response query={self.name} seq={seq} latest={self.guard.latest}"
            )
            return False
        apply(result)
        return True

    def cancel(self) -> None:
        """Cancel the in-flight fetch and invalidate its result."""
        self.guard.next()
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
