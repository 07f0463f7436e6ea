"""Session refresh coordination for concurrent 401 responses.

Any number of in-flight requests may see a 401 at roughly the same time.
The coordinator guarantees a single refresh call per cycle: the first caller
starts it, every other caller queues behind it, and all of them are released
together when it settles.

State machine::

    IDLE --auth failure--> REFRESHING --refresh ok-----> IDLE (waiters resolved)
                                      --refresh failed-> IDLE (waiters rejected)

The refresh runs in its own task so a cancelled caller never strands the
rest of the queue.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from ..errors.handling import log_error
from ..errors.internal import SessionExpiredError


class RefreshState(Enum):
    """Refresh coordinator states.

    Attributes:
        IDLE: No refresh in flight; the waiter queue is empty.
        REFRESHING: One refresh call in flight; new auth failures queue up.
    """

    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshCoordinator:
    """Single-flight session refresh with an explicit waiter queue."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[Any]],
        *,
        after_refresh: Callable[[], Awaitable[Any]] | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            refresh: Performs the refresh call; any exception means failure.
            after_refresh: Coupled step run after a successful refresh and
                before waiters are released (CSRF re-bootstrap).
            timeout: Upper bound for refresh plus ``after_refresh``; exceeding
                it counts as a refresh failure.
        """
        self._refresh = refresh
        self._after_refresh = after_refresh
        self._timeout = timeout
        self._state = RefreshState.IDLE
        self._waiters: list[asyncio.Future[None]] = []
        self._cycle: asyncio.Task[None] | None = None
        self.refresh_count = 0
        self.last_error: BaseException | None = None

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def is_refreshing(self) -> bool:
        return self._state is RefreshState.REFRESHING

    @property
    def pending_waiters(self) -> int:
        return len(self._waiters)

    async def wait_for_refresh(self) -> None:
        """Join the current refresh cycle, starting one if idle.

        Returns once the session has been refreshed.

        Raises:
            SessionExpiredError: The refresh failed; the same instance is
                raised to every caller of the cycle.
        """
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        if self._state is RefreshState.REFRESHING:
            self._waiters.append(waiter)
            logging.debug(f"⏳ Refresh in flight, queued request waiters={len(self._waiters)}")
        else:
            assert not self._waiters, "waiter queue must be empty when idle"
            self._waiters.append(waiter)
            self._state = RefreshState.REFRESHING
            self._cycle = asyncio.ensure_future(self._run_cycle())
        await waiter

    async def close(self) -> None:
        """Cancel a running cycle; its waiters are rejected."""
        cycle = self._cycle
        if cycle is not None and not cycle.done():
            cycle.cancel()
            try:
                await cycle
            except asyncio.CancelledError:
                pass
        # A cycle cancelled before its first step never reached _settle.
        if self._waiters:
            self._settle(SessionExpiredError("Session refresh was cancelled."))

    async def _run_cycle(self) -> None:
        self.refresh_count += 1
        logging.info(f"🔄 Refreshing session (cycle {self.refresh_count})")
        try:
            await asyncio.wait_for(self._refresh_and_sync(), timeout=self._timeout)
        except asyncio.CancelledError:
            self._settle(SessionExpiredError("Session refresh was cancelled."))
            raise
        except Exception as e:  # noqa: BLE001
            self.last_error = e
            log_error("Session refresh failed", e, context={"waiters": len(self._waiters)})
            error = SessionExpiredError(raw=e)
            error.__cause__ = e
            self._settle(error)
        else:
            self.last_error = None
            logging.info(f"✅ Session refreshed, releasing waiters={len(self._waiters)}")
            self._settle(None)

    async def _refresh_and_sync(self) -> None:
        await self._refresh()
        if self._after_refresh is not None:
            await self._after_refresh()

    def _settle(self, error: BaseException | None) -> None:
        waiters, self._waiters = self._waiters, []
        self._state = RefreshState.IDLE
        self._cycle = None
        for waiter in waiters:
            # A waiter whose caller was cancelled is already done.
            if waiter.done():
                continue
            if error is None:
                waiter.set_result(None)
            else:
                waiter.set_exception(error)
