"""Out-of-order response protection."""

import asyncio

import pytest

from course_client.http.stale_guard import LatestQuery, StaleResponseGuard


def test_guard_sequence():
    guard = StaleResponseGuard("modules")

    first = guard.next()
    second = guard.next()

    assert (first, second) == (1, 2)
    assert guard.latest == 2
    assert not guard.is_current(first)
    assert guard.is_current(second)


class _Fetches:
    """Fetches released manually in any order."""

    def __init__(self) -> None:
        self.gates: list[asyncio.Future] = []

    def make(self):
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)

        async def fetch():
            return await gate

        return fetch


@pytest.mark.asyncio
async def test_older_response_arriving_last_is_dropped():
    fetches = _Fetches()
    applied: list[str] = []
    query = LatestQuery("modules", cancel_superseded=False)

    first = asyncio.create_task(query.run(fetches.make(), applied.append))
    await asyncio.sleep(0)
    second = asyncio.create_task(query.run(fetches.make(), applied.append))
    await asyncio.sleep(0)

    fetches.gates[1].set_result("course B")
    assert await second is True
    fetches.gates[0].set_result("course A")
    assert await first is False

    assert applied == ["course B"]


@pytest.mark.asyncio
async def test_superseded_fetch_is_cancelled():
    fetches = _Fetches()
    applied: list[str] = []
    query = LatestQuery("modules")

    first = asyncio.create_task(query.run(fetches.make(), applied.append))
    await asyncio.sleep(0)
    second = asyncio.create_task(query.run(fetches.make(), applied.append))
    await asyncio.sleep(0)
    fetches.gates[1].set_result("course B")

    assert await first is False
    assert await second is True
    assert fetches.gates[0].cancelled()
    assert applied == ["course B"]


@pytest.mark.asyncio
async def test_error_of_current_fetch_propagates():
    query = LatestQuery("course")

    async def fetch():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await query.run(fetch, lambda _: None)


@pytest.mark.asyncio
async def test_error_of_superseded_fetch_is_dropped():
    fetches = _Fetches()
    applied: list[str] = []
    query = LatestQuery("course", cancel_superseded=False)

    first = asyncio.create_task(query.run(fetches.make(), applied.append))
    await asyncio.sleep(0)
    second = asyncio.create_task(query.run(fetches.make(), applied.append))
    await asyncio.sleep(0)
    fetches.gates[0].set_exception(RuntimeError("late failure"))
    fetches.gates[1].set_result("fresh")

    assert await first is False
    assert await second is True
    assert applied == ["fresh"]


@pytest.mark.asyncio
async def test_cancel_invalidates_pending_fetch():
    fetches = _Fetches()
    applied: list[str] = []
    query = LatestQuery("course")

    pending = asyncio.create_task(query.run(fetches.make(), applied.append))
    await asyncio.sleep(0)
    query.cancel()

    assert await pending is False
    assert applied == []


@pytest.mark.asyncio
async def test_cancelling_caller_propagates():
    fetches = _Fetches()
    query = LatestQuery("course")

    pending = asyncio.create_task(query.run(fetches.make(), lambda _: None))
    await asyncio.sleep(0)
    pending.cancel()

    with pytest.raises(asyncio.CancelledError):
        await pending
