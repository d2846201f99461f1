from __future__ import annotations

import asyncio

from boardsync.board.locks import IssueLocks


def test_same_issue_is_serialised_and_lock_is_dropped_afterwards() -> None:
    locks = IssueLocks()
    trace: list[str] = []

    async def work(name: str) -> None:
        async with locks.hold("7"):
            trace.append(f"{name}-in")
            await asyncio.sleep(0.01)
            trace.append(f"{name}-out")

    async def run() -> int:
        task = asyncio.gather(work("a"), work("b"))
        await asyncio.sleep(0)
        during = len(locks)
        await task
        return during

    during = asyncio.run(run())

    assert trace == ["a-in", "a-out", "b-in", "b-out"]
    assert during == 1
    assert len(locks) == 0


def test_different_issues_do_not_wait_for_each_other() -> None:
    locks = IssueLocks()
    trace: list[str] = []

    async def work(number: str) -> None:
        async with locks.hold(number):
            trace.append(f"{number}-in")
            await asyncio.sleep(0.01)
            trace.append(f"{number}-out")

    async def run() -> None:
        await asyncio.gather(work("1"), work("2"))

    asyncio.run(run())

    assert trace[:2] == ["1-in", "2-in"]
    assert len(locks) == 0


def test_lock_is_released_when_holder_raises() -> None:
    locks = IssueLocks()

    async def run() -> None:
        try:
            async with locks.hold("7"):
                raise RuntimeError("move failed")
        except RuntimeError:
            pass
        async with locks.hold("7"):
            pass

    asyncio.run(run())

    assert len(locks) == 0
