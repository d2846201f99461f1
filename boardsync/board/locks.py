import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class IssueLocks:
    """
    One asyncio.Lock per issue number, so moves for an issue never overlap.

    An issue's lock is dropped again once its last holder or waiter leaves.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, issue_number: str) -> AsyncIterator[None]:
        # no await between lookup and insert, so this is race-free on one loop
        lock = self._locks.get(issue_number)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[issue_number] = lock
        self._users[issue_number] = self._users.get(issue_number, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._users[issue_number] -= 1
            if self._users[issue_number] == 0:
                del self._users[issue_number]
                del self._locks[issue_number]
