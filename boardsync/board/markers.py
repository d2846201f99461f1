import asyncio
from typing import Dict

from boardsync.board.columns import Column
from boardsync.logger import get_logger


logger = get_logger("boardsync.board.markers")


class MarkerStore:
    """
    Issues waiting for a deferred lock/reopen cycle, keyed by issue number.

    Held in memory only. Every access goes through one asyncio.Lock.
    """

    def __init__(self):
        self._markers: Dict[str, Column] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._markers)

    async def add(self, issue_number: str, column: Column) -> None:
        async with self._lock:
            self._markers[issue_number] = column
        logger.debug("Schedule post processing for issue: %s", issue_number)

    async def contains(self, issue_number: str) -> bool:
        async with self._lock:
            return issue_number in self._markers

    async def discard(self, issue_number: str) -> bool:
        """Remove the marker; True when one was present."""
        async with self._lock:
            removed = self._markers.pop(issue_number, None) is not None
        if removed:
            logger.debug("Clear post processing for issue: %s", issue_number)
        return removed
