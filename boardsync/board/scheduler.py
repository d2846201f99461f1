import asyncio
from typing import Awaitable, Callable, Set

from boardsync.github.api import SourceControl
from boardsync.logger import get_logger
from boardsync.settings import POST_PROCESS_GRACE_SECONDS, POST_PROCESS_LOCK_REASON


logger = get_logger("boardsync.board.scheduler")


class PostProcessingScheduler:
    """
    Runs the deferred lock-then-reopen action for closed issues.

    Each scheduled action is a detached asyncio task: it waits the grace
    period, locks the issue and re-opens it. The resulting reopened event
    (issue now locked) is what moves the issue to the done column.

    Failures are logged, never retried, and earlier steps are not undone.
    """

    def __init__(
        self,
        source: SourceControl,
        grace_seconds: float = POST_PROCESS_GRACE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._source = source
        self._grace_seconds = grace_seconds
        self._sleep = sleep
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, issue_number: int) -> asyncio.Task:
        task = asyncio.create_task(self._run(issue_number))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, issue_number: int) -> None:
        logger.debug("Enter grace time before post processing #%s ...", issue_number)
        await self._sleep(self._grace_seconds)

        try:
            await self._source.lock(issue_number, POST_PROCESS_LOCK_REASON)
        except Exception:
            logger.exception("Locking issue failed: %s", issue_number)

        try:
            await self._source.edit_state(issue_number, "open")
        except Exception:
            logger.exception("Post processing failed: cannot re-open #%s", issue_number)

    async def shutdown(self, drain: bool = True) -> None:
        """
        Wait for pending actions (drain) or cancel them.
        """
        tasks = list(self._tasks)
        if not tasks:
            return

        if not drain:
            for task in tasks:
                task.cancel()
            logger.info("Abandoning %d pending post processing tasks", len(tasks))
        else:
            logger.info("Draining %d pending post processing tasks", len(tasks))

        await asyncio.gather(*tasks, return_exceptions=True)
