from boardsync.board.columns import ColumnMapping
from boardsync.board.labels import (
    change_progress_label,
    clear_progress_label,
    has_ignore_label,
    progress_labels,
)
from boardsync.board.locks import IssueLocks
from boardsync.board.markers import MarkerStore
from boardsync.board.mover import BoardMover
from boardsync.board.scheduler import PostProcessingScheduler
from boardsync.github.api import SourceControl
from boardsync.github.models import Issue, IssueEvent
from boardsync.logger import get_logger


logger = get_logger("boardsync.board.issues")

ISSUES_CLOSED = "issues_closed"
ISSUES_REOPENED = "issues_reopened"
ISSUES_OPENED = "issues_opened"
ISSUES_MILESTONED = "issues_milestoned"
ISSUES_DEMILESTONED = "issues_demilestoned"


class IssueEventClassifier:
    """
    Decides what a single issue event does to the board.

    Special cases are checked in order before the plain mapping lookup:

    1. closed: ignore/qe label suppresses everything; an active marker
       hands the issue to the post-processing scheduler instead.
    2. reopened while locked: the deferred cycle is finishing, move to done
       and unlock.
    3. opened with a milestone: left to the milestoned event if that one
       is mapped.
    4. milestoned: only moves issues still sitting in the inbox.
    5. demilestoned: never moves anything.
    6. any other event on a locked issue is ignored.
    """

    def __init__(
        self,
        mapping: ColumnMapping,
        markers: MarkerStore,
        mover: BoardMover,
        source: SourceControl,
        scheduler: PostProcessingScheduler,
        locks: IssueLocks,
    ):
        self._mapping = mapping
        self._markers = markers
        self._mover = mover
        self._source = source
        self._scheduler = scheduler
        self._locks = locks

    async def handle(self, event: IssueEvent) -> None:
        number = str(event.issue.number)
        logger.info("<< Event %s on issue %s >>", event.key, number)

        async with self._locks.hold(number):
            await self._classify(event.key, event.issue, number)

    async def _classify(self, key: str, issue: Issue, number: str) -> None:
        labels = list(issue.labels)

        if key == ISSUES_CLOSED:
            current = await self._source.list_labels(issue.number)

            if has_ignore_label(current):
                logger.debug("'ignore/qe' label present, ignoring event on %s", number)
                return

            if await self._markers.contains(number):
                logger.debug("Post process issue: %s", number)
                self._scheduler.schedule(issue.number)
                return

            await clear_progress_label(self._source, issue.number, labels)
            labels = [label for label in labels if label not in progress_labels(labels)]

        elif key == ISSUES_REOPENED and issue.locked:
            await self._complete_post_processing(issue, number)
            return

        elif key == ISSUES_OPENED and issue.milestone is not None:
            if self._mapping.has_mapping(ISSUES_MILESTONED):
                logger.debug("Issue carries milestone, ignore event")
                return

        elif key == ISSUES_MILESTONED:
            if not await self._in_inbox(number):
                return

        elif key == ISSUES_DEMILESTONED:
            logger.info("Ignore issues_demilestoned event.")
            return

        if issue.locked:
            logger.debug("Ignore event for locked issue: %s", number)
            return

        column = self._mapping.lookup(key)
        if column is None:
            logger.debug("Ignore unmapped Issue event: %s", key)
            return

        # a failed move skips the label update and propagates
        await self._mover.move_issue(number, column)
        await change_progress_label(self._source, issue.number, labels, column.name)

    async def _complete_post_processing(self, issue: Issue, number: str) -> None:
        done = self._mapping.done_column
        if done is None:
            logger.error("Post processing failed: no done column configured (#%s)", number)
            return

        try:
            await self._mover.move_issue(number, done)
        except Exception:
            logger.exception("Post processing failed: Cannot move issue %s", number)
            logger.warning("Issue #%s left locked, unlock did not occur", number)
            return

        await self._markers.discard(number)

        await change_progress_label(self._source, issue.number, issue.labels, done.name)

        try:
            await self._source.unlock(issue.number)
        except Exception:
            logger.warning("Error unlocking issue #%s", number, exc_info=True)

    async def _in_inbox(self, number: str) -> bool:
        inbox = self._mapping.inbox_column
        if inbox is None:
            logger.debug("No inbox column configured, not moving #%s", number)
            return False

        try:
            current = await self._mover.get_issue_column(number)
        except Exception:
            logger.exception("Error retrieving issue column for #%s", number)
            return False

        if current != inbox.name:
            logger.debug("Milestone event for issue outside the Inbox, not moving #%s", number)
            return False

        return True
