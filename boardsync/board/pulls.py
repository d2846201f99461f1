from typing import List

from boardsync.board.columns import ColumnMapping
from boardsync.board.labels import change_progress_label
from boardsync.board.locks import IssueLocks
from boardsync.board.markers import MarkerStore
from boardsync.board.mover import BoardMover
from boardsync.board.references import contains_issue_reference, extract_issue_numbers
from boardsync.github.api import SourceControl
from boardsync.github.models import PullRequestEvent
from boardsync.logger import get_logger


logger = get_logger("boardsync.board.pulls")

PULL_REQUEST_OPENED = "pull_request_opened"


class PullRequestEventClassifier:
    """
    Applies a pull request event to every issue the PR says it closes.

    Issues are found in commit messages first and, only when no commit
    references one, in the PR body.
    """

    def __init__(
        self,
        mapping: ColumnMapping,
        markers: MarkerStore,
        mover: BoardMover,
        source: SourceControl,
        locks: IssueLocks,
    ):
        self._mapping = mapping
        self._markers = markers
        self._mover = mover
        self._source = source
        self._locks = locks

    async def referenced_issues(self, event: PullRequestEvent) -> List[str]:
        messages = await self._source.list_pull_commits(event.pull_request.number)

        issues: List[str] = []
        for message in messages:
            logger.debug("keyword in commit message? %s", contains_issue_reference(message))
            issues.extend(extract_issue_numbers(message))

        if not issues:
            body = event.pull_request.body
            logger.debug("keyword in PR message? %s", contains_issue_reference(body))
            issues.extend(extract_issue_numbers(body))

        logger.debug("number issues references found: %d", len(issues))
        return issues

    async def handle(self, event: PullRequestEvent) -> None:
        key = event.key
        logger.info("<< Event %s on PR %s >>", key, event.pull_request.number)

        try:
            issues = await self.referenced_issues(event)
        except Exception:
            logger.exception("Failed to retrieve commits for PR %s", event.pull_request.number)
            return

        for number in issues:
            async with self._locks.hold(number):
                await self._process_issue(key, number)

    async def _process_issue(self, key: str, number: str) -> None:
        if await self._markers.contains(number):
            logger.debug(
                "Issue scheduled for post processing, ignore event for issue: %s", number
            )
            return

        done = self._mapping.done_column
        if key == PULL_REQUEST_OPENED and done is not None and done.is_post_merge_pipeline:
            # completion happens with the close of the issue
            await self._markers.add(number, done)
            return

        column = self._mapping.lookup(key)
        if column is None:
            logger.debug("Ignore unmapped PR event: %s", key)
            return

        # a failed move aborts the remaining issues of this event
        await self._mover.move_issue(number, column)

        try:
            issue = await self._source.get_issue(int(number))
        except Exception:
            logger.exception("Cannot fetch #%s, progress label not updated", number)
            return

        await change_progress_label(self._source, issue.number, issue.labels, column.name)
