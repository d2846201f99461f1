from boardsync.board.columns import Column
from boardsync.logger import get_logger
from boardsync.zenhub.api import BoardService


logger = get_logger("boardsync.board.mover")


class BoardMover:
    """Moves issues between board columns and reads their current column."""

    def __init__(self, board: BoardService):
        self._board = board

    async def move_issue(self, issue_number: str, column: Column) -> None:
        logger.info("Moving #%s to `%s`", issue_number, column.name)
        await self._board.move_issue(issue_number, column.id)

    async def get_issue_column(self, issue_number: str) -> str:
        return await self._board.get_issue_pipeline(issue_number)
