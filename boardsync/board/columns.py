import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from boardsync.config.board import ColumnConfig
from boardsync.logger import get_logger


logger = get_logger("boardsync.board.columns")


@dataclass(frozen=True)
class Column:
    name: str
    id: str
    is_post_merge_pipeline: bool = False
    is_inbox: bool = False

    @classmethod
    def from_config(cls, config: ColumnConfig) -> "Column":
        return cls(
            name=config.name,
            id=config.id,
            is_post_merge_pipeline=config.post_merge_pipeline,
            is_inbox=config.is_inbox,
        )


class ColumnMapping:
    """
    Event key -> column lookup, plus the done and inbox columns.

    Built once from configuration. Concurrent first callers of
    ensure_initialized() wait on the same build; later calls return
    immediately.
    """

    def __init__(self):
        self._mapping: Dict[str, Column] = {}
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self.done_column: Optional[Column] = None
        self.inbox_column: Optional[Column] = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def ensure_initialized(self, columns: Iterable[ColumnConfig]) -> None:
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return
            self._build(columns)
            self._initialized = True

    def _build(self, columns: Iterable[ColumnConfig]) -> None:
        logger.info("Initialising state mappings ...")

        for config in columns:
            column = Column.from_config(config)

            # last flagged column wins
            if column.is_post_merge_pipeline:
                self.done_column = column

            if column.is_inbox:
                self.inbox_column = column

            for event in config.events:
                logger.info("Mapping %s to %s", event, column.name)
                self._mapping[event] = column

        if self.done_column is None:
            logger.warning("Missing column definition for `Done`")

        if self.inbox_column is None:
            logger.warning("Missing column definition for `Inbox`")

    def lookup(self, event_key: str) -> Optional[Column]:
        return self._mapping.get(event_key)

    def has_mapping(self, event_key: str) -> bool:
        return event_key in self._mapping
