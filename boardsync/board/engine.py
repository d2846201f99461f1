import asyncio
from typing import Awaitable, Callable, Dict, Optional

from boardsync.board.columns import ColumnMapping
from boardsync.board.issues import IssueEventClassifier
from boardsync.board.locks import IssueLocks
from boardsync.board.markers import MarkerStore
from boardsync.board.mover import BoardMover
from boardsync.board.pulls import PullRequestEventClassifier
from boardsync.board.scheduler import PostProcessingScheduler
from boardsync.config.board import RepoConfig
from boardsync.github.api import GitHubApi, SourceControl
from boardsync.github.models import Event, IssueEvent, PullRequestEvent
from boardsync.logger import get_logger
from boardsync.settings import POST_PROCESS_GRACE_SECONDS
from boardsync.zenhub.api import BoardService, ZenHubApi


logger = get_logger("boardsync.board.engine")


class BoardSyncEngine:
    """
    Board synchronisation for one repository.

    Owns the column mapping, the post-processing markers, the scheduler
    and the per-issue locks; nothing is shared between repositories.
    """

    def __init__(
        self,
        config: RepoConfig,
        source: SourceControl,
        board: BoardService,
        grace_seconds: float = POST_PROCESS_GRACE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.mapping = ColumnMapping()
        self.markers = MarkerStore()
        self.scheduler = PostProcessingScheduler(source, grace_seconds, sleep)

        mover = BoardMover(board)
        self.locks = IssueLocks()

        self.issues = IssueEventClassifier(
            self.mapping, self.markers, mover, source, self.scheduler, self.locks
        )
        self.pulls = PullRequestEventClassifier(
            self.mapping, self.markers, mover, source, self.locks
        )

    async def handle(self, event: Event) -> None:
        if not self.config.is_configured:
            logger.warning("Repo not configured, ignore event")
            return

        await self.mapping.ensure_initialized(self.config.board.columns)

        if isinstance(event, IssueEvent):
            await self.issues.handle(event)
        elif isinstance(event, PullRequestEvent):
            await self.pulls.handle(event)

    async def shutdown(self, drain: bool = True) -> None:
        await self.scheduler.shutdown(drain=drain)


def default_engine_factory(config: RepoConfig) -> BoardSyncEngine:
    return BoardSyncEngine(
        config,
        source=GitHubApi(config.repo),
        board=ZenHubApi(config.board.github_repo, config.board.zenhub_token),
    )


class EngineRegistry:
    """Lazily creates one engine per configured repository."""

    def __init__(
        self,
        configs: Dict[str, RepoConfig],
        factory: Callable[[RepoConfig], BoardSyncEngine] = default_engine_factory,
    ):
        self._configs = configs
        self._factory = factory
        self._engines: Dict[str, BoardSyncEngine] = {}

    def get(self, repo: str) -> Optional[BoardSyncEngine]:
        engine = self._engines.get(repo)
        if engine is not None:
            return engine

        config = self._configs.get(repo)
        if config is None:
            return None

        # synchronous, so concurrent callers on the loop cannot both build
        engine = self._factory(config)
        self._engines[repo] = engine
        return engine

    async def shutdown(self, drain: bool = True) -> None:
        for engine in list(self._engines.values()):
            await engine.shutdown(drain=drain)
