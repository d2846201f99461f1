from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from boardsync.board.engine import BoardSyncEngine
from boardsync.config.board import BoardConfig, ColumnConfig, RepoConfig
from boardsync.github.models import Issue
from boardsync.zenhub.api import BoardServiceError


class FakeSource:
    """In-memory stand-in for the GitHub client; records every call."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.labels: Dict[int, List[str]] = {}
        self.commits: Dict[int, List[str]] = {}
        self.fail: Dict[str, Exception] = {}

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.fail:
            raise self.fail[name]

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def list_labels(self, issue_number: int) -> List[str]:
        self._record("list_labels", issue_number)
        return list(self.labels.get(issue_number, []))

    async def add_labels(self, issue_number: int, labels: List[str]) -> None:
        self._record("add_labels", issue_number, tuple(labels))

    async def remove_label(self, issue_number: int, label: str) -> None:
        self._record("remove_label", issue_number, label)

    async def lock(self, issue_number: int, reason: str) -> None:
        self._record("lock", issue_number, reason)

    async def unlock(self, issue_number: int) -> None:
        self._record("unlock", issue_number)

    async def edit_state(self, issue_number: int, state: str) -> None:
        self._record("edit_state", issue_number, state)

    async def get_issue(self, issue_number: int) -> Issue:
        self._record("get_issue", issue_number)
        return Issue(number=issue_number, labels=list(self.labels.get(issue_number, [])))

    async def list_pull_commits(self, pr_number: int) -> List[str]:
        self._record("list_pull_commits", pr_number)
        return list(self.commits.get(pr_number, []))


class FakeBoard:
    """In-memory stand-in for the ZenHub client."""

    def __init__(self) -> None:
        self.moves: List[tuple] = []
        self.pipelines: Dict[str, str] = {}
        self.queries: List[str] = []
        self.fail_moves = False

    async def move_issue(self, issue_number: str, pipeline_id: str) -> None:
        if self.fail_moves:
            raise BoardServiceError("board down")
        self.moves.append((issue_number, pipeline_id))

    async def get_issue_pipeline(self, issue_number: str) -> str:
        self.queries.append(issue_number)
        if issue_number not in self.pipelines:
            raise BoardServiceError("unknown issue")
        return self.pipelines[issue_number]


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


DEFAULT_COLUMNS = [
    ColumnConfig(name="Inbox", id="p-inbox", is_inbox=True, events=["issues_opened", "issues_reopened"]),
    ColumnConfig(name="Backlog", id="p-backlog", events=["issues_milestoned", "issues_assigned"]),
    ColumnConfig(name="Review", id="p-review", events=["pull_request_reopened"]),
    ColumnConfig(
        name="Done",
        id="p-done",
        post_merge_pipeline=True,
        events=["issues_closed", "pull_request_closed"],
    ),
]


def make_repo_config(
    columns: Optional[List[ColumnConfig]] = None,
    github_repo: str = "4242",
    repo: str = "octo/widgets",
) -> RepoConfig:
    return RepoConfig(
        repo=repo,
        board=BoardConfig(
            github_repo=github_repo,
            zenhub_token="token",
            columns=DEFAULT_COLUMNS if columns is None else columns,
        ),
    )


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def board() -> FakeBoard:
    return FakeBoard()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_engine(source: FakeSource, board: FakeBoard, sleep: RecordingSleep):
    def _make(columns: Optional[List[ColumnConfig]] = None, github_repo: str = "4242") -> BoardSyncEngine:
        return BoardSyncEngine(
            make_repo_config(columns, github_repo),
            source=source,
            board=board,
            grace_seconds=10,
            sleep=sleep,
        )

    return _make
