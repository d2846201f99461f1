"""Per-repository board configuration.

The file is JSON keyed by repository full name::

    {
      "repos": {
        "octo/widgets": {
          "board": {
            "github_repo": "123456",
            "zenhub_token": "...",
            "columns": [
              {"name": "Inbox", "id": "p1", "is_inbox": true,
               "events": ["issues_opened"]},
              {"name": "Done", "id": "p9", "post_merge_pipeline": true,
               "events": ["issues_closed", "pull_request_closed"]}
            ]
          }
        }
      }
    }
"""

import json
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from boardsync.logger import get_logger
from boardsync.settings import UNCONFIGURED_REPO


logger = get_logger("boardsync.config")


class ConfigError(Exception):
    """
    Raised when the board configuration file cannot be read or is malformed.
    """
    pass


class ColumnConfig(BaseModel):
    """A board column and the event keys that move issues into it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    id: str = Field(min_length=1)
    post_merge_pipeline: bool = False
    is_inbox: bool = False
    events: List[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("events")
    @classmethod
    def _lower_events(cls, value: List[str]) -> List[str]:
        return [event.lower() for event in value]


class BoardConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    github_repo: str = ""  # ZenHub repository id
    zenhub_token: str = ""
    columns: List[ColumnConfig] = Field(default_factory=list)

    @field_validator("github_repo", "zenhub_token", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value) if isinstance(value, int) else value


class RepoSection(BaseModel):
    board: BoardConfig


class BoardFile(BaseModel):
    repos: Dict[str, RepoSection]


class RepoConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    repo: str
    board: BoardConfig

    @property
    def is_configured(self) -> bool:
        return bool(self.board.github_repo) and self.board.github_repo != UNCONFIGURED_REPO


def parse_board_config(data: Any) -> Dict[str, RepoConfig]:
    try:
        parsed = BoardFile.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid board configuration: {exc}") from exc

    return {
        name: RepoConfig(repo=name, board=section.board)
        for name, section in parsed.repos.items()
    }


def load_board_config(path: str) -> Dict[str, RepoConfig]:
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigError(f"Failed to read board config at {path}") from exc
    except ValueError as exc:
        raise ConfigError(f"Board config at {path} is not valid JSON") from exc

    configs = parse_board_config(data)
    logger.info("Loaded board config for %d repositories", len(configs))
    return configs
