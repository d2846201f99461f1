"""Typed views over GitHub webhook payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


ISSUES = "issues"
PULL_REQUEST = "pull_request"


def event_key(category: str, action: str) -> str:
    return f"{category}_{action}".lower()


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> Optional["Repository"]:
        owner = (data.get("owner") or {}).get("login")
        name = data.get("name")
        if not owner or not name:
            full = data.get("full_name") or ""
            if "/" not in full:
                return None
            owner, name = full.split("/", 1)
        return cls(owner=owner, name=name)


@dataclass(frozen=True)
class Issue:
    number: int
    locked: bool = False
    milestone: Optional[str] = None
    labels: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Issue":
        milestone = data.get("milestone")
        return cls(
            number=int(data["number"]),
            locked=bool(data.get("locked", False)),
            milestone=(milestone or {}).get("title") if milestone else None,
            labels=[label.get("name", "") for label in data.get("labels") or []],
        )


@dataclass(frozen=True)
class PullRequest:
    number: int
    body: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "PullRequest":
        return cls(number=int(data["number"]), body=data.get("body") or "")


@dataclass(frozen=True)
class IssueEvent:
    action: str
    issue: Issue
    repo: Repository

    @property
    def key(self) -> str:
        return event_key(ISSUES, self.action)


@dataclass(frozen=True)
class PullRequestEvent:
    action: str
    pull_request: PullRequest
    repo: Repository

    @property
    def key(self) -> str:
        return event_key(PULL_REQUEST, self.action)


@dataclass(frozen=True)
class OtherEvent:
    event_type: str
    action: str = ""
    repo: Optional[Repository] = None


Event = Union[IssueEvent, PullRequestEvent, OtherEvent]


def decode_event(event_type: str, payload: Dict[str, Any]) -> Event:
    """
    Turn a raw webhook payload into one of the typed event variants.

    Anything that is not a well-formed issue or pull request event comes
    back as OtherEvent.
    """
    action = payload.get("action") or ""
    repo = Repository.from_payload(payload.get("repository") or {})

    if repo is None:
        return OtherEvent(event_type=event_type, action=action)

    if event_type == ISSUES and (payload.get("issue") or {}).get("number") is not None:
        return IssueEvent(action=action, issue=Issue.from_payload(payload["issue"]), repo=repo)

    if event_type == PULL_REQUEST and (payload.get("pull_request") or {}).get("number") is not None:
        return PullRequestEvent(
            action=action,
            pull_request=PullRequest.from_payload(payload["pull_request"]),
            repo=repo,
        )

    return OtherEvent(event_type=event_type, action=action, repo=repo)
