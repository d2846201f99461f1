from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
from typing import Any

from fastapi.testclient import TestClient

from boardsync.board.engine import EngineRegistry
from boardsync.github.events import handle_event
from boardsync.github.models import IssueEvent, OtherEvent, PullRequestEvent, decode_event
from boardsync.main import create_app
from boardsync.security.webhook_verify import verify_signature

from conftest import make_repo_config

SECRET = "s3cret"


def issue_payload(action: str = "opened", number: int = 7, **issue: Any) -> dict:
    return {
        "action": action,
        "issue": {"number": number, "labels": [], **issue},
        "repository": {"name": "widgets", "full_name": "octo/widgets", "owner": {"login": "octo"}},
    }


def sign(body: bytes) -> str:
    return "sha256=" + hmac.new(SECRET.encode(), body, hashlib.sha256).hexdigest()


class RecordingEngine:
    def __init__(self, fail: bool = False) -> None:
        self.events: list = []
        self.fail = fail

    async def handle(self, event) -> None:
        self.events.append(event)
        if self.fail:
            raise RuntimeError("boom")

    async def shutdown(self, drain: bool = True) -> None:
        pass


def registry_with(engine: RecordingEngine) -> EngineRegistry:
    return EngineRegistry({"octo/widgets": make_repo_config()}, factory=lambda config: engine)


def test_decode_issue_event() -> None:
    event = decode_event("issues", issue_payload("closed", locked=True, milestone={"title": "1.0"}))

    assert isinstance(event, IssueEvent)
    assert event.key == "issues_closed"
    assert event.issue.locked is True
    assert event.issue.milestone == "1.0"
    assert event.repo.full_name == "octo/widgets"


def test_decode_pull_request_and_other_events() -> None:
    pr = decode_event(
        "pull_request",
        {
            "action": "opened",
            "pull_request": {"number": 3, "body": None},
            "repository": {"full_name": "octo/widgets"},
        },
    )
    assert isinstance(pr, PullRequestEvent)
    assert pr.key == "pull_request_opened"
    assert pr.pull_request.body == ""

    assert isinstance(decode_event("issues", {"action": "opened"}), OtherEvent)
    assert isinstance(decode_event("push", issue_payload()), OtherEvent)


def test_dispatcher_routes_to_repository_engine() -> None:
    engine = RecordingEngine()

    status = asyncio.run(handle_event(registry_with(engine), "issues", issue_payload()))

    assert status == "ok"
    assert [e.key for e in engine.events] == ["issues_opened"]


def test_dispatcher_ignores_unknown_repositories_and_event_types() -> None:
    engine = RecordingEngine()
    registry = registry_with(engine)
    payload = issue_payload()
    payload["repository"] = {"name": "other", "owner": {"login": "octo"}}

    assert asyncio.run(handle_event(registry, "issues", payload)) == "ok"
    assert asyncio.run(handle_event(registry, "push", issue_payload())) == "ok"
    assert engine.events == []


def test_dispatcher_reports_engine_errors() -> None:
    engine = RecordingEngine(fail=True)

    status = asyncio.run(handle_event(registry_with(engine), "issues", issue_payload()))

    assert status == "error"


def test_registry_builds_one_engine_per_repository() -> None:
    built = []

    def factory(config):
        built.append(config.repo)
        return RecordingEngine()

    registry = EngineRegistry({"octo/widgets": make_repo_config()}, factory=factory)

    assert registry.get("octo/widgets") is registry.get("octo/widgets")
    assert registry.get("octo/unknown") is None
    assert built == ["octo/widgets"]


def test_verify_signature() -> None:
    body = b'{"a": 1}'
    assert verify_signature(body, sign(body), SECRET)
    assert not verify_signature(body, sign(b"other"), SECRET)
    assert not verify_signature(body, None, SECRET)
    assert not verify_signature(body, sign(body), None)


def test_webhook_endpoint() -> None:
    engine = RecordingEngine()
    client = TestClient(create_app(registry=registry_with(engine), webhook_secret=SECRET))
    body = json.dumps(issue_payload("assigned")).encode()

    missing = client.post("/webhook", content=body, headers={"X-GitHub-Event": "issues"})
    invalid = client.post(
        "/webhook",
        content=body,
        headers={"X-GitHub-Event": "issues", "X-Hub-Signature-256": sign(b"x")},
    )
    no_event = client.post("/webhook", content=body, headers={"X-Hub-Signature-256": sign(body)})
    ok = client.post(
        "/webhook",
        content=body,
        headers={"X-GitHub-Event": "issues", "X-Hub-Signature-256": sign(body)},
    )

    assert missing.status_code == 401
    assert invalid.status_code == 401
    assert no_event.status_code == 400
    assert ok.status_code == 200
    assert ok.json() == {"status": "ok"}
    assert [e.key for e in engine.events] == ["issues_assigned"]


def test_health() -> None:
    client = TestClient(create_app(registry=registry_with(RecordingEngine()), webhook_secret=SECRET))
    assert client.get("/health").json() == {"status": "ok"}
