import httpx
from urllib.parse import quote
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from boardsync.github.auth import get_installation_token
from boardsync.github.models import Issue
from boardsync.logger import get_logger
from boardsync.settings import GITHUB_API_URL


logger = get_logger("boardsync.github.api")


class RepoUnavailable(Exception):
    """
    Raised when a repository is deleted, renamed, or the app lost access.
    """
    pass


class SourceControl(Protocol):
    """The issue and pull request operations the board engine relies on."""

    async def list_labels(self, issue_number: int) -> List[str]: ...

    async def add_labels(self, issue_number: int, labels: List[str]) -> None: ...

    async def remove_label(self, issue_number: int, label: str) -> None: ...

    async def lock(self, issue_number: int, reason: str) -> None: ...

    async def unlock(self, issue_number: int) -> None: ...

    async def edit_state(self, issue_number: int, state: str) -> None: ...

    async def get_issue(self, issue_number: int) -> Issue: ...

    async def list_pull_commits(self, pr_number: int) -> List[str]: ...


class GitHubApi:
    """
    GitHub REST client scoped to a single repository.

    ``transport`` is only meant for tests (httpx.MockTransport).
    """

    def __init__(
        self,
        repo: str,
        token_provider: Callable[[str], Awaitable[str]] = get_installation_token,
        base_url: str = GITHUB_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.repo = repo
        self._token_provider = token_provider
        self._base_url = base_url
        self._transport = transport

    async def _headers(self) -> Dict[str, str]:
        token = await self._token_provider(self.repo)
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        json: Optional[dict] = None,
    ) -> Any:
        headers = await self._headers()
        url = f"{self._base_url}{endpoint}"

        async with httpx.AsyncClient(follow_redirects=True, transport=self._transport) as client:
            response = await client.request(
                method,
                url,
                headers=headers,
                json=json,
            )

        status = response.status_code

        if status in (404, 410):
            logger.warning("Repo unavailable (%s): %s", status, endpoint)
            raise RepoUnavailable(f"Repository or resource not found: {endpoint}")

        if status in (401, 403):
            logger.warning("Access denied (%s): %s", status, endpoint)
            raise RepoUnavailable(f"Access denied or app uninstalled: {endpoint}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            logger.exception("GitHub API error %s for %s", status, endpoint)
            raise

        if status == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            logger.exception("Failed to decode JSON response from %s", endpoint)
            raise

    def _issue_path(self, issue_number: int) -> str:
        return f"/repos/{self.repo}/issues/{issue_number}"

    # =========================================================
    # SourceControl
    # =========================================================

    async def list_labels(self, issue_number: int) -> List[str]:
        labels = await self._request(
            "GET", f"{self._issue_path(issue_number)}/labels?per_page=100"
        )
        return [label.get("name", "") for label in labels or []]

    async def add_labels(self, issue_number: int, labels: List[str]) -> None:
        await self._request(
            "POST", f"{self._issue_path(issue_number)}/labels", {"labels": labels}
        )

    async def remove_label(self, issue_number: int, label: str) -> None:
        await self._request(
            "DELETE", f"{self._issue_path(issue_number)}/labels/{quote(label, safe='')}"
        )

    async def lock(self, issue_number: int, reason: str) -> None:
        await self._request(
            "PUT", f"{self._issue_path(issue_number)}/lock", {"lock_reason": reason}
        )

    async def unlock(self, issue_number: int) -> None:
        await self._request("DELETE", f"{self._issue_path(issue_number)}/lock")

    async def edit_state(self, issue_number: int, state: str) -> None:
        await self._request("PATCH", self._issue_path(issue_number), {"state": state})

    async def get_issue(self, issue_number: int) -> Issue:
        data = await self._request("GET", self._issue_path(issue_number))
        return Issue.from_payload(data)

    async def list_pull_commits(self, pr_number: int) -> List[str]:
        commits = await self._request(
            "GET", f"/repos/{self.repo}/pulls/{pr_number}/commits?per_page=100"
        )
        return [(c.get("commit") or {}).get("message") or "" for c in commits or []]
