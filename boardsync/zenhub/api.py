import httpx
from typing import Any, Optional, Protocol

from boardsync.logger import get_logger
from boardsync.settings import ZENHUB_API_URL


logger = get_logger("boardsync.zenhub.api")


class BoardServiceError(Exception):
    """
    Raised when the board service cannot be reached.
    """
    pass


class BoardResponseError(BoardServiceError):
    """
    Raised when the board service answers with a body we cannot read.
    """
    pass


class BoardService(Protocol):
    """Pipeline operations offered by the board service."""

    async def move_issue(self, issue_number: str, pipeline_id: str) -> None: ...

    async def get_issue_pipeline(self, issue_number: str) -> str: ...


class ZenHubApi:
    """
    ZenHub REST client for one board repository.

    Statuses above 400 are only logged: ZenHub may still have applied the
    move, so callers are not told it failed.
    """

    def __init__(
        self,
        repo_id: str,
        token: str,
        base_url: str = ZENHUB_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.repo_id = repo_id
        self._token = token
        self._base_url = base_url
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "X-Authentication-Token": self._token,
            "Content-Type": "application/json",
        }

    def _issue_url(self, issue_number: str) -> str:
        return f"{self._base_url}/p1/repositories/{self.repo_id}/issues/{issue_number}"

    async def _request(
        self,
        method: str,
        url: str,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(),
                    json=json,
                )
        except httpx.HTTPError as exc:
            logger.error("ZenHub call failed: %s %s (%s)", method, url, exc)
            raise BoardServiceError(f"ZenHub call failed: {method} {url}") from exc

        logger.debug("ZenHub call status: HTTP %s from %s", response.status_code, url)

        if response.status_code > 400:
            logger.warning(
                "ZenHub call unsuccessful: HTTP %s from %s", response.status_code, url
            )

        return response

    async def move_issue(self, issue_number: str, pipeline_id: str) -> None:
        await self._request(
            "POST",
            f"{self._issue_url(issue_number)}/moves",
            {"pipeline_id": pipeline_id, "position": "top"},
        )

    async def get_issue_pipeline(self, issue_number: str) -> str:
        response = await self._request("GET", self._issue_url(issue_number))

        try:
            data: Any = response.json()
            return data["pipeline"]["name"]
        except (ValueError, KeyError, TypeError) as exc:
            raise BoardResponseError(
                f"Unexpected ZenHub response for issue {issue_number}"
            ) from exc
