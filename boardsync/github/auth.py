import time
from typing import Dict, Optional, Tuple

import httpx
import jwt

from boardsync.logger import get_logger
from boardsync.settings import (
    GITHUB_API_URL,
    GITHUB_APP_ID,
    GITHUB_PRIVATE_KEY_PATH,
    GITHUB_TOKEN,
)


logger = get_logger("boardsync.github.auth")

_PRIVATE_KEY: Optional[str] = None

# repo full name -> (token, expiry)
_CACHED_TOKENS: Dict[str, Tuple[str, float]] = {}

# GitHub tokens expire in 1 hour; refresh a bit early
_TOKEN_TTL_SECONDS = 50 * 60


def _load_private_key() -> str:
    global _PRIVATE_KEY

    if _PRIVATE_KEY is not None:
        return _PRIVATE_KEY

    if not GITHUB_PRIVATE_KEY_PATH:
        raise RuntimeError("GITHUB_PRIVATE_KEY_PATH is not set")

    try:
        with open(GITHUB_PRIVATE_KEY_PATH, "r") as f:
            _PRIVATE_KEY = f.read()
            return _PRIVATE_KEY
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read GitHub private key at {GITHUB_PRIVATE_KEY_PATH}"
        ) from exc


def create_jwt() -> str:
    if not GITHUB_APP_ID:
        raise RuntimeError("GITHUB_APP_ID is not set")

    now = int(time.time())
    payload = {
        "iat": now - 30,
        "exp": now + 9 * 60,
        "iss": int(GITHUB_APP_ID),
    }

    private_key = _load_private_key()
    return jwt.encode(payload, private_key, algorithm="RS256")


async def get_installation_token(repo: str) -> str:
    """
    Return an access token usable against the given repository.

    A configured GITHUB_TOKEN wins. Otherwise the App installation for the
    repository is looked up and its token cached until expiry.
    """
    if GITHUB_TOKEN:
        return GITHUB_TOKEN

    now = time.time()
    cached = _CACHED_TOKENS.get(repo)
    if cached and now < cached[1]:
        return cached[0]

    jwt_token = create_jwt()

    headers = {
        "Authorization": f"Bearer {jwt_token}",
        "Accept": "application/vnd.github+json",
    }

    async with httpx.AsyncClient() as client:
        installation_resp = await client.get(
            f"{GITHUB_API_URL}/repos/{repo}/installation",
            headers=headers,
        )
        installation_resp.raise_for_status()

        installation_id = installation_resp.json()["id"]

        token_resp = await client.post(
            f"{GITHUB_API_URL}/app/installations/{installation_id}/access_tokens",
            headers=headers,
        )
        token_resp.raise_for_status()

        data = token_resp.json()

    token = data["token"]
    _CACHED_TOKENS[repo] = (token, time.time() + _TOKEN_TTL_SECONDS)

    logger.info("GitHub installation token obtained for %s", repo)

    return token
