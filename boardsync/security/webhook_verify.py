import hmac
import hashlib
from typing import Optional

from boardsync.settings import GITHUB_WEBHOOK_SECRET


def verify_signature(
    payload: bytes,
    signature: Optional[str],
    secret: Optional[str] = GITHUB_WEBHOOK_SECRET,
) -> bool:
    """
    Verify GitHub webhook signature using HMAC SHA-256.

    Returns False on any validation failure.
    """
    if not signature or not secret:
        return False

    mac = hmac.new(
        secret.encode(),
        msg=payload,
        digestmod=hashlib.sha256,
    )
    expected = "sha256=" + mac.hexdigest()
    return hmac.compare_digest(expected, signature.strip())
