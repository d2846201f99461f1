import os
from dotenv import load_dotenv

load_dotenv()

# === Raw environment values ===

GITHUB_WEBHOOK_SECRET = os.getenv("GITHUB_WEBHOOK_SECRET")

# GitHub App authentication
GITHUB_APP_ID = os.getenv("GITHUB_APP_ID")
GITHUB_PRIVATE_KEY_PATH = os.getenv("GITHUB_PRIVATE_KEY_PATH")

# Plain token auth, takes precedence over the App when set
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")

GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")

# Board service
ZENHUB_API_URL = os.getenv("ZENHUB_API_URL", "https://api.zenhub.io")
BOARD_CONFIG_PATH = os.getenv("BOARD_CONFIG_PATH", "board.json")

# Post-processing configuration
POST_PROCESS_GRACE_SECONDS = float(os.getenv("POST_PROCESS_GRACE_SECONDS", "10"))
POST_PROCESS_LOCK_REASON = "resolved"

# Label conventions
IGNORE_LABEL = "ignore/qe"
PROGRESS_LABEL_PREFIX = "progress/"

# Sentinel left in the sample config for repositories nobody set up
UNCONFIGURED_REPO = "<repo>"


def validate_github_settings() -> None:
    """
    Validate required GitHub configuration.

    Raises RuntimeError if required values are missing or invalid.
    """
    if not GITHUB_WEBHOOK_SECRET:
        raise RuntimeError("GITHUB_WEBHOOK_SECRET is not set")

    if GITHUB_TOKEN:
        return

    if not GITHUB_APP_ID:
        raise RuntimeError("GITHUB_APP_ID is not set")

    if not GITHUB_PRIVATE_KEY_PATH:
        raise RuntimeError("GITHUB_PRIVATE_KEY_PATH is not set")

    if not os.path.exists(GITHUB_PRIVATE_KEY_PATH):
        raise RuntimeError(
            f"GITHUB_PRIVATE_KEY_PATH does not exist: {GITHUB_PRIVATE_KEY_PATH}"
        )


def validate_board_settings() -> None:
    """
    Validate board configuration settings.

    Raises RuntimeError if the board config file is missing.
    """
    if not os.path.exists(BOARD_CONFIG_PATH):
        raise RuntimeError(f"BOARD_CONFIG_PATH does not exist: {BOARD_CONFIG_PATH}")

    if POST_PROCESS_GRACE_SECONDS < 0:
        raise RuntimeError("POST_PROCESS_GRACE_SECONDS must not be negative")
