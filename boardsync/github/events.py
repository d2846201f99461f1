from typing import Any, Dict

from boardsync.board.engine import EngineRegistry
from boardsync.github.models import OtherEvent, decode_event
from boardsync.logger import get_logger


logger = get_logger("boardsync.github.events")


HANDLED_EVENT_TYPES = ("issues", "pull_request")


async def handle_event(
    registry: EngineRegistry, event_type: str, payload: Dict[str, Any]
) -> str:
    """
    Central GitHub webhook dispatcher.

    Returns "ok" when the event was handled or ignored, "error" when the
    board engine raised. Never raises itself.
    """
    if event_type not in HANDLED_EVENT_TYPES:
        logger.debug("Ignoring event type: %s", event_type)
        return "ok"

    event = decode_event(event_type, payload)
    if isinstance(event, OtherEvent):
        logger.debug("Ignoring incomplete %s payload", event_type)
        return "ok"

    engine = registry.get(event.repo.full_name)
    if engine is None:
        logger.warning("Repo %s not configured, ignore event", event.repo.full_name)
        return "ok"

    try:
        await engine.handle(event)
    except Exception:
        # Never crash webhook processing
        logger.exception(
            "Error while processing %s on %s", event.key, event.repo.full_name
        )
        return "error"

    return "ok"
