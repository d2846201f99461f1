"""Progress labels: a human-visible mirror of the issue's board column."""

from typing import Iterable, List

from boardsync.github.api import SourceControl
from boardsync.logger import get_logger
from boardsync.settings import IGNORE_LABEL, PROGRESS_LABEL_PREFIX


logger = get_logger("boardsync.board.labels")


def progress_label(column_name: str) -> str:
    return f"{PROGRESS_LABEL_PREFIX}{column_name}"


def progress_labels(labels: Iterable[str]) -> List[str]:
    return [label for label in labels if label.startswith(PROGRESS_LABEL_PREFIX)]


def has_ignore_label(labels: Iterable[str]) -> bool:
    return IGNORE_LABEL in labels


async def clear_progress_label(
    source: SourceControl, issue_number: int, labels: Iterable[str]
) -> None:
    for label in progress_labels(labels):
        try:
            await source.remove_label(issue_number, label)
        except Exception:
            logger.exception("Failed to remove %s from #%s", label, issue_number)


async def change_progress_label(
    source: SourceControl, issue_number: int, labels: Iterable[str], column_name: str
) -> None:
    """
    Replace any progress/* label with the one for column_name.
    """
    labels = list(labels)
    target = progress_label(column_name)

    await clear_progress_label(
        source, issue_number, [label for label in labels if label != target]
    )

    if target in labels:
        return

    try:
        await source.add_labels(issue_number, [target])
    except Exception:
        logger.exception("Failed to add %s to #%s", target, issue_number)
