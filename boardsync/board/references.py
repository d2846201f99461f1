import re
from typing import List, Optional


# Closing keyword, any trailing non-space chars (e.g. "Fixes:"), whitespace,
# then "#123" or a full issue URL.
ISSUE_REFERENCE = re.compile(
    r"(?:clos(?:e[sd]?|ing)|fix(?:e[sd]|ing)?)\S*\s+"
    r"(?:#|https://github\.com/\S+?/issues/)(?P<issue>[0-9]+)",
    re.IGNORECASE | re.MULTILINE,
)


def contains_issue_reference(text: Optional[str]) -> bool:
    return bool(text) and ISSUE_REFERENCE.search(text) is not None


def extract_issue_numbers(text: Optional[str]) -> List[str]:
    """
    Return every issue number referenced by a closing keyword, in order.

    Numbers are normalised ("#07" gives "7"); duplicates are kept.
    """
    if not text:
        return []
    return [str(int(m.group("issue"))) for m in ISSUE_REFERENCE.finditer(text)]
