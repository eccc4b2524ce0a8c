import re

WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace in `text` into single spaces and trim both ends."""
    return WHITESPACE_RE.sub(" ", text.strip())


def normalize_content(text: str) -> str:
    """
    Return the comparison key for a piece of cleaned message content.

    The key is the content trimmed, with whitespace runs collapsed to a single space, and lowercased.
    It should only ever be computed from content which has already had its directives stripped.
    """
    return collapse_whitespace(text).lower()
