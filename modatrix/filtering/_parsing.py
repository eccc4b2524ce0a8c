from typing import NamedTuple

BLOCK_DELIMITER = "\n\n"


class ParsedBlock(NamedTuple):
    """The fields of a raw message block."""

    user: str
    content: str
    raw_time: str | None


def parse_block(raw: str) -> ParsedBlock | None:
    """
    Split a raw block of the form `user\\n\\ncontent\\n\\ntime` into its fields.

    Empty segments are kept while splitting so that field positions never shift.
    Return None if the user or the content is blank.
    """
    if not isinstance(raw, str):
        return None

    parts = raw.split(BLOCK_DELIMITER)
    user = parts[0].strip()
    content = parts[1].strip() if len(parts) > 1 else ""
    raw_time = parts[2].strip() if len(parts) > 2 else ""

    if not user or not content:
        return None
    return ParsedBlock(user, content, raw_time or None)
