from dataclasses import dataclass, field
from pathlib import Path

from modatrix import constants
from modatrix.filtering import ChatFilterConfig, ChatMessage, Mode, SpamFilter
from modatrix.filtering._parsing import BLOCK_DELIMITER
from modatrix.log import get_logger

log = get_logger(__name__)


@dataclass
class ReplayResult:
    """The messages accepted while replaying a chat dump."""

    accepted: list[ChatMessage] = field(default_factory=list)
    total: int = 0  # Well-formed blocks fed to the filter.

    @property
    def dropped(self) -> int:
        """The number of blocks the filter rejected."""
        return self.total - len(self.accepted)


def build_filter() -> SpamFilter:
    """Create a spam filter from the configured settings and filter config file."""
    return SpamFilter(
        per_user_window=constants.Filter.per_user_window,
        dedup_ttl=constants.Filter.dedup_ttl,
        config=ChatFilterConfig.load_or_default(constants.Filter.config_path),
    )


def run_from_text(text: str, spam_filter: SpamFilter) -> ReplayResult:
    """
    Replay a chat dump through `spam_filter` in live mode.

    The dump is a sequence of `user`, `content` and `time` segments separated by blank lines.
    Incomplete trailing segments, and triplets without a user or content, are skipped.
    """
    parts = text.replace("\r\n", "\n").split(BLOCK_DELIMITER)
    result = ReplayResult()

    for i in range(0, len(parts) - 2, 3):
        user, content, time = (part.strip() for part in parts[i:i + 3])
        if not user or not content:
            continue

        result.total += 1
        message = spam_filter.try_accept_raw(BLOCK_DELIMITER.join((user, content, time)), Mode.LIVE)
        if message is not None:
            result.accepted.append(message)

    return result


def run_from_file(path: str | Path, spam_filter: SpamFilter | None = None) -> ReplayResult:
    """Replay the chat dump at `path`, using a filter built from the settings unless one is given."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No chat dump found at {path}")

    if spam_filter is None:
        spam_filter = build_filter()

    result = run_from_text(path.read_text(encoding="utf-8"), spam_filter)
    log.info(f"Replayed {path}: {len(result.accepted)} of {result.total} messages accepted.")
    return result
