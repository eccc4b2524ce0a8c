import time
from collections.abc import Callable

import arrow

from modatrix.filtering._commands import extract_commands
from modatrix.filtering._config import ChatFilterConfig
from modatrix.filtering._message import ChatMessage, FilterResult, Mode, RejectReason
from modatrix.filtering._parsing import parse_block
from modatrix.filtering._spam_guard import SpamGuard
from modatrix.filtering._utils import normalize_content
from modatrix.log import get_logger

log = get_logger(__name__)

DEFAULT_PER_USER_WINDOW = 2.0
DEFAULT_DEDUP_TTL = 180.0


class SpamFilter:
    """
    Decides which scraped chat messages should be shown.

    Each raw message block goes through the same pipeline: the block is parsed, its display directives are
    extracted, and the remaining content is normalized and checked against the banned keywords and mentions.
    In live mode, the message must then also pass the per-user rate limit and the content deduplication.

    Rejection is never an error: every call produces either an accepted message or a rejection reason.
    """

    def __init__(
        self,
        per_user_window: float = DEFAULT_PER_USER_WINDOW,
        dedup_ttl: float = DEFAULT_DEDUP_TTL,
        config: ChatFilterConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self._guard = SpamGuard(per_user_window, dedup_ttl, clock=clock)

    @property
    def guard(self) -> SpamGuard:
        """The rate limiting and deduplication state of this filter."""
        return self._guard

    def check(self, raw: str, mode: Mode, reply_to: str | None = None) -> FilterResult:
        """Run the raw block through the filter in the given mode and return the outcome."""
        received_at = arrow.utcnow()

        block = parse_block(raw)
        if block is None:
            return self._reject(RejectReason.MALFORMED, raw)

        commands = extract_commands(block.content)
        if not commands.content:
            # Nothing is left to display once the directives are gone.
            return self._reject(RejectReason.MALFORMED, raw)

        content_key = normalize_content(commands.content)
        if self.config is not None and self.config.is_banned(content_key):
            return self._reject(RejectReason.BANNED, raw)

        if mode is Mode.LIVE:
            reason = self._guard.check(block.user, content_key)
            if reason is not None:
                return self._reject(reason, raw)

        message = ChatMessage(
            user=block.user,
            content=commands.content,
            received_at=received_at,
            raw_time=block.raw_time,
            reply_to=reply_to.strip() if reply_to and reply_to.strip() else None,
            highlight_colors=commands.colors,
            effects=commands.effects,
            icon=self.config.try_get_icon(block.user) if self.config is not None else None,
        )
        log.trace(f"Accepted a message from {message.user} in {mode.name.lower()} mode.")
        return FilterResult(message=message)

    def try_accept_raw(self, raw: str, mode: Mode, reply_to: str | None = None) -> ChatMessage | None:
        """Return the accepted message for the raw block, or None if it was filtered out."""
        return self.check(raw, mode, reply_to).message

    @staticmethod
    def _reject(reason: RejectReason, raw: str) -> FilterResult:
        log.trace(f"Rejected a message block ({reason.name.lower()}): {raw!r:.80}")
        return FilterResult.reject(reason)
