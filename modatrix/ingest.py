"""
Feeding scraped chat records through a spam filter, one poll at a time.

The first sweep over a chat is the historical backlog: it's filtered leniently, so legitimately repeated
messages from the past aren't mistaken for spam. Every later sweep is filtered in live mode.
"""
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from modatrix.filtering import ChatMessage, Mode, SpamFilter
from modatrix.log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SourceRecord:
    """A message as observed on the source page."""

    id: str  # Identifies the message on the page, stable between polls.
    raw: str
    reply_to: str | None = None


@dataclass
class IngestStats:
    """Counters of records seen, accepted and dropped."""

    seen: int = 0
    accepted: int = 0
    dropped: int = 0

    def add(self, other: "IngestStats") -> None:
        """Add the counters of `other` to these ones."""
        self.seen += other.seen
        self.accepted += other.accepted
        self.dropped += other.dropped


def strip_reply_header(raw: str, reply_to: str | None) -> str:
    """Drop the first line of a raw block if the message is a reply, since the page prepends a reply header."""
    if not reply_to:
        return raw
    first_break = raw.find("\n")
    if 0 < first_break < len(raw) - 1:
        return raw[first_break + 1:]
    return raw


class ChatIngestor:
    """
    Tracks which source records were already examined, and in which mode to filter the next ones.

    The ingestor starts in historical mode and switches to live mode once, after its first sweep.
    In live mode, records which were accepted are never examined again, while rejected ones may be retried
    on a later sweep, for example once the rate limit of their author has passed.
    """

    def __init__(
        self,
        spam_filter: SpamFilter,
        *,
        stats_interval: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.spam_filter = spam_filter
        self.mode = Mode.HISTORICAL
        self.totals = IngestStats()

        self.stats_interval = stats_interval
        self._clock = clock
        self._last_stats_at = clock()

        self._historical_ids: set[str] = set()
        self._live_ids: set[str] = set()

    def sweep(self, records: Iterable[SourceRecord]) -> list[ChatMessage]:
        """Filter the records observed in one poll, and return the messages accepted among them."""
        stats = IngestStats()
        accepted = []

        for record in records:
            if not record.id:
                continue
            stats.seen += 1

            if self.mode is Mode.HISTORICAL:
                if record.id in self._historical_ids:
                    continue
                self._historical_ids.add(record.id)
            elif record.id in self._live_ids:
                continue

            raw = strip_reply_header(record.raw, record.reply_to)
            message = self.spam_filter.try_accept_raw(raw, self.mode, record.reply_to)
            if message is None:
                stats.dropped += 1
                continue

            if self.mode is Mode.LIVE:
                self._live_ids.add(record.id)
            stats.accepted += 1
            accepted.append(message)

        if self.mode is Mode.HISTORICAL:
            self.mode = Mode.LIVE
            self._historical_ids.clear()
            log.info(f"Historical backlog ingested ({stats.accepted} messages), switching to live filtering.")

        self.totals.add(stats)
        self._log_stats(stats)
        return accepted

    def _log_stats(self, stats: IngestStats) -> None:
        """Log the counters, at most once every `stats_interval` seconds."""
        now = self._clock()
        if now - self._last_stats_at < self.stats_interval:
            return
        self._last_stats_at = now
        log.debug(
            f"Sweep: seen={stats.seen} accepted+={stats.accepted} "
            f"total_accepted={self.totals.accepted} total_dropped={self.totals.dropped}"
        )
