import threading
import time
from collections import deque
from collections.abc import Callable

from modatrix.filtering._message import RejectReason
from modatrix.log import get_logger

log = get_logger(__name__)


class SpamGuard:
    """
    Per-user rate limiting and global content deduplication.

    A user may have at most one message accepted every `per_user_window` seconds,
    and once some content was accepted, the same content is rejected for `dedup_ttl` seconds, whoever sends it.

    Expired content is evicted lazily at the start of every check. Since all content shares the same TTL,
    the order in which content was accepted is also the order in which it expires, so a plain FIFO queue
    of expiries is enough: eviction only needs to look at the head of the queue.

    Recording an expiry for some content overwrites any previous expiry it had. A queue entry only removes
    its content from the mapping if the mapping still holds that entry's expiry, so a stale entry never
    cuts a renewed TTL short.

    All state is guarded by a single lock owned by the instance, so one guard can be shared between threads.
    """

    def __init__(
        self,
        per_user_window: float,
        dedup_ttl: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if per_user_window < 0:
            raise ValueError("per_user_window must not be negative")
        if dedup_ttl <= 0:
            raise ValueError("dedup_ttl must be positive")

        self.per_user_window = per_user_window
        self.dedup_ttl = dedup_ttl
        self._clock = clock

        self._lock = threading.Lock()
        self._last_accepted: dict[str, float] = {}
        self._content_expiry: dict[str, float] = {}
        self._expiry_queue: deque[tuple[str, float]] = deque()

    def check(self, user: str, content_key: str) -> RejectReason | None:
        """
        Decide whether `user` may post content with the comparison key `content_key` right now.

        Return None and record the message if it's accepted, otherwise return the reason for rejecting it.
        Nothing is recorded for rejected messages.
        """
        with self._lock:
            now = self._clock()
            self._evict_expired(now)

            if content_key in self._content_expiry:
                return RejectReason.DUPLICATE

            last_accepted = self._last_accepted.get(user)
            if last_accepted is not None and now - last_accepted < self.per_user_window:
                return RejectReason.RATE_LIMITED

            expiry = now + self.dedup_ttl
            self._last_accepted[user] = now
            self._content_expiry[content_key] = expiry
            self._expiry_queue.append((content_key, expiry))
            return None

    def _evict_expired(self, now: float) -> None:
        """Drop all content whose TTL has run out. Must be called with the lock held."""
        evicted = 0
        while self._expiry_queue and self._expiry_queue[0][1] <= now:
            content_key, expiry = self._expiry_queue.popleft()
            # A later accept of the same content may have renewed its expiry.
            if self._content_expiry.get(content_key) == expiry:
                del self._content_expiry[content_key]
                evicted += 1

        if evicted:
            log.trace(f"Evicted {evicted} expired content keys, {len(self._content_expiry)} remain.")

    @property
    def tracked_users(self) -> int:
        """The number of users with a recorded accepted message."""
        with self._lock:
            return len(self._last_accepted)

    @property
    def tracked_contents(self) -> int:
        """The number of content keys currently suppressed (including expired ones not evicted yet)."""
        with self._lock:
            return len(self._content_expiry)

    @property
    def queue_length(self) -> int:
        """The number of pending entries in the expiry queue."""
        with self._lock:
            return len(self._expiry_queue)

    def reset(self) -> None:
        """Forget all accepted messages."""
        with self._lock:
            self._last_accepted.clear()
            self._content_expiry.clear()
            self._expiry_queue.clear()
