import threading
import unittest
from concurrent.futures import ThreadPoolExecutor

import arrow

from modatrix.filtering import ChatFilterConfig, Effect, Mode, RejectReason, SpamFilter
from tests.helpers import FakeClock


class SpamFilterTests(unittest.TestCase):
    """Tests for the whole filtering pipeline."""

    def setUp(self):
        self.clock = FakeClock()
        self.config = ChatFilterConfig(
            banned_keywords=["rug"],
            banned_mentions=["@x"],
            wallet_icons={"whale": "🐋"},
        )
        self.filter = SpamFilter(per_user_window=2, dedup_ttl=60, config=self.config, clock=self.clock)

    def test_accepts_well_formed_message(self):
        """An ordinary message is accepted with all its fields filled in."""
        before = arrow.utcnow()
        message = self.filter.try_accept_raw("alice\n\nHello world!\n\n12:00", Mode.LIVE)

        self.assertIsNotNone(message)
        self.assertEqual(message.user, "alice")
        self.assertEqual(message.content, "Hello world!")
        self.assertEqual(message.raw_time, "12:00")
        self.assertIsNone(message.reply_to)
        self.assertEqual(message.highlight_colors, ())
        self.assertEqual(message.effects, ())
        self.assertIsNone(message.icon)
        self.assertGreaterEqual(message.received_at, before)

    def test_missing_content_is_always_rejected(self):
        for mode in Mode:
            for raw in ("alice", "alice\n\n", "alice\n\n  \n\n12:00", "\n\nhello"):
                with self.subTest(mode=mode, raw=raw):
                    result = self.filter.check(raw, mode)
                    self.assertFalse(result.accepted)
                    self.assertIs(result.reason, RejectReason.MALFORMED)

    def test_content_of_only_directives_is_rejected(self):
        result = self.filter.check("alice\n\n#ff0000 !shake\n\n12:00", Mode.HISTORICAL)

        self.assertIs(result.reason, RejectReason.MALFORMED)

    def test_banned_content_is_rejected_regardless_of_case(self):
        """Bans apply in both modes, ignoring case."""
        for mode in Mode:
            for content in ("visit RUGPROJECT now", "ping @X please", "this will Rug you"):
                with self.subTest(mode=mode, content=content):
                    result = self.filter.check(f"bob\n\n{content}\n\n12:01", mode)
                    self.assertIs(result.reason, RejectReason.BANNED)

    def test_ban_does_not_touch_state(self):
        self.filter.check("bob\n\nrug pull\n\n12:01", Mode.LIVE)

        self.assertEqual(self.filter.guard.tracked_users, 0)
        self.assertIsNotNone(self.filter.try_accept_raw("bob\n\nhello\n\n12:01", Mode.LIVE))

    def test_duplicate_content_across_users_in_live_mode(self):
        """Identical normalized content is rejected until the TTL runs out."""
        self.assertIsNotNone(self.filter.try_accept_raw("u\n\nSame text\n\n10:00", Mode.LIVE))

        result = self.filter.check("v\n\nSame   TEXT\n\n10:01", Mode.LIVE)
        self.assertIs(result.reason, RejectReason.DUPLICATE)

        self.clock.advance(60)
        self.assertIsNotNone(self.filter.try_accept_raw("w\n\nsame text\n\n10:02", Mode.LIVE))

    def test_directives_do_not_defeat_deduplication(self):
        """The comparison key is computed from the content without its directives."""
        self.assertIsNotNone(self.filter.try_accept_raw("u\n\n#f00 gm !glow\n\n10:00", Mode.LIVE))

        result = self.filter.check("v\n\n!SHAKE GM #00ff00\n\n10:00", Mode.LIVE)
        self.assertIs(result.reason, RejectReason.DUPLICATE)

    def test_user_rate_limit_in_live_mode(self):
        """A user posting twice within the window is rejected, then accepted once it elapses."""
        self.assertIsNotNone(self.filter.try_accept_raw("u\n\nmsg1\n\n10:00", Mode.LIVE))

        self.clock.advance(1)
        self.assertIs(self.filter.check("u\n\nmsg2\n\n10:00", Mode.LIVE).reason, RejectReason.RATE_LIMITED)

        self.clock.advance(1)
        self.assertIsNotNone(self.filter.try_accept_raw("u\n\nmsg2\n\n10:00", Mode.LIVE))

    def test_historical_mode_never_rate_limits_or_deduplicates(self):
        for i in range(5):
            with self.subTest(i=i):
                message = self.filter.try_accept_raw("u\n\nsame text\n\n10:00", Mode.HISTORICAL)
                self.assertIsNotNone(message)

        self.assertEqual(self.filter.guard.tracked_contents, 0)
        self.assertIsNotNone(self.filter.try_accept_raw("u\n\nsame text\n\n10:00", Mode.LIVE))

    def test_directives_are_extracted_into_the_message(self):
        message = self.filter.try_accept_raw("u\n\n#ff8800 #2200ff hello !glow !shake\n\n10:00", Mode.LIVE)

        self.assertEqual(message.content, "hello")
        self.assertEqual(message.highlight_colors, ("#ff8800", "#2200ff"))
        self.assertEqual(message.highlight_color, "#ff8800")
        self.assertEqual(message.highlight_color_2, "#2200ff")
        self.assertEqual(message.effects, (Effect.SHAKE, Effect.GLOW))

    def test_reply_and_icon_are_attached(self):
        message = self.filter.try_accept_raw("Whale\n\ngm\n\n10:00", Mode.LIVE, reply_to="  earlier message ")

        self.assertEqual(message.reply_to, "earlier message")
        self.assertEqual(message.icon, "🐋")

    def test_blank_reply_is_dropped(self):
        message = self.filter.try_accept_raw("u\n\ngm\n\n10:00", Mode.LIVE, reply_to="   ")

        self.assertIsNone(message.reply_to)

    def test_filter_without_config_bans_nothing(self):
        spam_filter = SpamFilter(clock=self.clock)

        message = spam_filter.try_accept_raw("u\n\nrug rug rug\n\n10:00", Mode.LIVE)
        self.assertIsNotNone(message)
        self.assertIsNone(message.icon)

    def test_instances_do_not_share_state(self):
        other = SpamFilter(per_user_window=2, dedup_ttl=60, clock=self.clock)
        self.filter.try_accept_raw("u\n\nhello\n\n10:00", Mode.LIVE)

        self.assertIsNotNone(other.try_accept_raw("u\n\nhello\n\n10:00", Mode.LIVE))


class ConcurrentSpamFilterTests(unittest.TestCase):
    """Tests for calling one filter from many threads."""

    def test_concurrent_distinct_messages_are_all_accepted(self):
        """Distinct users posting distinct content at once are all accepted, with no lost updates."""
        n = 200
        spam_filter = SpamFilter(per_user_window=60, dedup_ttl=60)
        barrier = threading.Barrier(16, timeout=10)

        def submit(i: int) -> bool:
            if i < 16:
                barrier.wait()
            return spam_filter.try_accept_raw(f"user{i}\n\nmessage number {i}\n\n10:00", Mode.LIVE) is not None

        with ThreadPoolExecutor(max_workers=16) as executor:
            results = list(executor.map(submit, range(n)))

        self.assertTrue(all(results))
        self.assertEqual(spam_filter.guard.tracked_users, n)
        self.assertEqual(spam_filter.guard.tracked_contents, n)
        self.assertEqual(spam_filter.guard.queue_length, n)

    def test_concurrent_duplicates_are_accepted_once(self):
        """When many users race to post the same content, exactly one of them wins."""
        spam_filter = SpamFilter(per_user_window=60, dedup_ttl=60)

        with ThreadPoolExecutor(max_workers=16) as executor:
            results = list(executor.map(
                lambda i: spam_filter.try_accept_raw(f"user{i}\n\nbuy now\n\n10:00", Mode.LIVE),
                range(100),
            ))

        self.assertEqual(sum(message is not None for message in results), 1)
