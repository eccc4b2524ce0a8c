import unittest

from modatrix.filtering._parsing import ParsedBlock, parse_block
from modatrix.filtering._utils import collapse_whitespace, normalize_content


class ParseBlockTests(unittest.TestCase):
    """Tests for splitting raw message blocks into their fields."""

    def test_well_formed_blocks_are_split(self):
        """Each segment should be trimmed and assigned to its field."""
        test_cases = (
            ("alice\n\nHello world!\n\n12:00", ParsedBlock("alice", "Hello world!", "12:00")),
            ("  alice \n\n  hi  \n\n 19:10 ", ParsedBlock("alice", "hi", "19:10")),
            ("alice\n\nno time here", ParsedBlock("alice", "no time here", None)),
            ("alice\n\nempty time\n\n   ", ParsedBlock("alice", "empty time", None)),
            ("alice\n\nline one\nline two\n\n10:00", ParsedBlock("alice", "line one\nline two", "10:00")),
        )

        for raw, expected in test_cases:
            with self.subTest(raw=raw):
                self.assertEqual(parse_block(raw), expected)

    def test_blank_segments_do_not_shift_fields(self):
        """An empty segment must not be dropped, so the content slot stays the content slot."""
        self.assertIsNone(parse_block("alice\n\n\n\nhello"))
        self.assertEqual(parse_block("alice\n\nhi\n\n\n\nextra"), ParsedBlock("alice", "hi", None))

    def test_blocks_without_user_or_content_are_rejected(self):
        """Missing or blank users and contents should give None rather than raise."""
        test_cases = (
            "",
            "alice",
            "alice\n\n",
            "alice\n\n   \n\n12:00",
            "   \n\nhello\n\n12:00",
            "\n\nhello",
        )

        for raw in test_cases:
            with self.subTest(raw=raw):
                self.assertIsNone(parse_block(raw))

    def test_non_string_input_is_rejected(self):
        """Anything that isn't a string is treated as malformed."""
        for raw in (None, 42, b"alice\n\nhi"):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_block(raw))


class NormalizeContentTests(unittest.TestCase):
    """Tests for the comparison key of message content."""

    def test_content_is_trimmed_collapsed_and_lowercased(self):
        test_cases = (
            ("Same text", "same text"),
            ("  Same   text  ", "same text"),
            ("SAME\ttext\n\nhere", "same text here"),
            ("", ""),
        )

        for content, expected in test_cases:
            with self.subTest(content=content):
                self.assertEqual(normalize_content(content), expected)

    def test_collapse_whitespace_keeps_case(self):
        self.assertEqual(collapse_whitespace("  Hello \n World "), "Hello World")
