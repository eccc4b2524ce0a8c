"""
Extraction of inline display directives from message content.

Directives are tokens like `#ff8800` (a highlight colour) or `!glow` (an animation effect) which
should change how a message is displayed, and never be displayed themselves.
Each kind of directive is handled by its own matcher, and the matchers run in a fixed order:
colours first, then `!shake`, then the other effects. Whitespace is collapsed after every pass,
so that a later matcher never sees the leftovers of an earlier one as ordinary tokens.
"""
import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar, NamedTuple

from modatrix.filtering._message import Effect
from modatrix.filtering._utils import collapse_whitespace
from modatrix.log import get_logger

log = get_logger(__name__)

HEX_DIGIT = "[0-9a-fA-F]"
# Longer forms come first so that `#aabbcc` isn't read as `#aab` followed by text.
COLOUR_RE = re.compile(
    rf"(?<!{HEX_DIGIT})#(?P<digits>{HEX_DIGIT}{{8}}|{HEX_DIGIT}{{6}}|{HEX_DIGIT}{{4}}|{HEX_DIGIT}{{3}})"
)
SHAKE_RE = re.compile(r"(?<!\S)!shake(?!\S)", re.IGNORECASE)
EFFECT_RE = re.compile(
    r"(?<!\S)!(?P<name>{})(?!\S)".format("|".join(
        effect.value for effect in Effect if effect is not Effect.SHAKE
    )),
    re.IGNORECASE
)


class ExtractedCommands(NamedTuple):
    """Message content with its directives stripped, and the directives found."""

    content: str
    colors: tuple[str, ...] = ()
    effects: tuple[Effect, ...] = ()


def expand_hex_colour(digits: str) -> str:
    """
    Normalize the hex digits of a colour directive into a lowercase `#rrggbb` string.

    Short forms are expanded by doubling each digit, and any alpha component is dropped.
    """
    digits = digits.lower()
    if len(digits) in (3, 4):
        return "#" + "".join(digit * 2 for digit in digits[:3])
    return "#" + digits[:6]


class CommandMatcher(ABC):
    """Finds one kind of directive in message content."""

    # The `ExtractedCommands` field the matcher's findings belong to.
    field: ClassVar[str]

    @abstractmethod
    def strip(self, content: str) -> tuple[str, list[Any]]:
        """Return `content` with the directives removed, along with what was found, in order."""


class ColourMatcher(CommandMatcher):
    """Captures up to two distinct highlight colours."""

    field = "colors"
    max_colours = 2

    def strip(self, content: str) -> tuple[str, list[str]]:
        """Return `content` without the captured colour tokens, and the captured colours."""
        colours = []
        captured_literals = set()
        for match in COLOUR_RE.finditer(content):
            if len(colours) >= self.max_colours:
                break
            colour = expand_hex_colour(match["digits"])
            if colour in colours:
                continue
            colours.append(colour)
            captured_literals.add(match[0].lower())

        if not captured_literals:
            return content, []

        # Colour-looking tokens which weren't captured are left as they are.
        stripped = COLOUR_RE.sub(lambda m: "" if m[0].lower() in captured_literals else m[0], content)
        return stripped, colours


class ShakeMatcher(CommandMatcher):
    """Detects the standalone `!shake` token."""

    field = "effects"

    def strip(self, content: str) -> tuple[str, list[Effect]]:
        """Return `content` without any `!shake` tokens, and the shake effect if one was there."""
        stripped, count = SHAKE_RE.subn("", content)
        return stripped, [Effect.SHAKE] if count else []


class EffectMatcher(CommandMatcher):
    """Detects standalone `!<effect>` tokens from the effect vocabulary."""

    field = "effects"

    def strip(self, content: str) -> tuple[str, list[Effect]]:
        """Return `content` without effect tokens, and the distinct effects in order of first appearance."""
        effects = [Effect.from_token(match["name"]) for match in EFFECT_RE.finditer(content)]
        if not effects:
            return content, []
        return EFFECT_RE.sub("", content), list(dict.fromkeys(effects))


MATCHERS: tuple[CommandMatcher, ...] = (ColourMatcher(), ShakeMatcher(), EffectMatcher())


def extract_commands(content: str) -> ExtractedCommands:
    """Strip all directives from `content` and return the cleaned text with the directives found."""
    found = {"colors": [], "effects": []}
    for matcher in MATCHERS:
        content, items = matcher.strip(content)
        found[matcher.field].extend(items)
        content = collapse_whitespace(content)

    # Shake is matched first, so it always leads the effects.
    effects = tuple(dict.fromkeys(found["effects"]))
    if found["colors"] or effects:
        log.trace(f"Extracted colours {found['colors']} and effects {[str(e) for e in effects]}.")
    return ExtractedCommands(content, tuple(found["colors"]), effects)
