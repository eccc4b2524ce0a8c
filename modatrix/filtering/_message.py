from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

import arrow


class Mode(Enum):
    """Which checks a filtering call should run."""

    HISTORICAL = auto()  # Backlog ingestion: parsing and bans only.
    LIVE = auto()  # Real-time stream: rate limiting and deduplication as well.


class RejectReason(Enum):
    """Why a message block was not accepted."""

    MALFORMED = auto()
    BANNED = auto()
    DUPLICATE = auto()
    RATE_LIMITED = auto()


class Effect(Enum):
    """The closed set of animation effects a message can request."""

    SHAKE = "shake"
    WIGGLE = "wiggle"
    GLOW = "glow"
    WAVE = "wave"
    SCRAMBLE = "scramble"
    TYPE = "type"
    GLITCH = "glitch"
    EXPLODE = "explode"
    MATRIX = "matrix"
    FADE = "fade"
    SLIDE = "slide"

    @classmethod
    def from_token(cls, name: str) -> Effect | None:
        """Return the effect called `name`, ignoring case, or None if there is no such effect."""
        try:
            return cls(name.lower())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ChatMessage:
    """A single accepted chat message, ready to be handed to a renderer."""

    user: str
    content: str  # Display text, with all directives stripped.
    received_at: arrow.Arrow
    raw_time: str | None = None  # The time as shown by the source, stored verbatim.
    reply_to: str | None = None
    highlight_colors: tuple[str, ...] = ()
    effects: tuple[Effect, ...] = ()
    icon: str | None = None

    @property
    def highlight_color(self) -> str | None:
        """The primary highlight colour, if any."""
        return self.highlight_colors[0] if self.highlight_colors else None

    @property
    def highlight_color_2(self) -> str | None:
        """The secondary highlight colour, used for gradients."""
        return self.highlight_colors[1] if len(self.highlight_colors) > 1 else None


@dataclass(frozen=True)
class FilterResult:
    """The outcome of filtering one raw message block."""

    message: ChatMessage | None = None
    reason: RejectReason | None = None

    def __post_init__(self):
        if (self.message is None) == (self.reason is None):
            raise ValueError("A filter result must hold either a message or a rejection reason.")

    @property
    def accepted(self) -> bool:
        """Whether the block was accepted."""
        return self.message is not None

    @classmethod
    def reject(cls, reason: RejectReason) -> FilterResult:
        """Create a rejected result."""
        return cls(reason=reason)
