from modatrix.filtering._commands import ExtractedCommands, extract_commands
from modatrix.filtering._config import ChatFilterConfig
from modatrix.filtering._message import ChatMessage, Effect, FilterResult, Mode, RejectReason
from modatrix.filtering._parsing import ParsedBlock, parse_block
from modatrix.filtering._spam_guard import SpamGuard
from modatrix.filtering._utils import normalize_content
from modatrix.filtering.filtering import SpamFilter

__all__ = (
    "ChatFilterConfig",
    "ChatMessage",
    "Effect",
    "ExtractedCommands",
    "FilterResult",
    "Mode",
    "ParsedBlock",
    "RejectReason",
    "SpamFilter",
    "SpamGuard",
    "extract_commands",
    "normalize_content",
    "parse_block",
)
