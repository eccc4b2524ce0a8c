from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from modatrix.log import get_logger

log = get_logger(__name__)


def _normalize_tag(tag: str) -> str:
    """Return the lookup form of a user tag: trimmed, `@`-prefixed and lowercase."""
    tag = tag.strip()
    if not tag.startswith("@"):
        tag = "@" + tag
    return tag.lower()


class ChatFilterConfig(BaseModel):
    """
    Content filtering configuration: banned keywords, banned mentions, and user icons.

    All values are normalized on validation. Keyword and mention checks are case-insensitive substring checks.
    """

    model_config = ConfigDict(frozen=True)

    banned_keywords: frozenset[str] = frozenset()
    banned_mentions: frozenset[str] = frozenset()
    wallet_icons: dict[str, str] = {}

    @model_validator(mode="before")
    @classmethod
    def match_keys_loosely(cls, data: Any) -> Any:
        """Accept field names regardless of case, and in camel case as well as snake case."""
        if not isinstance(data, dict):
            return data
        lookup = {name.replace("_", ""): name for name in cls.model_fields}
        return {lookup.get(str(key).replace("_", "").lower(), key): value for key, value in data.items()}

    @field_validator("banned_keywords", "banned_mentions", mode="before")
    @classmethod
    def normalize_terms(cls, terms: Any) -> frozenset[str]:
        """Trim and lowercase the banned terms, dropping blank ones."""
        if terms is None:
            return frozenset()
        if isinstance(terms, str) or not isinstance(terms, Iterable):
            return terms  # Left for the field validation to reject.
        return frozenset(
            term.strip().lower() for term in terms if isinstance(term, str) and term.strip()
        )

    @field_validator("wallet_icons", mode="before")
    @classmethod
    def normalize_icons(cls, icons: Any) -> dict[str, str]:
        """Key the icons by normalized user tag. If two tags normalize the same way, the last one wins."""
        if icons is None:
            return {}
        if not isinstance(icons, Mapping):
            return icons
        return {
            _normalize_tag(str(tag)): icon or ""
            for tag, icon in icons.items()
            if tag is not None and str(tag).strip()
        }

    def is_banned(self, normalized_content: str) -> bool:
        """Return True if the (already lowercase) content contains any banned keyword or mention."""
        return any(term in normalized_content for term in self.banned_keywords | self.banned_mentions)

    def try_get_icon(self, user_tag: str) -> str | None:
        """Return the icon configured for `user_tag`, which may be given with or without a leading `@`."""
        if not self.wallet_icons or not user_tag or not user_tag.strip():
            return None
        return self.wallet_icons.get(_normalize_tag(user_tag)) or None

    @classmethod
    def load_or_default(cls, path: str | Path) -> ChatFilterConfig:
        """
        Load the configuration from the JSON file at `path`.

        An empty configuration is returned if the file doesn't exist.
        If the file can't be read or isn't valid, a warning is logged and an empty configuration is returned too.
        """
        path = Path(path)
        if not path.is_file():
            log.debug(f"No filter config found at {path}, using the defaults.")
            return cls()

        try:
            config = cls.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as e:
            log.warning(f"Couldn't load the filter config from {path}, using the defaults: {e}")
            return cls()

        log.info(
            f"Loaded filter config: {len(config.banned_keywords)} banned keywords, "
            f"{len(config.banned_mentions)} banned mentions, {len(config.wallet_icons)} icons."
        )
        return config
