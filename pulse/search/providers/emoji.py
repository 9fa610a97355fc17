"""
Emoji Provider - Search emoji by name or keyword.

The dataset ships as pulse/data/emoji.toml. An empty query shows recently
used emoji (from the usage store), or the first few when there is no
history yet.
"""

from dataclasses import dataclass
from importlib import resources
from typing import Optional

import toml
from loguru import logger

from pulse.search.provider import Candidate, Kind, SourceProvider
from pulse.services.usage import UsageStore


@dataclass(frozen=True)
class Emoji:
    symbol: str
    name: str
    keywords: tuple[str, ...]
    category: str

    @property
    def stable_id(self) -> str:
        return f"emoji_{self.symbol}"


def load_emoji(text: Optional[str] = None) -> list[Emoji]:
    """Parse the emoji dataset (the bundled file unless `text` is given)."""
    if text is None:
        text = resources.files("pulse.data").joinpath("emoji.toml").read_text(encoding="utf-8")

    emoji = []
    for entry in toml.loads(text).get("emoji", []):
        try:
            emoji.append(Emoji(
                symbol=entry["symbol"],
                name=entry["name"],
                keywords=tuple(entry.get("keywords", ())),
                category=entry.get("category", "Symbols"),
            ))
        except (KeyError, TypeError):
            logger.warning(f"Skipping malformed emoji entry: {entry!r}")
    return emoji


class EmojiProvider(SourceProvider):
    """Emoji matched by name or keyword substring."""

    __gtype_name__ = "PulseEmojiProvider"

    name = "emoji"
    section = "Emojis"
    shows_on_empty_query = True

    def __init__(
        self,
        usage_store: Optional[UsageStore] = None,
        emoji: Optional[list[Emoji]] = None,
        frequent_items: int = 16,
    ):
        super().__init__()
        self.usage_store = usage_store
        self.frequent_items = frequent_items
        self._emoji = tuple(emoji if emoji is not None else load_emoji())

    def snapshot(self) -> list[Candidate]:
        return [self._to_candidate(e) for e in self._emoji]

    def search(self, query: str) -> list[Candidate]:
        if not query:
            return [self._to_candidate(e) for e in self.frequently_used()]

        q = query.lower()
        return [
            self._to_candidate(e) for e in self._emoji
            if q in e.name.lower() or any(q in k.lower() for k in e.keywords)
        ]

    def frequently_used(self) -> list[Emoji]:
        """Most recently used emoji first, else the first few of the dataset."""
        used = []
        if self.usage_store is not None:
            used = [
                record for stable_id, record in self.usage_store.snapshot().items()
                if stable_id.startswith("emoji_")
            ]
        used.sort(key=lambda r: r.last_used_at, reverse=True)

        by_id = {e.stable_id: e for e in self._emoji}
        recent = [by_id[r.id] for r in used if r.id in by_id][:self.frequent_items]
        if not recent:
            return list(self._emoji[:self.frequent_items])
        return recent

    def _to_candidate(self, emoji: Emoji) -> Candidate:
        return Candidate(
            stable_id=emoji.stable_id,
            display_name=emoji.name,
            payload=emoji.symbol,
            kind=Kind.EMOJI,
            subtitle=emoji.category,
            icon=emoji.symbol,
        )
