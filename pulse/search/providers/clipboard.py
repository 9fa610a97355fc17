"""
Clipboard Provider - Searchable clipboard history.

The clipboard watcher (outside this package) calls push() whenever the
system clipboard changes. Copying something already in the history moves
it back to the front. An empty query shows the newest entries.
"""

import hashlib
import threading
from collections import deque
from typing import Optional

from pulse.search.fuzzy import fuzzy_match
from pulse.search.provider import Candidate, Kind, SourceProvider

PREVIEW_LENGTH = 80


def clipboard_stable_id(text: str) -> str:
    digest = hashlib.sha1(text.encode("utf-8")).hexdigest()[:16]
    return f"clipboard.{digest}"


def _preview(text: str) -> str:
    line = " ".join(text.split())
    if len(line) > PREVIEW_LENGTH:
        return line[:PREVIEW_LENGTH - 1] + "…"
    return line


class ClipboardProvider(SourceProvider):
    """Recent clipboard contents, newest first."""

    __gtype_name__ = "PulseClipboardProvider"

    name = "clipboard"
    section = "Clipboard"
    shows_on_empty_query = True

    def __init__(self, max_items: int = 50, frequent_items: int = 8):
        super().__init__()
        self.max_items = max_items
        self.frequent_items = frequent_items
        self._history: deque[str] = deque(maxlen=max_items)
        self._lock = threading.Lock()

    def push(self, text: str) -> None:
        """Record a clipboard change. Blank text is ignored."""
        if not text or not text.strip():
            return

        with self._lock:
            if text in self._history:
                self._history.remove(text)
            self._history.appendleft(text)
        self.emit("changed")

    def latest(self) -> Optional[str]:
        with self._lock:
            return self._history[0] if self._history else None

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
        self.emit("changed")

    def snapshot(self) -> list[Candidate]:
        with self._lock:
            history = list(self._history)
        return [self._to_candidate(text) for text in history]

    def search(self, query: str) -> list[Candidate]:
        if not query:
            return self.snapshot()[:self.frequent_items]
        return [c for c in self.snapshot() if fuzzy_match(c.payload, query)]

    def _to_candidate(self, text: str) -> Candidate:
        return Candidate(
            stable_id=clipboard_stable_id(text),
            display_name=_preview(text),
            payload=text,
            kind=Kind.CLIPBOARD,
            subtitle=f"{len(text)} characters",
            icon="edit-paste",
        )
