"""
Quicklink Provider - User-defined links and parameterized searches.

Quicklinks are stored in quicklinks.json:

    {"quicklinks": [
        {"id": "3f2a...", "name": "Search GitHub",
         "link": "https://github.com/search?q={argument}",
         "icon": "globe", "open_with": null}
    ]}

Placeholders in the link:
  {argument}  - text typed after the quicklink name ("search github pulse")
  {clipboard} - newest clipboard entry
"""

import threading
import urllib.parse
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from pulse.search.fuzzy import fuzzy_match
from pulse.search.provider import Candidate, Kind, SourceProvider
from pulse.utils.helpers import load_json, save_json


@dataclass(frozen=True)
class Quicklink:
    id: str
    name: str
    link: str
    icon: str = "link"
    open_with: Optional[str] = None


class QuicklinkProvider(SourceProvider):
    """Saved links, matched by name; the rest of the query fills {argument}."""

    __gtype_name__ = "PulseQuicklinkProvider"

    name = "quicklinks"
    section = "Quicklinks"

    def __init__(
        self,
        path: Path,
        clipboard: Callable[[], Optional[str]] = lambda: None,
        search_url: str = "https://www.google.com/search?q={query}",
    ):
        super().__init__()
        self.path = Path(path)
        self.search_url = search_url
        self._clipboard = clipboard
        self._lock = threading.Lock()
        self._links: tuple[Quicklink, ...] = self._load()

    def _load(self) -> tuple[Quicklink, ...]:
        data = load_json(self.path, {})
        entries = data.get("quicklinks", []) if isinstance(data, dict) else []

        links = []
        for entry in entries:
            try:
                links.append(Quicklink(
                    id=str(entry["id"]),
                    name=str(entry["name"]),
                    link=str(entry["link"]),
                    icon=entry.get("icon") or "link",
                    open_with=entry.get("open_with") or None,
                ))
            except (KeyError, TypeError, AttributeError):
                logger.warning(f"Skipping malformed quicklink in {self.path}: {entry!r}")
        return tuple(links)

    def _save(self) -> None:
        try:
            save_json(self.path, {"quicklinks": [asdict(link) for link in self._links]})
        except OSError:
            logger.exception(f"Could not save quicklinks to {self.path}")

    @property
    def quicklinks(self) -> list[Quicklink]:
        return list(self._links)

    def add(self, name: str, link: str, icon: str = "link", open_with: Optional[str] = None) -> Quicklink:
        """
        Create and persist a quicklink.

        Raises:
            ValueError: if name or link is blank
        """
        if not name.strip() or not link.strip():
            raise ValueError("Quicklink name and link are required")

        quicklink = Quicklink(
            id=uuid.uuid4().hex,
            name=name.strip(),
            link=link.strip(),
            icon=icon,
            open_with=open_with or None,
        )
        with self._lock:
            self._links = self._links + (quicklink,)
            self._save()
        logger.debug(f"Added quicklink '{quicklink.name}'")
        self.emit("changed")
        return quicklink

    def delete(self, quicklink_id: str) -> None:
        with self._lock:
            remaining = tuple(l for l in self._links if l.id != quicklink_id)
            if len(remaining) == len(self._links):
                return
            self._links = remaining
            self._save()
        self.emit("changed")

    def create_from_query(self, query: str) -> Quicklink:
        """Save the query as a quicklink: URLs as-is, anything else as a web search."""
        text = query.strip()
        if "://" in text:
            return self.add(name=text, link=text)
        return self.add(
            name=text,
            link=self.search_url.format(query=urllib.parse.quote_plus(text)),
            icon="globe",
        )

    def expand(self, quicklink: Quicklink, argument: str = "") -> str:
        """Fill in {argument} and {clipboard} placeholders."""
        link = quicklink.link
        if "{argument}" in link:
            link = link.replace("{argument}", urllib.parse.quote_plus(argument))
        if "{clipboard}" in link:
            link = link.replace("{clipboard}", urllib.parse.quote_plus(self._clipboard() or ""))
        return link

    def snapshot(self) -> list[Candidate]:
        return [self._to_candidate(link, "") for link in self._links]

    def search(self, query: str) -> list[Candidate]:
        results = []
        lowered = query.lower()
        for link in self._links:
            prefix = link.name.lower() + " "
            if lowered.startswith(prefix):
                results.append(self._to_candidate(link, query[len(prefix):].strip()))
            elif fuzzy_match(link.name, query):
                results.append(self._to_candidate(link, ""))
        return results

    def _to_candidate(self, quicklink: Quicklink, argument: str) -> Candidate:
        return Candidate(
            stable_id=f"quicklink.{quicklink.id}",
            display_name=quicklink.name,
            payload=self.expand(quicklink, argument),
            kind=Kind.QUICKLINK,
            subtitle=argument or quicklink.link,
            detail=quicklink.open_with,
            icon=quicklink.icon,
        )
