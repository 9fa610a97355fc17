"""
Fallback Provider - Suggestions shown when nothing else matched.

  - "Search <engine> for <query>" opens the configured web search engine
  - "Create Quicklink for <query>" saves the query as a quicklink

The engine is configurable via settings.toml [web_search] section:

    [web_search]
    name = "Kagi"
    url = "https://kagi.com/search?q={query}"
"""

import urllib.parse
from typing import Optional

from pulse.search.provider import Candidate, Kind
from pulse.search.providers.quicklinks import QuicklinkProvider

DEFAULT_ENGINE = {"name": "Google", "url": "https://www.google.com/search?q={query}"}


class FallbackProvider:
    """Builds the dead-end suggestions; consulted only when a search found nothing."""

    section = "Suggestions"

    def __init__(self, engine: Optional[dict] = None, quicklinks: Optional[QuicklinkProvider] = None):
        self.engine = engine or DEFAULT_ENGINE
        self.quicklinks = quicklinks

    def candidates_for(self, query: str) -> list[Candidate]:
        """Fallback suggestions for a query that produced no results."""
        term = query.strip()
        if not term:
            return []

        url = self.engine["url"].format(query=urllib.parse.quote_plus(term))
        results = [Candidate(
            stable_id="fallback.web",
            display_name=f"Search {self.engine['name']} for '{term}'",
            payload=url,
            kind=Kind.QUICKLINK,
            subtitle=urllib.parse.urlsplit(url).netloc,
            icon="web-browser",
        )]

        if self.quicklinks is not None:
            quicklinks = self.quicklinks
            results.append(Candidate(
                stable_id="fallback.quicklink",
                display_name=f"Create Quicklink for '{term}'",
                payload=term,
                kind=Kind.QUICKLINK,
                icon="link",
                invoke=lambda t=term: quicklinks.create_from_query(t),
            ))

        return results
