"""
Search Orchestrator - Fans a query out to every provider and publishes sections.

Per query:
  1. search(query) bumps the generation counter; older sessions are now stale
  2. short queries run inline, longer ones on the background executor
  3. each provider is searched against its current snapshot
  4. candidates are bucketed by section and scored
  5. recently used candidates move into "Recents"
  6. sections are sorted, ordered and flattened
  7. the result is published, but only if the session is still current

Providers that raise contribute nothing. A stale session is simply dropped.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from gi.repository import GObject
from loguru import logger

from pulse.search.provider import Candidate, Section, SourceProvider
from pulse.search.providers.fallback import FallbackProvider
from pulse.search.ranking import Ranker
from pulse.services.usage import UsageStore

RECENTS = "Recents"

SECTION_ORDER = (
    RECENTS,
    "Suggestions",
    "Emojis",
    "Applications",
    "Extensions",
    "Quicklinks",
    "System",
    "Clipboard",
    "Files",
)


def _call_now(fn: Callable, *args) -> None:
    fn(*args)


class SearchOrchestrator(GObject.Object):
    """
    Coordinates providers, ranking and publishing for the launcher.

    Signals:
        results-changed: Emitted after new sections are published

    Args:
        providers: Candidate sources, searched in order
        ranker: Scores candidates
        usage_store: Source of the Recents section
        fallback: Suggestions for queries with no results
        execution_sink: Runs chosen candidates (see run())
        dispatch: Schedules the publish step on the UI's thread, called as
            dispatch(fn, *args), e.g. GLib.idle_add; defaults to calling fn directly
        executor: Runs long queries; defaults to a single worker thread
    """

    __gtype_name__ = "PulseSearchOrchestrator"

    __gsignals__ = {
        "results-changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(
        self,
        providers: Iterable[SourceProvider],
        ranker: Ranker,
        usage_store: UsageStore,
        fallback: Optional[FallbackProvider] = None,
        execution_sink=None,
        dispatch: Callable = _call_now,
        executor: Optional[ThreadPoolExecutor] = None,
        short_query_length: int = 3,
        recents_limit: int = 5,
        max_results: int = 30,
    ):
        super().__init__()
        self.providers = list(providers)
        self.ranker = ranker
        self.usage_store = usage_store
        self.fallback = fallback
        self.execution_sink = execution_sink
        self.short_query_length = short_query_length
        self.recents_limit = recents_limit
        self.max_results = max_results

        self._dispatch = dispatch
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="pulse-search")
        self._lock = threading.Lock()
        self._generation = 0
        self._last_query = ""
        self._sections: tuple[Section, ...] = ()
        self._flattened: tuple[Candidate, ...] = ()

        for provider in self.providers:
            provider.connect("changed", self._on_provider_changed)

    @property
    def sections(self) -> list[Section]:
        with self._lock:
            return list(self._sections)

    @property
    def flattened_results(self) -> list[Candidate]:
        with self._lock:
            return list(self._flattened)

    @property
    def results(self) -> tuple[list[Section], list[Candidate]]:
        """Sections and flattened list from the same publish."""
        with self._lock:
            return list(self._sections), list(self._flattened)

    @property
    def last_query(self) -> str:
        return self._last_query

    def search(self, query: str) -> Optional[Future]:
        """
        Start a search session, superseding any session still in flight.

        Returns:
            The background Future for long queries, None when the query
            was short enough to run inline
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._last_query = query

        if len(query) < self.short_query_length:
            self._run_session(query, generation)
            return None

        return self._executor.submit(self._run_session, query, generation)

    def rerun(self) -> Optional[Future]:
        """Re-issue the last query, e.g. after a provider refreshed."""
        return self.search(self._last_query)

    def run(self, candidate: Candidate) -> None:
        """Execute a chosen candidate through the execution sink."""
        if self.execution_sink is None:
            raise RuntimeError("SearchOrchestrator has no execution sink")
        self.execution_sink.execute(candidate)

    def shutdown(self) -> None:
        with self._lock:
            # Invalidate anything still queued
            self._generation += 1
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _on_provider_changed(self, provider: SourceProvider) -> None:
        logger.debug(f"Provider '{provider.name}' changed, re-running '{self._last_query}'")
        self.rerun()

    def _run_session(self, query: str, generation: int) -> None:
        try:
            sections = self._build_sections(query, generation)
        except Exception:
            logger.exception(f"Search for '{query}' failed")
            return

        if sections is None:
            logger.debug(f"Search for '{query}' superseded before publishing")
            return

        self._dispatch(self._publish, generation, sections)

    def _collect(self, query: str, generation: int) -> Optional[dict[str, list[Candidate]]]:
        """Search every provider; None if the session went stale."""
        buckets: dict[str, list[Candidate]] = {}
        seen: set[str] = set()

        for provider in self.providers:
            if not self._is_current(generation):
                return None
            if not query and not provider.shows_on_empty_query:
                continue

            try:
                found = provider.search(query)
            except Exception:
                logger.exception(f"Provider '{provider.name}' failed for '{query}'")
                continue

            bucket = buckets.setdefault(provider.section, [])
            for candidate in found:
                if candidate.stable_id in seen:
                    continue
                seen.add(candidate.stable_id)
                bucket.append(candidate)

        return buckets

    def _build_sections(self, query: str, generation: int) -> Optional[list[Section]]:
        buckets = self._collect(query, generation)
        if buckets is None:
            return None

        # Pull recently used candidates out of their home sections
        recent_ids = set(self.usage_store.recents(self.recents_limit))
        recents = []
        if recent_ids:
            for title, bucket in buckets.items():
                recents.extend(c for c in bucket if c.stable_id in recent_ids)
                buckets[title] = [c for c in bucket if c.stable_id not in recent_ids]
        buckets[RECENTS] = recents

        if not any(buckets.values()) and query.strip() and self.fallback is not None:
            buckets = {self.fallback.section: self.fallback.candidates_for(query)}

        if not self._is_current(generation):
            return None

        sections = []
        titles = list(SECTION_ORDER) + sorted(t for t in buckets if t not in SECTION_ORDER)
        for title in titles:
            bucket = buckets.get(title)
            if not bucket:
                continue
            ranked = self.ranker.sort(bucket, query)[:self.max_results]
            sections.append(Section(title=title, results=ranked))
        return sections

    def _publish(self, generation: int, sections: list[Section]) -> bool:
        with self._lock:
            if generation != self._generation:
                return False
            self._sections = tuple(sections)
            self._flattened = tuple(c for section in sections for c in section.results)

        logger.debug(
            f"Published {len(sections)} sections for generation {generation}"
        )
        self.emit("results-changed")
        return False  # Don't repeat when scheduled via an idle callback
