"""
File Search Provider - Files and folders by name.

The actual lookup is delegated to a backend (a metadata index, or the
simple directory walk below). Lookups run on a background thread: the
first search() for a new query returns whatever is cached, and "changed"
is emitted once the backend's results land so the orchestrator can re-run
the query.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from pulse.search.provider import Candidate, Kind, SourceProvider

SKIP_DIR_NAMES = {"node_modules", "__pycache__", ".git"}
SKIP_PATH_PARTS = ("/system/", "/private/", "/usr/", "/bin/")
SKIP_SUFFIXES = (".framework", ".tbd", ".dylib", ".a")


@dataclass(frozen=True)
class FileHit:
    """One backend result."""
    path: str
    name: str
    is_folder: bool


FileBackend = Callable[[str, int], Iterable[FileHit]]


def _is_clutter(path: str, name: str) -> bool:
    lowered = path.lower()
    if name.startswith("."):
        return True
    if "/library/" in lowered and "library/mobile documents" not in lowered:
        return True
    if any(part in lowered for part in SKIP_PATH_PARTS):
        return True
    return lowered.endswith(SKIP_SUFFIXES)


def dedupe_hits(hits: Iterable[FileHit], limit: int) -> list[FileHit]:
    """
    Drop clutter and duplicate paths; keep one folder per name.

    For folders sharing a name, a non-archive path beats an archive one,
    otherwise the shorter path wins. Folders come before files.
    """
    folders: dict[str, FileHit] = {}
    files: dict[str, FileHit] = {}

    for hit in hits:
        if _is_clutter(hit.path, hit.name):
            continue
        if not hit.is_folder:
            files.setdefault(hit.path, hit)
            continue
        if hit.path in (f.path for f in folders.values()):
            continue

        key = hit.name.lower()
        existing = folders.get(key)
        if existing is None:
            folders[key] = hit
            continue

        hit_archive = "archive" in hit.path.lower()
        existing_archive = "archive" in existing.path.lower()
        if existing_archive and not hit_archive:
            folders[key] = hit
        elif existing_archive == hit_archive and len(hit.path) < len(existing.path):
            folders[key] = hit

    return (list(folders.values()) + list(files.values()))[:limit]


def walk_backend(roots: Iterable[Path], max_depth: int = 6) -> FileBackend:
    """Backend that walks `roots` looking for names containing the query."""
    roots = [Path(r).expanduser() for r in roots]

    def search(query: str, limit: int) -> list[FileHit]:
        needle = query.lower()
        hits = []
        for root in roots:
            base_depth = len(root.parts)
            for dirpath, dirnames, filenames in os.walk(root, onerror=lambda e: None):
                depth = len(Path(dirpath).parts) - base_depth
                dirnames[:] = [
                    d for d in dirnames
                    if not d.startswith(".") and d not in SKIP_DIR_NAMES
                ]
                if depth >= max_depth:
                    dirnames[:] = []

                for name in dirnames:
                    if needle in name.lower():
                        hits.append(FileHit(os.path.join(dirpath, name), name, True))
                for name in filenames:
                    if needle in name.lower():
                        hits.append(FileHit(os.path.join(dirpath, name), name, False))

                # Over-collect so dedupe still has enough left
                if len(hits) >= limit * 4:
                    return hits
        return hits

    return search


class FileSearchProvider(SourceProvider):
    """Files and folders from a background file-search backend."""

    __gtype_name__ = "PulseFileSearchProvider"

    name = "files"
    section = "Files"

    def __init__(self, backend: FileBackend, min_query_length: int = 2, max_results: int = 100):
        super().__init__()
        self.backend = backend
        self.min_query_length = min_query_length
        self.max_results = max_results
        self._lock = threading.Lock()
        self._query = ""
        self._hits: tuple[FileHit, ...] = ()
        self._in_flight: Optional[str] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pulse-files")

    def snapshot(self) -> list[Candidate]:
        with self._lock:
            hits = self._hits
        return [self._to_candidate(hit) for hit in hits]

    def search(self, query: str) -> list[Candidate]:
        trimmed = query.strip()
        if len(trimmed) < self.min_query_length:
            return []

        with self._lock:
            cached = self._query == trimmed
            hits = self._hits
            if not cached and self._in_flight != trimmed:
                self._in_flight = trimmed
                self._executor.submit(self._lookup, trimmed)

        if not cached:
            return []
        return [self._to_candidate(hit) for hit in hits]

    def _lookup(self, query: str) -> None:
        try:
            hits = dedupe_hits(self.backend(query, self.max_results), self.max_results)
        except Exception:
            logger.exception(f"File search failed for '{query}'")
            hits = []

        with self._lock:
            # A newer query was requested meanwhile; its own lookup will publish
            if self._in_flight != query:
                return
            self._query = query
            self._hits = tuple(hits)
            self._in_flight = None

        logger.debug(f"File search for '{query}' found {len(hits)} items")
        self.emit("changed")

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _to_candidate(self, hit: FileHit) -> Candidate:
        return Candidate(
            stable_id="file_" + hit.path,
            display_name=hit.name,
            payload=hit.path,
            kind=Kind.FILE,
            is_container=hit.is_folder,
            subtitle=str(Path(hit.path).parent),
            icon="folder" if hit.is_folder else "text-x-generic",
        )
