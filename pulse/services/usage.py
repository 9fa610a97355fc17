"""
Usage Store - Track how often and how recently each candidate was executed.

One record per stable id:
  {"id": <stable id>, "count": <executions>, "lastUsed": <ISO-8601>}

The whole map is kept in memory and rewritten to a single JSON file after
every execution. Updates are visible to the ranker immediately; the disk
write happens on a dedicated writer thread (last writer wins). A missing or
corrupt file simply yields an empty store.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from gi.repository import GObject
from loguru import logger

from pulse.utils.helpers import load_json, save_json


@dataclass(frozen=True)
class UsageRecord:
    """Execution statistics for a single stable id."""
    id: str
    count: int
    last_used_at: float  # Unix timestamp


def _format_timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _parse_timestamp(value) -> float:
    """Accept ISO-8601 strings or epoch seconds."""
    if isinstance(value, bool):
        raise ValueError(f"invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()
    raise ValueError(f"invalid timestamp: {value!r}")


class UsageStore(GObject.Object):
    """
    Persistent map of stable id -> usage statistics.

    Signals:
        changed: Emitted after record_execution() and reset()

    Methods:
        record_execution(stable_id): Count an execution
        recents(limit): Most recently used ids
        reset(): Forget everything
    """

    __gtype_name__ = "PulseUsageStore"

    __gsignals__ = {
        "changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, path: Path, clock: Callable[[], float] = time.time):
        super().__init__()
        self.path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()
        # Single worker: writes reach the disk in submission order
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pulse-usage")
        self._pending: Optional[Future] = None
        self._records: dict[str, UsageRecord] = self._load()
        logger.debug(f"UsageStore initialized with {len(self._records)} records from {self.path}")

    def _load(self) -> dict[str, UsageRecord]:
        """Read the JSON file; anything unreadable is dropped."""
        data = load_json(self.path, {})
        if not isinstance(data, dict):
            logger.warning(f"Ignoring usage data in {self.path}: expected an object")
            return {}

        records = {}
        for stable_id, entry in data.items():
            try:
                count = int(entry["count"])
                last_used = _parse_timestamp(entry["lastUsed"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed usage entry '{stable_id}': {e}")
                continue
            if count < 0:
                logger.warning(f"Skipping usage entry '{stable_id}' with negative count")
                continue
            records[stable_id] = UsageRecord(stable_id, count, last_used)
        return records

    def _serialize(self) -> dict:
        return {
            stable_id: {
                "id": record.id,
                "count": record.count,
                "lastUsed": _format_timestamp(record.last_used_at),
            }
            for stable_id, record in self._records.items()
        }

    def _write(self, data: dict) -> None:
        try:
            save_json(self.path, data)
        except (OSError, TypeError, ValueError):
            logger.exception(f"Failed to save usage stats to {self.path}")

    def _delete_file(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            logger.exception(f"Failed to remove usage stats at {self.path}")

    def record_execution(self, stable_id: str) -> None:
        """
        Record an execution of `stable_id`.

        The in-memory record is updated before this returns; the file
        is rewritten in the background.

        Emits:
            changed: Signal to notify listeners that data has updated
        """
        if not stable_id:
            raise ValueError("stable_id must be non-empty")

        now = self._clock()
        with self._lock:
            existing = self._records.get(stable_id)
            count = existing.count + 1 if existing else 1
            self._records[stable_id] = UsageRecord(stable_id, count, now)
            data = self._serialize()
            # Submitted under the lock so snapshots reach the writer in order
            self._pending = self._writer.submit(self._write, data)

        logger.debug(f"Recorded execution for {stable_id} (count={count})")
        self.emit("changed")

    def recents(self, limit: int) -> list[str]:
        """
        Get stable ids ordered by last use, most recent first.

        Ties keep insertion order.
        """
        if limit <= 0:
            return []
        with self._lock:
            records = list(self._records.values())
        records.sort(key=lambda r: r.last_used_at, reverse=True)
        return [r.id for r in records[:limit]]

    def get(self, stable_id: str) -> Optional[UsageRecord]:
        with self._lock:
            return self._records.get(stable_id)

    def snapshot(self) -> dict[str, UsageRecord]:
        """Consistent copy of every record."""
        with self._lock:
            return dict(self._records)

    def reset(self) -> None:
        """
        Clear all records and the backing file.

        Emits:
            changed: Signal to notify listeners
        """
        with self._lock:
            self._records = {}
            self._pending = self._writer.submit(self._delete_file)

        logger.debug("Usage stats reset")
        self.emit("changed")

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until the most recent write has reached the disk."""
        with self._lock:
            pending = self._pending
        if pending is not None:
            pending.result(timeout=timeout)

    def close(self) -> None:
        self._writer.shutdown(wait=True)
