"""
Ranking - Score a candidate for a query.

score = name tier + usage boost (+ file heuristics for FILE candidates)

Name tier (case-insensitive, against the display name):
  - exact match:     100
  - prefix match:     50
  - substring match:  10

Usage boost, from the usage store:
  - log(count + 1) * usage_weight
  - +hour_bonus if used within the last hour, else +day_bonus within a day

File heuristics:
  - depth_decay / (1 + depth), favouring shallow paths
  - home_bias / (1 + depth below home) for paths under the home directory
  - folder multiplier for containers
  - penalty multiplier for paths mentioning archive/backup/snapshot

All constants are defaults of RankingWeights and can be overridden from
the [ranking] section of settings.toml.
"""

import math
import time
from dataclasses import dataclass, field, fields
from pathlib import Path, PurePath
from typing import Callable, Optional

from pulse.search.provider import Candidate, Kind
from pulse.services.usage import UsageStore

HOUR = 3600
DAY = 24 * HOUR


@dataclass(frozen=True)
class RankingWeights:
    """Tunable ranking constants."""
    exact_match: float = 100.0
    prefix_match: float = 50.0
    contains_match: float = 10.0
    usage_weight: float = 10.0
    hour_bonus: float = 20.0
    day_bonus: float = 10.0
    folder_multiplier: float = 1.2
    depth_decay: float = 20.0
    home_bias: float = 10.0
    penalty: float = 0.1
    penalty_markers: tuple[str, ...] = field(default=("archive", "backup", "snapshot"))

    @classmethod
    def from_settings(cls, section: dict) -> "RankingWeights":
        """Build from a settings table, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in section.items() if k in known}
        if "penalty_markers" in values:
            values["penalty_markers"] = tuple(m.lower() for m in values["penalty_markers"])
        return cls(**values)


class Ranker:
    """Scores candidates from name match, usage history and path shape."""

    def __init__(
        self,
        usage_store: UsageStore,
        weights: Optional[RankingWeights] = None,
        home: Optional[Path] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.usage_store = usage_store
        self.weights = weights or RankingWeights()
        self.home = PurePath(home) if home is not None else PurePath(Path.home())
        self._clock = clock

    def score(self, candidate: Candidate, query: str) -> float:
        """Higher is better. No side effects."""
        score = self._name_score(candidate.display_name, query)
        score += self._usage_score(candidate.stable_id)

        if candidate.kind is Kind.FILE:
            score = self._apply_file_heuristics(score, candidate)

        return score

    def sort(self, candidates: list[Candidate], query: str) -> list[Candidate]:
        """Sort by descending score; equal scores keep source order."""
        scores = {id(c): self.score(c, query) for c in candidates}
        return sorted(candidates, key=lambda c: scores[id(c)], reverse=True)

    def _name_score(self, name: str, query: str) -> float:
        if not query:
            return 0.0

        name = name.lower()
        query = query.lower()
        if name == query:
            return self.weights.exact_match
        if name.startswith(query):
            return self.weights.prefix_match
        if query in name:
            return self.weights.contains_match
        return 0.0

    def _usage_score(self, stable_id: str) -> float:
        record = self.usage_store.get(stable_id)
        if record is None:
            return 0.0

        # Logarithmic so heavy use can't drown out the name match
        boost = math.log(record.count + 1) * self.weights.usage_weight

        age = self._clock() - record.last_used_at
        if age < HOUR:
            boost += self.weights.hour_bonus
        elif age < DAY:
            boost += self.weights.day_bonus

        return boost

    def _apply_file_heuristics(self, score: float, candidate: Candidate) -> float:
        path = PurePath(candidate.payload)
        depth = max(len(path.parts) - 1, 0)
        score += self.weights.depth_decay / (1 + depth)

        if path.is_relative_to(self.home):
            home_depth = len(path.relative_to(self.home).parts)
            score += self.weights.home_bias / (1 + home_depth)

        if candidate.is_container:
            score *= self.weights.folder_multiplier

        lowered = candidate.payload.lower()
        if any(marker in lowered for marker in self.weights.penalty_markers):
            score *= self.weights.penalty

        return score
