"""
Search package - Providers, ranking and the orchestrator that combines them.

Queries fan out to every registered provider; results are scored by the
ranker and grouped into ordered sections.
"""

from .fuzzy import fuzzy_match
from .orchestrator import SECTION_ORDER, SearchOrchestrator
from .provider import Candidate, Kind, Section, SourceProvider
from .ranking import Ranker, RankingWeights

__all__ = [
    "Candidate",
    "Kind",
    "Ranker",
    "RankingWeights",
    "SECTION_ORDER",
    "SearchOrchestrator",
    "Section",
    "SourceProvider",
    "fuzzy_match",
]
