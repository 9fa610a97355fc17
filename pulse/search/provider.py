"""
Provider contract - The candidate model and the base class every source implements.

Each provider owns its backing collection and exposes a read-only
snapshot of it. The orchestrator asks each provider to search the
snapshot for the current query and groups the results by section.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from gi.repository import GObject

from pulse.search.fuzzy import fuzzy_match


class Kind(Enum):
    """What a candidate is; decides its default action."""
    APP = "app"
    SYSTEM_ACTION = "system"
    CALCULATOR = "calculator"
    PLUGIN = "plugin"
    FILE = "file"
    CLIPBOARD = "clipboard"
    SNIPPET = "snippet"
    QUICKLINK = "quicklink"
    EMOJI = "emoji"


@dataclass(eq=False)
class Candidate:
    """A single selectable search result, before scoring."""
    stable_id: str
    display_name: str
    payload: str = ""
    kind: Kind = Kind.APP
    is_container: bool = False
    subtitle: Optional[str] = None
    detail: Optional[str] = None
    icon: str = "application-x-executable"
    invoke: Optional[Callable[[], None]] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.stable_id:
            raise ValueError("Candidate.stable_id must be non-empty")

    # Identity is the stable id alone
    def __eq__(self, other):
        if not isinstance(other, Candidate):
            return NotImplemented
        return self.stable_id == other.stable_id

    def __hash__(self):
        return hash(self.stable_id)


@dataclass
class Section:
    """A named, ordered group of results."""
    title: str
    results: list[Candidate] = field(default_factory=list)


class SourceProvider(GObject.Object):
    """
    Base class for all candidate sources.

    Signals:
        changed: Emitted when the backing collection is refreshed
    """

    __gtype_name__ = "PulseSourceProvider"

    __gsignals__ = {
        "changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    #: Section title the provider's candidates are grouped under
    section: str = "Applications"

    #: Whether search("") yields anything (a "frequently used" view)
    shows_on_empty_query: bool = False

    def __init__(self):
        super().__init__()

    @property
    def name(self) -> str:
        """Provider identifier, used in logs."""
        raise NotImplementedError

    def snapshot(self) -> list[Candidate]:
        """Latest materialized candidates. Must not block."""
        raise NotImplementedError

    def search(self, query: str) -> list[Candidate]:
        """Candidates whose display name fuzzy-matches the query."""
        return [c for c in self.snapshot() if fuzzy_match(c.display_name, query)]
