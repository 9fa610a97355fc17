"""
Shared test fixtures for the Pulse test suite.

Provides usage stores, settings, commands and quicklinks files that use
real file I/O (no mocking of the filesystem), plus a controllable clock.
"""

import json

import pytest
import toml

from pulse.search.provider import Candidate, Kind, SourceProvider
from pulse.services.usage import UsageStore

# 2023-11-14T22:13:20+00:00
EPOCH = 1_700_000_000.0


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, now: float = EPOCH):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticProvider(SourceProvider):
    """Provider over a fixed list of candidates."""

    def __init__(self, name, candidates=(), section="Applications", shows_on_empty_query=False):
        super().__init__()
        self._name = name
        self._candidates = list(candidates)
        self.section = section
        self.shows_on_empty_query = shows_on_empty_query

    @property
    def name(self):
        return self._name

    def snapshot(self):
        return list(self._candidates)

    def set_candidates(self, candidates):
        self._candidates = list(candidates)
        self.emit("changed")


def make_app(stable_id, name, kind=Kind.APP, **kwargs):
    return Candidate(stable_id=stable_id, display_name=name, kind=kind, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path, clock):
    """A UsageStore backed by a real JSON file in tmp_path."""
    usage = UsageStore(tmp_path / "ranking_data.json", clock=clock)
    yield usage
    usage.close()


@pytest.fixture
def tmp_usage(tmp_path):
    """Create a real usage JSON file mixing ISO-8601 and epoch timestamps."""
    usage_path = tmp_path / "usage.json"
    data = {
        "firefox.desktop": {
            "id": "firefox.desktop",
            "count": 5,
            "lastUsed": "2023-11-14T22:13:20+00:00",
        },
        "code.desktop": {
            "id": "code.desktop",
            "count": 2,
            "lastUsed": EPOCH - 3600,
        },
    }
    usage_path.write_text(json.dumps(data, indent=2))
    return usage_path


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file overriding a few sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "launcher": {"recents_limit": 3},
        "ranking": {"exact_match": 200.0, "penalty_markers": ["Old"]},
        "web_search": {"name": "Kagi", "url": "https://kagi.com/search?q={query}"},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def tmp_commands(tmp_path):
    """Create a real commands TOML file with test entries."""
    commands_path = tmp_path / "commands.toml"
    data = {
        "commands": {
            "Lock Screen": {
                "description": "Lock screen",
                "exec": "hyprlock",
                "icon": "system-lock-screen",
            },
            "Reload Compositor": {
                "exec": "hyprctl reload",
            },
            "Broken": {
                "description": "No exec field",
            },
        }
    }
    commands_path.write_text(toml.dumps(data))
    return commands_path


@pytest.fixture
def tmp_quicklinks(tmp_path):
    """Create a real quicklinks JSON file with test entries."""
    quicklinks_path = tmp_path / "quicklinks.json"
    data = {
        "quicklinks": [
            {
                "id": "gh",
                "name": "Search GitHub",
                "link": "https://github.com/search?q={argument}",
                "icon": "globe",
                "open_with": None,
            },
            {
                "id": "paste",
                "name": "Translate Clipboard",
                "link": "https://translate.example.com/?text={clipboard}",
                "icon": "link",
                "open_with": "Firefox",
            },
        ]
    }
    quicklinks_path.write_text(json.dumps(data, indent=2))
    return quicklinks_path
