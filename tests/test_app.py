"""
End-to-end tests for the wired launcher core.

Builds the full launcher against temporary data and config directories;
only the platform actions (clipboard, open, shell) are replaced.
"""

import pytest
import toml

from pulse.app import build_launcher
from pulse.utils import helpers


@pytest.fixture
def dirs(tmp_path):
    data = tmp_path / "data"
    config = tmp_path / "config"
    files = tmp_path / "files"
    config.mkdir()
    files.mkdir()
    (config / "settings.toml").write_text(toml.dumps({
        "apps": {"directories": []},
        # File lookups finish asynchronously and re-run the query; keep them out
        "files": {"roots": [str(files)], "min_query_length": 100},
        "web_search": {"name": "Kagi", "url": "https://kagi.com/search?q={query}"},
    }))
    return data, config


@pytest.fixture
def launcher(dirs, monkeypatch):
    copied = []
    monkeypatch.setattr(helpers, "copy_to_clipboard", copied.append)
    data, config = dirs
    launcher = build_launcher(data_path=data, config_path=config, scan_apps=False)
    launcher.copied = copied
    yield launcher
    launcher.shutdown()


class TestLauncher:
    """Test the launcher from query to execution."""

    def test_settings_loaded_from_config_dir(self, launcher):
        assert launcher.settings["web_search"]["name"] == "Kagi"
        assert launcher.settings["launcher"]["recents_limit"] == 5

    def test_calculator_suggestion(self, launcher):
        launcher.orchestrator.search("2+2").result(timeout=5)

        sections = launcher.orchestrator.sections
        assert sections[0].title == "Suggestions"
        assert sections[0].results[0].display_name == "= 4"

    def test_run_copies_and_records(self, launcher):
        launcher.orchestrator.search("2+2").result(timeout=5)
        answer = launcher.orchestrator.flattened_results[0]

        hidden = []
        launcher.execution_sink.connect("hide-launcher", lambda _: hidden.append(True))
        launcher.orchestrator.run(answer)
        launcher.usage_store.flush(timeout=5)

        assert launcher.copied == ["4"]
        assert hidden == [True]
        assert launcher.usage_store.get("calc.2+2").count == 1
        assert launcher.usage_store.path.exists()

    def test_empty_query_shows_history_views(self, launcher):
        launcher.clipboard.push("copied text")
        launcher.orchestrator.search("")

        titles = [s.title for s in launcher.orchestrator.sections]
        assert titles == ["Emojis", "Clipboard"]
        assert "Applications" not in titles

    def test_fallback_uses_configured_engine(self, launcher):
        launcher.orchestrator.search("zzqqxx").result(timeout=5)

        [suggestions] = launcher.orchestrator.sections
        assert suggestions.title == "Suggestions"
        assert [c.stable_id for c in suggestions.results] == ["fallback.web", "fallback.quicklink"]
        web = next(c for c in suggestions.results if c.stable_id == "fallback.web")
        assert web.payload == "https://kagi.com/search?q=zzqqxx"

    def test_sample_extension_is_searchable(self, launcher):
        launcher.orchestrator.search("hello").result(timeout=5)
        names = [c.display_name for c in launcher.orchestrator.flattened_results]
        assert "Hello World" in names
