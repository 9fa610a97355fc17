"""
Pulse Launcher - Wiring for the query core.

Builds the usage store, every provider, the ranker, the execution sink and
the orchestrator from settings, and connects them. The presentation layer
creates one Launcher and drives it:

    launcher = build_launcher()
    launcher.orchestrator.connect("results-changed", redraw)
    launcher.orchestrator.search(entry.text)
    launcher.orchestrator.run(selected)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from loguru import logger

from pulse.search.orchestrator import SearchOrchestrator
from pulse.search.providers import (
    AppProvider,
    CalculatorProvider,
    ClipboardProvider,
    EmojiProvider,
    ExtensionProvider,
    FallbackProvider,
    FileSearchProvider,
    QuicklinkProvider,
    SystemProvider,
)
from pulse.search.providers.files import walk_backend
from pulse.search.ranking import Ranker, RankingWeights
from pulse.services.execution import ExecutionSink
from pulse.services.usage import UsageStore
from pulse.utils.helpers import config_dir, data_dir, load_settings


@dataclass
class Launcher:
    """Everything the presentation layer talks to."""
    settings: Dict[str, Any]
    usage_store: UsageStore
    orchestrator: SearchOrchestrator
    execution_sink: ExecutionSink
    apps: AppProvider
    clipboard: ClipboardProvider
    quicklinks: QuicklinkProvider
    extensions: ExtensionProvider
    files: FileSearchProvider

    def shutdown(self) -> None:
        self.orchestrator.shutdown()
        self.files.shutdown()
        self.usage_store.close()


def build_launcher(
    settings: Optional[Dict[str, Any]] = None,
    data_path: Optional[Path] = None,
    config_path: Optional[Path] = None,
    dispatch: Optional[Callable] = None,
    scan_apps: bool = True,
) -> Launcher:
    """
    Create and wire all services.

    Args:
        settings: Pre-loaded settings; read from config_path otherwise
        data_path: Directory for usage stats, quicklinks and extensions
        config_path: Directory holding settings.toml and commands.toml
        dispatch: UI-thread scheduler for publishing results (e.g. GLib.idle_add)
        scan_apps: Start the background application scan immediately
    """
    data_path = Path(data_path) if data_path else data_dir()
    config_path = Path(config_path) if config_path else config_dir()
    if settings is None:
        settings = load_settings(config_path / "settings.toml")

    launcher_cfg = settings["launcher"]
    usage_store = UsageStore(data_path / "ranking_data.json")

    clipboard = ClipboardProvider(
        max_items=settings["clipboard"]["max_items"],
        frequent_items=settings["clipboard"]["frequent_items"],
    )
    quicklinks = QuicklinkProvider(
        data_path / "quicklinks.json",
        clipboard=clipboard.latest,
        search_url=settings["web_search"]["url"],
    )
    apps = AppProvider(directories=[Path(d) for d in settings["apps"]["directories"]])
    extensions = ExtensionProvider(data_path / "extensions")
    files_cfg = settings["files"]
    files = FileSearchProvider(
        walk_backend(files_cfg["roots"], max_depth=files_cfg["max_depth"]),
        min_query_length=files_cfg["min_query_length"],
        max_results=files_cfg["max_results"],
    )

    providers = [
        CalculatorProvider(),
        EmojiProvider(usage_store, frequent_items=settings["emoji"]["frequent_items"]),
        apps,
        extensions,
        quicklinks,
        SystemProvider(config_path / "commands.toml"),
        clipboard,
        files,
    ]

    execution_sink = ExecutionSink(usage_store)
    orchestrator_kwargs = {}
    if dispatch is not None:
        orchestrator_kwargs["dispatch"] = dispatch

    orchestrator = SearchOrchestrator(
        providers,
        Ranker(usage_store, RankingWeights.from_settings(settings["ranking"])),
        usage_store,
        fallback=FallbackProvider(settings["web_search"], quicklinks),
        execution_sink=execution_sink,
        short_query_length=launcher_cfg["short_query_length"],
        recents_limit=launcher_cfg["recents_limit"],
        max_results=launcher_cfg["max_results"],
        **orchestrator_kwargs,
    )

    if scan_apps:
        apps.refresh_async()

    logger.debug(f"Pulse launcher core initialized (data in {data_path})")
    return Launcher(
        settings=settings,
        usage_store=usage_store,
        orchestrator=orchestrator,
        execution_sink=execution_sink,
        apps=apps,
        clipboard=clipboard,
        quicklinks=quicklinks,
        extensions=extensions,
        files=files,
    )
