"""
Helper utilities for the Pulse launcher core.

Provides common functions used across providers and services:
- Settings loading (TOML, merged over defaults)
- Data/config directory resolution (XDG)
- JSON document load/save
- Platform actions: clipboard, opening targets, shell commands
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger


MACOS_APP_DIRECTORIES = [
    "/Applications",
    "/Applications/Utilities",
    "/System/Applications",
    "/System/Applications/Utilities",
    "/System/Library/CoreServices",
    "~/Applications",
]

DEFAULT_SETTINGS: Dict[str, Any] = {
    "launcher": {
        "short_query_length": 3,
        "recents_limit": 5,
        "max_results": 30,
    },
    "ranking": {
        "exact_match": 100.0,
        "prefix_match": 50.0,
        "contains_match": 10.0,
        "usage_weight": 10.0,
        "hour_bonus": 20.0,
        "day_bonus": 10.0,
        "folder_multiplier": 1.2,
        "depth_decay": 20.0,
        "home_bias": 10.0,
        "penalty": 0.1,
        "penalty_markers": ["archive", "backup", "snapshot"],
    },
    "apps": {
        # Empty: the system application list from Gio
        "directories": MACOS_APP_DIRECTORIES if sys.platform == "darwin" else [],
    },
    "clipboard": {
        "max_items": 50,
        "frequent_items": 8,
    },
    "files": {
        "roots": ["~"],
        "min_query_length": 2,
        "max_results": 100,
        "max_depth": 6,
    },
    "emoji": {
        "frequent_items": 16,
    },
    "web_search": {
        "name": "Google",
        "url": "https://www.google.com/search?q={query}",
    },
}


def data_dir() -> Path:
    """
    Directory for persisted launcher state (usage stats, quicklinks, extensions).

    Returns:
        $XDG_DATA_HOME/pulse, defaulting to ~/.local/share/pulse
    """
    base = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(base) / "pulse"


def config_dir() -> Path:
    """Directory holding settings.toml and commands.toml."""
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "pulse"


def load_settings(settings_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load launcher settings from TOML file.

    Args:
        settings_path: File to read; defaults to config_dir()/settings.toml

    Returns:
        Dictionary containing settings with defaults applied
    """
    if settings_path is None:
        settings_path = config_dir() / "settings.toml"

    if not settings_path.exists():
        logger.debug(f"Settings file not found at {settings_path}, using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}")
        return _deep_merge(DEFAULT_SETTINGS, {})

    return _deep_merge(DEFAULT_SETTINGS, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = {}
    for key, value in base.items():
        result[key] = _deep_merge(value, {}) if isinstance(value, dict) else value

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json(path: Path, default: Any) -> Any:
    """
    Load a JSON document, returning `default` when missing or invalid.
    """
    if not path.exists():
        return default

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load {path}: {e}")
        return default


def save_json(path: Path, data: Any) -> None:
    """
    Atomically write a JSON document (temp file, then replace).

    Raises:
        OSError: if the directory or file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def copy_to_clipboard(text: str) -> None:
    """Copy text to the system clipboard (pbcopy on macOS, wl-copy elsewhere)."""
    command = ["pbcopy"] if sys.platform == "darwin" else ["wl-copy"]
    try:
        proc = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        proc.communicate(text.encode("utf-8"), timeout=2)
    except FileNotFoundError:
        logger.debug(f"{command[0]} not found, cannot copy to clipboard")
    except subprocess.TimeoutExpired:
        logger.warning(f"{command[0]} timed out")


def open_target(target: str, app: Optional[str] = None) -> None:
    """
    Open a file, folder or URL with the desktop's default handler.

    Args:
        target: Path or URL
        app: Optional application name to open it with (macOS `open -a`)
    """
    if sys.platform == "darwin":
        command = ["open", "-a", app, target] if app else ["open", target]
    else:
        command = [app, target] if app else ["xdg-open", target]

    try:
        subprocess.Popen(
            command,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        logger.warning(f"{command[0]} not found, cannot open {target}")


def reveal_in_file_manager(path: str) -> None:
    """Show a file in its containing folder."""
    if sys.platform == "darwin":
        command = ["open", "-R", path]
    else:
        command = ["xdg-open", str(Path(path).parent)]

    try:
        subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except FileNotFoundError:
        logger.warning(f"{command[0]} not found, cannot reveal {path}")


def run_shell(command: str) -> None:
    """Run a shell command detached from the launcher."""
    logger.debug(f"Running shell command: {command}")
    try:
        subprocess.Popen(
            command,
            shell=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError:
        logger.exception(f"Failed to execute command: {command}")
