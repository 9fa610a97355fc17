"""
System Provider - Power and session actions.

Built-in actions (Sleep, Restart, Shut Down, Lock Screen, Empty Trash) run
a shell command. They can be overridden or extended in commands.toml:

    [commands."Lock Screen"]
    description = "Lock screen"
    exec = "hyprlock"
    icon = "system-lock-screen"

    [commands.Reload]
    exec = "hyprctl reload"

Entries without an "exec" field are skipped.
"""

import sys
from pathlib import Path
from typing import Optional

import toml
from loguru import logger

from pulse.search.provider import Candidate, Kind, SourceProvider

if sys.platform == "darwin":
    DEFAULT_COMMANDS = {
        "Sleep": {"exec": "pmset sleepnow", "icon": "moon.fill"},
        "Restart": {"exec": "osascript -e 'tell application \"Finder\" to restart'", "icon": "restart.circle.fill"},
        "Shut Down": {"exec": "osascript -e 'tell application \"Finder\" to shut down'", "icon": "power.circle.fill"},
        "Lock Screen": {"exec": "pmset displaysleepnow", "icon": "lock.fill"},
        "Empty Trash": {"exec": "osascript -e 'tell application \"Finder\" to empty trash'", "icon": "trash.fill"},
    }
else:
    DEFAULT_COMMANDS = {
        "Sleep": {"exec": "systemctl suspend", "icon": "system-suspend"},
        "Restart": {"exec": "systemctl reboot", "icon": "system-reboot"},
        "Shut Down": {"exec": "systemctl poweroff", "icon": "system-shutdown"},
        "Lock Screen": {"exec": "loginctl lock-session", "icon": "system-lock-screen"},
        "Empty Trash": {"exec": "gio trash --empty", "icon": "user-trash-full"},
    }


def system_stable_id(name: str) -> str:
    return "system." + name.lower().replace(" ", ".")


def load_commands(commands_path: Optional[Path]) -> dict:
    """Load command overrides from a TOML file; malformed entries are dropped."""
    if commands_path is None or not commands_path.exists():
        return {}

    try:
        data = toml.load(commands_path)
    except (OSError, toml.TomlDecodeError):
        logger.exception(f"Failed to load commands from {commands_path}")
        return {}

    commands = data.get("commands", {})
    if not isinstance(commands, dict):
        logger.warning(f"Ignoring [commands] in {commands_path}: expected a table")
        return {}

    for name, cmd in list(commands.items()):
        if not isinstance(cmd, dict) or "exec" not in cmd:
            logger.warning(f"Skipping malformed command '{name}': missing 'exec' field")
            del commands[name]
    return commands


class SystemProvider(SourceProvider):
    """System actions, matched by name."""

    __gtype_name__ = "PulseSystemProvider"

    name = "system"
    section = "System"

    def __init__(self, commands_path: Optional[Path] = None):
        super().__init__()
        self.commands_path = commands_path
        self._commands: tuple[Candidate, ...] = ()
        self.reload()

    def reload(self) -> None:
        """Re-read commands.toml and rebuild the action list."""
        commands = {name: dict(cmd) for name, cmd in DEFAULT_COMMANDS.items()}
        commands.update(load_commands(self.commands_path))
        self._commands = tuple(
            self._command_to_candidate(name, cmd) for name, cmd in commands.items()
        )
        self.emit("changed")

    def snapshot(self) -> list[Candidate]:
        return list(self._commands)

    def _command_to_candidate(self, name: str, cmd: dict) -> Candidate:
        return Candidate(
            stable_id=system_stable_id(name),
            display_name=name,
            payload=cmd["exec"],
            kind=Kind.SYSTEM_ACTION,
            subtitle=cmd.get("description") or None,
            icon=cmd.get("icon", "utilities-terminal"),
        )
