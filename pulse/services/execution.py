"""
Execution Sink - Perform a chosen candidate's action and record its use.

A candidate's own `invoke` wins; otherwise the action follows its kind:
  - APP:           launch the application
  - SYSTEM_ACTION: run its shell command
  - CALCULATOR, CLIPBOARD, EMOJI, SNIPPET: copy the payload to the clipboard
  - PLUGIN:        run the extension script, copy its output
  - FILE:          open the file or folder (reveal=True shows it instead)
  - QUICKLINK:     open the URL, optionally with a specific application

Every execution is recorded in the usage store and followed by the
"hide-launcher" signal.
"""

import sys
from typing import Optional

from gi.repository import Gio, GObject
from loguru import logger

from pulse.search.provider import Candidate, Kind
from pulse.search.providers.extensions import run_extension
from pulse.services.usage import UsageStore
from pulse.utils import helpers


def _desktop_app_info(candidate: Candidate) -> Optional[Gio.DesktopAppInfo]:
    """Look the entry up by desktop id, else load it from its file."""
    return (
        Gio.DesktopAppInfo.new(candidate.stable_id)
        or Gio.DesktopAppInfo.new_from_filename(candidate.payload)
    )


def launch_app(candidate: Candidate) -> None:
    """Launch a .desktop entry through Gio, or open an .app bundle."""
    path = candidate.payload
    if path.endswith(".desktop") and sys.platform != "darwin":
        app_info = _desktop_app_info(candidate)
        if app_info is None:
            logger.warning(f"No application found for {candidate.stable_id} ({path})")
            return
        app_info.launch([], None)
    else:
        helpers.open_target(path)


class ExecutionSink(GObject.Object):
    """
    Runs candidates and feeds the usage store.

    Signals:
        hide-launcher: Emitted after each execution so the UI can close
    """

    __gtype_name__ = "PulseExecutionSink"

    __gsignals__ = {
        "hide-launcher": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, usage_store: UsageStore):
        super().__init__()
        self.usage_store = usage_store

    def execute(self, candidate: Candidate, reveal: bool = False) -> None:
        """
        Perform the candidate's action, then record the execution.

        Args:
            candidate: The chosen result
            reveal: For files, show them in the file manager instead of opening
        """
        try:
            self._perform(candidate, reveal)
        except Exception:
            logger.exception(f"Action for '{candidate.display_name}' ({candidate.stable_id}) failed")

        self.usage_store.record_execution(candidate.stable_id)
        self.emit("hide-launcher")

    def _perform(self, candidate: Candidate, reveal: bool) -> None:
        if candidate.invoke is not None:
            candidate.invoke()
            return

        kind = candidate.kind
        if kind is Kind.APP:
            launch_app(candidate)
        elif kind is Kind.SYSTEM_ACTION:
            helpers.run_shell(candidate.payload)
        elif kind in (Kind.CALCULATOR, Kind.CLIPBOARD, Kind.EMOJI, Kind.SNIPPET):
            helpers.copy_to_clipboard(candidate.payload)
        elif kind is Kind.PLUGIN:
            output = run_extension(candidate.payload)
            if output:
                helpers.copy_to_clipboard(output)
        elif kind is Kind.FILE:
            if reveal:
                helpers.reveal_in_file_manager(candidate.payload)
            else:
                helpers.open_target(candidate.payload)
        elif kind is Kind.QUICKLINK:
            helpers.open_target(candidate.payload, app=candidate.detail)
        else:
            raise ValueError(f"Unhandled candidate kind: {kind}")
