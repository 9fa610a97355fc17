# Pulse Utilities Package
"""
Shared utility functions and helpers for the Pulse launcher core.
"""

from .helpers import copy_to_clipboard, load_settings, open_target, run_shell

__all__ = ["copy_to_clipboard", "load_settings", "open_target", "run_shell"]
