"""
Search providers - Candidate sources queried by the orchestrator.

Each provider keeps its own data fresh and hands back snapshots.
"""

from .apps import AppProvider
from .calculator import CalculatorProvider, evaluate
from .clipboard import ClipboardProvider
from .emoji import EmojiProvider
from .extensions import ExtensionProvider
from .fallback import FallbackProvider
from .files import FileSearchProvider
from .quicklinks import QuicklinkProvider
from .system import SystemProvider

__all__ = [
    "AppProvider",
    "CalculatorProvider",
    "ClipboardProvider",
    "EmojiProvider",
    "ExtensionProvider",
    "FallbackProvider",
    "FileSearchProvider",
    "QuicklinkProvider",
    "SystemProvider",
    "evaluate",
]
