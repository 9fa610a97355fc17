"""
App Provider - Installed applications.

Scans for applications on a background thread and keeps the latest list
as its snapshot. Understands:
  - XDG .desktop entries, read through Gio.DesktopAppInfo
    (stable id: the desktop file id, e.g. "firefox.desktop")
  - macOS .app bundles (stable id: CFBundleIdentifier, else the bundle path)

With no directories configured, the system application list from
Gio.AppInfo.get_all() is used.
"""

import plistlib
import threading
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from gi.repository import Gio
from loguru import logger

from pulse.search.provider import Candidate, Kind, SourceProvider


def _app_info_to_candidate(app: Gio.AppInfo, fallback_id: Optional[str] = None) -> Optional[Candidate]:
    """Convert a Gio app info; entries hidden from menus are skipped."""
    if not app.should_show():
        return None
    if isinstance(app, Gio.DesktopAppInfo) and app.get_is_hidden():
        return None

    stable_id = app.get_id() or fallback_id
    name = app.get_name()
    if not stable_id or not name:
        return None

    icon = app.get_icon()
    filename = app.get_filename() if isinstance(app, Gio.DesktopAppInfo) else None
    return Candidate(
        stable_id=stable_id,
        display_name=name,
        payload=filename or stable_id,
        kind=Kind.APP,
        subtitle=app.get_description() or None,
        detail=app.get_commandline() or None,
        icon=icon.to_string() if icon is not None else "application-x-executable",
    )


def _desktop_entry(path: Path) -> Optional[Candidate]:
    """Load a .desktop file; non-applications and unusable entries yield None."""
    app = Gio.DesktopAppInfo.new_from_filename(str(path))
    if app is None:
        logger.debug(f"Skipping desktop entry {path}")
        return None
    return _app_info_to_candidate(app, fallback_id=path.name)


def _app_bundle(path: Path) -> Candidate:
    stable_id = str(path)
    info_path = path / "Contents" / "Info.plist"
    if info_path.exists():
        try:
            with open(info_path, "rb") as f:
                info = plistlib.load(f)
            stable_id = info.get("CFBundleIdentifier") or stable_id
        except (OSError, plistlib.InvalidFileException, ValueError) as e:
            logger.debug(f"Could not read {info_path}: {e}")

    return Candidate(
        stable_id=stable_id,
        display_name=path.stem,
        payload=str(path),
        kind=Kind.APP,
        icon=str(path),
    )


def scan_applications(directories: Iterable[Path]) -> list[Candidate]:
    """
    Collect applications from the given directories.

    Missing directories are skipped. The first entry for a stable id wins,
    so earlier directories take precedence. With no directories, the
    system application list is used instead.
    """
    directories = list(directories)
    if directories:
        candidates = _scan_directories(directories)
    else:
        candidates = (_app_info_to_candidate(app) for app in Gio.AppInfo.get_all())

    found: dict[str, Candidate] = {}
    for candidate in candidates:
        if candidate is not None and candidate.stable_id not in found:
            found[candidate.stable_id] = candidate
    return list(found.values())


def _scan_directories(directories: list[Path]) -> Iterator[Optional[Candidate]]:
    for directory in directories:
        directory = Path(directory).expanduser()
        try:
            entries = sorted(directory.iterdir())
        except OSError:
            continue

        for item in entries:
            if item.suffix == ".desktop" and item.is_file():
                yield _desktop_entry(item)
            elif item.suffix == ".app" and item.is_dir():
                yield _app_bundle(item)


class AppProvider(SourceProvider):
    """Search installed applications."""

    __gtype_name__ = "PulseAppProvider"

    name = "apps"
    section = "Applications"

    def __init__(
        self,
        directories: Iterable[Path] = (),
        scanner: Callable[[Iterable[Path]], list[Candidate]] = scan_applications,
    ):
        super().__init__()
        self.directories = [Path(d) for d in directories]
        self._scanner = scanner
        self._apps: tuple[Candidate, ...] = ()
        self._scan_lock = threading.Lock()
        self._scanning = False

    def snapshot(self) -> list[Candidate]:
        return list(self._apps)

    def set_apps(self, apps: Iterable[Candidate]) -> None:
        """Replace the snapshot directly (e.g. from a platform app service)."""
        self._apps = tuple(apps)
        self.emit("changed")

    def refresh(self) -> None:
        """Rescan synchronously and publish the new list."""
        try:
            apps = self._scanner(self.directories)
        except Exception:
            logger.exception("Application scan failed")
            return

        logger.debug(f"Found {len(apps)} applications")
        self.set_apps(apps)

    def refresh_async(self) -> Optional[threading.Thread]:
        """Rescan on a background thread; a scan already running is not doubled."""
        with self._scan_lock:
            if self._scanning:
                return None
            self._scanning = True

        def _run():
            try:
                self.refresh()
            finally:
                with self._scan_lock:
                    self._scanning = False

        thread = threading.Thread(target=_run, name="pulse-app-scan", daemon=True)
        thread.start()
        return thread
