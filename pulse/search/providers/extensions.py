"""
Extension Provider - User scripts exposed as launcher commands.

Any file in the extensions directory whose first lines carry Pulse
metadata becomes a command:

    #!/bin/bash
    # @pulse.title: Hello World
    # @pulse.command: hello

Running an extension executes the script (interpreter chosen by suffix)
and copies its output to the clipboard.
"""

import os
import subprocess
from pathlib import Path
from typing import Optional

from loguru import logger

from pulse.search.fuzzy import fuzzy_match
from pulse.search.provider import Candidate, Kind, SourceProvider

HEADER_LINES = 10
RUN_TIMEOUT = 30

SAMPLE_EXTENSION = """#!/bin/bash

# @pulse.title: Hello World
# @pulse.command: hello
# @pulse.icon: 👋

echo "Hello from Pulse Extension!"
"""

INTERPRETERS = {
    ".sh": ["/bin/bash"],
    ".py": ["python3"],
    ".js": ["node"],
}


def parse_metadata(path: Path) -> dict[str, str]:
    """Read @pulse.<key>: <value> pairs from the first lines of a script."""
    metadata = {}
    try:
        with open(path, encoding="utf-8") as f:
            for _, line in zip(range(HEADER_LINES), f):
                marker = line.find("@pulse.")
                if marker < 0 or ":" not in line[marker:]:
                    continue
                key, _, value = line[marker + len("@pulse."):].partition(":")
                metadata[key.strip()] = value.strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping unreadable extension {path}: {e}")
        return {}
    return metadata


def run_extension(path: str) -> Optional[str]:
    """
    Execute an extension script.

    Returns:
        Its trimmed output, or None if it failed or printed nothing
    """
    command = INTERPRETERS.get(Path(path).suffix, []) + [path]
    try:
        completed = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=RUN_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired):
        logger.exception(f"Failed to run extension {path}")
        return None

    output = completed.stdout.strip()
    if not output:
        logger.debug(f"Extension {path} ran but output was empty")
        return None
    return output


class ExtensionProvider(SourceProvider):
    """Scripts from the extensions directory."""

    __gtype_name__ = "PulseExtensionProvider"

    name = "extensions"
    section = "Extensions"

    def __init__(self, directory: Path, create_sample: bool = True):
        super().__init__()
        self.directory = Path(directory)
        self._extensions: tuple[Candidate, ...] = ()
        if create_sample:
            self._create_sample()
        self.scan()

    def _create_sample(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            if any(self.directory.iterdir()):
                return
            sample = self.directory / "hello.sh"
            sample.write_text(SAMPLE_EXTENSION, encoding="utf-8")
            os.chmod(sample, 0o755)
        except OSError:
            logger.exception(f"Could not create sample extension in {self.directory}")

    def scan(self) -> None:
        """Rebuild the extension list from disk."""
        found = []
        try:
            paths = sorted(p for p in self.directory.iterdir() if p.is_file())
        except OSError:
            paths = []

        for path in paths:
            metadata = parse_metadata(path)
            title = metadata.get("title")
            command = metadata.get("command")
            if not title or not command:
                continue
            found.append(Candidate(
                stable_id=f"ext_{command}",
                display_name=title,
                payload=str(path),
                kind=Kind.PLUGIN,
                subtitle=command,
                icon=metadata.get("icon", "application-x-executable"),
            ))

        self._extensions = tuple(found)
        logger.debug(f"Loaded {len(found)} extensions from {self.directory}")
        self.emit("changed")

    def snapshot(self) -> list[Candidate]:
        return list(self._extensions)

    def search(self, query: str) -> list[Candidate]:
        # Match the title or the command keyword
        return [
            c for c in self.snapshot()
            if fuzzy_match(c.display_name, query) or fuzzy_match(c.subtitle or "", query)
        ]
