"""
Polling file watcher for a directory of Markdown files.

Compares modification times between scans; no platform notification APIs.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from .vault import iter_markdown_files

logger = logging.getLogger(__name__)


class PollingWatcher:
    """Report Markdown files under ``root`` that were created or modified.

    The first poll records a baseline and reports nothing.
    """

    def __init__(
        self,
        root: Path,
        on_change: Callable[[Path], None],
        interval: float = 1.0,
    ):
        self.root = Path(root)
        self.interval = interval
        self._on_change = on_change
        self._snapshot: Optional[dict[Path, int]] = None

    def _scan(self) -> dict[Path, int]:
        snapshot = {}
        for path in iter_markdown_files([self.root]):
            try:
                snapshot[path] = path.stat().st_mtime_ns
            except FileNotFoundError:
                continue  # deleted since listing
        return snapshot

    def poll(self) -> list[Path]:
        """Scan once and call ``on_change`` for each changed file."""
        current = self._scan()
        previous = self._snapshot
        self._snapshot = current
        if previous is None:
            return []

        changed = [path for path, mtime in current.items() if previous.get(path) != mtime]
        for path in changed:
            logger.debug("Modified: %s", path)
            self._on_change(path)
        return changed

    def run(self, stop: threading.Event) -> None:
        """Poll every ``interval`` seconds until ``stop`` is set."""
        logger.info("Watching %s", self.root)
        if self._snapshot is None:
            self.poll()
        while not stop.wait(self.interval):
            try:
                self.poll()
            except OSError as e:
                logger.warning("Scan of %s failed: %s", self.root, e)
        logger.info("Stopped watching %s", self.root)
