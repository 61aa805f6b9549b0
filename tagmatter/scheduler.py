"""
Debounced, non-reentrant sync scheduling.

Editors save often, and every save of a watched file is a modification.
The coordinator turns a burst of modifications into one sync per document:

- schedule() (re)starts a per-document delay timer; only the last one fires.
- sync_now() refuses to run while the same document is in flight, and
  keeps the document marked busy for a short cooldown after it finishes,
  so the write it just made is not taken for a new external edit.

The engine call itself is synchronous; only the waiting uses timers.
"""

import logging
import threading
from typing import Callable, Optional

from .config import Settings
from .protocol import DocumentSource
from .types import BUSY, SyncOutcome
from .vault import sync_file

logger = logging.getLogger(__name__)

TimerFactory = Callable[..., threading.Timer]


class SyncCoordinator:
    """Per-document mutual exclusion plus a cancellable delayed-task queue."""

    def __init__(
        self,
        source: DocumentSource,
        settings: Optional[Settings] = None,
        *,
        delay: Optional[float] = None,
        cooldown: Optional[float] = None,
        on_synced: Optional[Callable[[SyncOutcome], None]] = None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        """
        Args:
            source: Where documents are read from and written to
            settings: Sync settings (lowercase flag, default delays)
            delay: Debounce delay in seconds (default: settings.debounce_seconds)
            cooldown: Busy period after a sync completes (default:
                settings.cooldown_seconds)
            on_synced: Called with the outcome of every scheduled sync
            timer_factory: Creates delayed tasks; threading.Timer signature
        """
        self._source = source
        self._settings = settings or Settings()
        self._delay = self._settings.debounce_seconds if delay is None else delay
        self._cooldown = self._settings.cooldown_seconds if cooldown is None else cooldown
        self._on_synced = on_synced
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        # doc_id -> (generation, timer) for the one pending delayed sync
        self._pending: dict[str, tuple[int, threading.Timer]] = {}
        self._generation = 0
        self._busy: set[str] = set()
        self._cooldowns: dict[str, threading.Timer] = {}
        self._closed = False

    # -- Delayed syncs --

    def schedule(self, doc_id: str) -> None:
        """Sync ``doc_id`` after the debounce delay, replacing any pending sync."""
        with self._lock:
            if self._closed:
                raise RuntimeError("SyncCoordinator is closed")
            previous = self._pending.pop(doc_id, None)
            if previous is not None:
                previous[1].cancel()
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._delay, self._fire, args=(doc_id, generation))
            timer.daemon = True
            self._pending[doc_id] = (generation, timer)
        timer.start()
        logger.debug("Scheduled sync of %s in %.2fs", doc_id, self._delay)

    def cancel(self, doc_id: str) -> bool:
        """Cancel the pending sync of ``doc_id``. Returns True if one was pending."""
        with self._lock:
            entry = self._pending.pop(doc_id, None)
        if entry is None:
            return False
        entry[1].cancel()
        return True

    def pending(self) -> list[str]:
        """Ids with a delayed sync waiting to fire."""
        with self._lock:
            return sorted(self._pending)

    def _fire(self, doc_id: str, generation: int) -> None:
        with self._lock:
            entry = self._pending.get(doc_id)
            if entry is None or entry[0] != generation:
                return  # superseded or cancelled
            del self._pending[doc_id]
        try:
            outcome = self.sync_now(doc_id)
            if self._on_synced is not None:
                self._on_synced(outcome)
        except Exception as e:
            logger.exception("Scheduled sync of %s failed: %s", doc_id, e)

    # -- Immediate syncs --

    def is_busy(self, doc_id: str) -> bool:
        """True while ``doc_id`` is syncing or cooling down."""
        with self._lock:
            return doc_id in self._busy

    def sync_now(self, doc_id: str) -> SyncOutcome:
        """Sync ``doc_id`` now unless it is already in flight or cooling down."""
        with self._lock:
            if doc_id in self._busy:
                logger.debug("Skipping %s: sync in progress", doc_id)
                return SyncOutcome(id=doc_id, status=BUSY)
            self._busy.add(doc_id)
        try:
            return sync_file(self._source, doc_id, self._settings.lowercase_tags)
        finally:
            self._release_later(doc_id)

    def _release_later(self, doc_id: str) -> None:
        with self._lock:
            if self._cooldown > 0 and not self._closed:
                timer = self._timer_factory(self._cooldown, self._release, args=(doc_id,))
                timer.daemon = True
                self._cooldowns[doc_id] = timer
            else:
                self._busy.discard(doc_id)
                return
        timer.start()

    def _release(self, doc_id: str) -> None:
        with self._lock:
            self._busy.discard(doc_id)
            self._cooldowns.pop(doc_id, None)

    # -- Lifecycle --

    def close(self) -> None:
        """Cancel every pending sync and cooldown."""
        with self._lock:
            self._closed = True
            timers = [timer for _, timer in self._pending.values()]
            timers.extend(self._cooldowns.values())
            self._pending.clear()
            self._cooldowns.clear()
            self._busy.clear()
        for timer in timers:
            timer.cancel()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
