"""
Shared pytest fixtures for tagmatter tests.

Provides an in-memory document source and manually fired timers so the
scheduling tests never sleep.
"""

from pathlib import Path

import pytest


class MemoryDocumentSource:
    """Dict-backed document source that records reads and writes."""

    def __init__(self, docs: dict[str, str] | None = None):
        self.docs = dict(docs or {})
        self.reads: list[str] = []
        self.writes: list[tuple[str, str]] = []
        self.fail_read: set[str] = set()
        self.fail_write: set[str] = set()

    def read(self, id: str) -> str:
        self.reads.append(id)
        if id in self.fail_read:
            raise OSError(f"read failed: {id}")
        if id not in self.docs:
            raise FileNotFoundError(f"File not found: {id}")
        return self.docs[id]

    def write(self, id: str, text: str) -> None:
        if id in self.fail_write:
            raise OSError(f"write failed: {id}")
        self.writes.append((id, text))
        self.docs[id] = text


class FakeTimer:
    """Stands in for threading.Timer; runs only when fire() is called."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.cancelled or self.fired:
            return
        self.fired = True
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    """Timer factory that keeps every timer it creates."""

    def __init__(self):
        self.created: list[FakeTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args, kwargs)
        self.created.append(timer)
        return timer

    def live(self, interval: float | None = None) -> list[FakeTimer]:
        """Started timers that have neither fired nor been cancelled."""
        return [
            t for t in self.created
            if t.started and not t.cancelled and not t.fired
            and (interval is None or t.interval == interval)
        ]


@pytest.fixture
def memory_source():
    """Create an empty MemoryDocumentSource."""
    return MemoryDocumentSource()


@pytest.fixture
def fake_timers():
    """Create a FakeTimerFactory."""
    return FakeTimerFactory()


@pytest.fixture
def config_dir(tmp_path, monkeypatch) -> Path:
    """Isolated config directory, exported as TAGMATTER_CONFIG_DIR."""
    path = tmp_path / "config"
    monkeypatch.setenv("TAGMATTER_CONFIG_DIR", str(path))
    return path
