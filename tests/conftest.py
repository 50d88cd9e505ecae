"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator

import pytest

from reactive_chess.engine.interfaces import IScheduler

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"


class ManualScheduler(IScheduler):
    """Scheduler whose frames are advanced by the test."""

    def __init__(self) -> None:
        self.callbacks: dict[int, Callable[[], None]] = {}
        self.cancelled: list[int] = []
        self._next = 0

    def schedule(self, callback: Callable[[], None]) -> int:
        self._next += 1
        self.callbacks[self._next] = callback
        return self._next

    def cancel(self, handle: int) -> None:
        if self.callbacks.pop(handle, None) is not None:
            self.cancelled.append(handle)

    @property
    def pending(self) -> int:
        return len(self.callbacks)

    def run_frame(self) -> int:
        """Fire every callback pending at call time; returns how many ran."""
        due = list(self.callbacks.items())
        self.callbacks.clear()
        for _, callback in due:
            callback()
        return len(due)


class FakeTime:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QApplication for Qt tests."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()
