"""Frame scheduler running callbacks on the Qt event loop."""

from __future__ import annotations

import itertools
from collections.abc import Callable

from PyQt6.QtCore import QObject, QTimer

from reactive_chess.engine.interfaces import IScheduler

FRAME_INTERVAL_MS = 16


class QtFrameScheduler(IScheduler):
    """One single-shot :class:`QTimer` per scheduled callback.

    A QApplication (or QCoreApplication) event loop must be running for
    callbacks to fire.
    """

    __slots__ = ("_interval_ms", "_parent", "_timers", "_ids")

    def __init__(
        self,
        interval_ms: int = FRAME_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        self._interval_ms = interval_ms
        self._parent = parent
        self._timers: dict[int, QTimer] = {}
        self._ids = itertools.count(1)

    def schedule(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(self._interval_ms)
        timer.timeout.connect(lambda: self._fire(handle, callback))
        self._timers[handle] = timer
        timer.start()
        return handle

    def cancel(self, handle: int) -> None:
        timer = self._timers.pop(handle, None)
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()

    @property
    def pending(self) -> int:
        return len(self._timers)

    def _fire(self, handle: int, callback: Callable[[], None]) -> None:
        timer = self._timers.pop(handle, None)
        if timer is None:
            return
        timer.deleteLater()
        callback()
