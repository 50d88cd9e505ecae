"""Per-turn countdown clock driven by a frame scheduler."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import IntEnum, auto

from reactive_chess.core.enums import Color
from reactive_chess.engine.interfaces import IScheduler

_LOGGER = logging.getLogger(__name__)


class ClockPhase(IntEnum):
    """Clock state machine phases."""

    IDLE = auto()
    RUNNING = auto()
    STOPPED = auto()  # terminal


class CountdownClock:
    """Counts down the side to move, one scheduler frame at a time.

    Remaining time is not stored here: it is read and written through
    *read*/*write* so that it lives in the owning state object.  A negative
    value means the side is untimed.

    Args:
        scheduler: A scheduler, or a zero-argument factory called the
            first time a tick is scheduled.
        read: Returns the remaining seconds of a side.
        write: Stores the remaining seconds of a side.
        now: Monotonic time source in seconds.
    """

    __slots__ = (
        "_scheduler",
        "_scheduler_factory",
        "_read",
        "_write",
        "_now",
        "_phase",
        "_active_color",
        "_last_tick",
        "_handle",
    )

    def __init__(
        self,
        scheduler: IScheduler | Callable[[], IScheduler],
        read: Callable[[Color], float],
        write: Callable[[Color, float], None],
        *,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(scheduler, IScheduler):
            self._scheduler: IScheduler | None = scheduler
            self._scheduler_factory: Callable[[], IScheduler] | None = None
        else:
            self._scheduler = None
            self._scheduler_factory = scheduler
        self._read = read
        self._write = write
        self._now = now
        self._phase = ClockPhase.IDLE
        self._active_color: Color | None = None
        self._last_tick = 0.0
        self._handle: int | None = None

    # ── Public API ───────────────────────────────────────────────────────

    def start(self, color: Color) -> None:
        """Count down *color*, superseding any running countdown."""
        if self._phase is ClockPhase.STOPPED:
            return
        self._cancel()
        self._phase = ClockPhase.RUNNING
        self._active_color = color
        self._last_tick = self._now()
        _LOGGER.debug("Clock running for %s", color)
        self._schedule()

    def stop(self) -> None:
        """Stop for good; later :meth:`start` calls are ignored."""
        if self._phase is ClockPhase.STOPPED:
            return
        self._cancel()
        self._phase = ClockPhase.STOPPED
        _LOGGER.debug("Clock stopped")

    @property
    def phase(self) -> ClockPhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is ClockPhase.RUNNING

    @property
    def active_color(self) -> Color | None:
        return self._active_color

    # ── Internal ─────────────────────────────────────────────────────────

    def _scheduler_instance(self) -> IScheduler:
        if self._scheduler is None:
            assert self._scheduler_factory is not None
            self._scheduler = self._scheduler_factory()
        return self._scheduler

    def _schedule(self) -> None:
        self._handle = self._scheduler_instance().schedule(self._tick)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._scheduler_instance().cancel(self._handle)
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        color = self._active_color
        if self._phase is not ClockPhase.RUNNING or color is None:
            return

        now = self._now()
        elapsed = now - self._last_tick
        self._last_tick = now

        remaining = self._read(color)
        if remaining <= 0:
            return

        remaining = max(0.0, remaining - elapsed)
        self._write(color, remaining)
        if remaining > 0 and self._phase is ClockPhase.RUNNING and self._handle is None:
            self._schedule()
