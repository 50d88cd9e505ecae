"""Tests for CountdownClock."""

from reactive_chess.core.enums import Color
from reactive_chess.game.clock import ClockPhase, CountdownClock
from reactive_chess.game.config import UNTIMED


class _Times:
    def __init__(self, white: float = 60.0, black: float = 60.0) -> None:
        self.values = {Color.WHITE: white, Color.BLACK: black}
        self.writes: list[tuple[Color, float]] = []

    def read(self, color: Color) -> float:
        return self.values[color]

    def write(self, color: Color, seconds: float) -> None:
        self.writes.append((color, seconds))
        self.values[color] = seconds


def _clock(scheduler, fake_time, times: _Times) -> CountdownClock:
    return CountdownClock(scheduler, times.read, times.write, now=fake_time)


class TestClockBasics:
    def test_initially_idle(self, scheduler, fake_time) -> None:
        clock = _clock(scheduler, fake_time, _Times())
        assert clock.phase is ClockPhase.IDLE
        assert not clock.is_running
        assert clock.active_color is None
        assert scheduler.pending == 0

    def test_start_schedules_a_tick(self, scheduler, fake_time) -> None:
        clock = _clock(scheduler, fake_time, _Times())
        clock.start(Color.WHITE)
        assert clock.is_running
        assert clock.active_color is Color.WHITE
        assert scheduler.pending == 1

    def test_tick_subtracts_elapsed_time(self, scheduler, fake_time) -> None:
        times = _Times()
        clock = _clock(scheduler, fake_time, times)
        clock.start(Color.WHITE)
        fake_time.advance(1.5)
        scheduler.run_frame()
        assert times.values[Color.WHITE] == 58.5
        assert times.values[Color.BLACK] == 60.0
        assert scheduler.pending == 1

    def test_time_is_non_increasing(self, scheduler, fake_time) -> None:
        times = _Times()
        clock = _clock(scheduler, fake_time, times)
        clock.start(Color.BLACK)
        seen = []
        for _ in range(5):
            fake_time.advance(0.25)
            scheduler.run_frame()
            seen.append(times.values[Color.BLACK])
        assert seen == sorted(seen, reverse=True)
        assert seen[-1] == 58.75


class TestClockSwitching:
    def test_start_cancels_previous_schedule(self, scheduler, fake_time) -> None:
        times = _Times()
        clock = _clock(scheduler, fake_time, times)
        clock.start(Color.WHITE)
        clock.start(Color.BLACK)
        assert scheduler.pending == 1
        assert len(scheduler.cancelled) == 1
        fake_time.advance(2)
        scheduler.run_frame()
        assert times.values[Color.WHITE] == 60.0
        assert times.values[Color.BLACK] == 58.0

    def test_elapsed_time_counts_from_switch(self, scheduler, fake_time) -> None:
        times = _Times()
        clock = _clock(scheduler, fake_time, times)
        clock.start(Color.WHITE)
        fake_time.advance(5)
        clock.start(Color.BLACK)
        fake_time.advance(1)
        scheduler.run_frame()
        assert times.values[Color.BLACK] == 59.0


class TestClockStopping:
    def test_floors_at_zero_and_stops_scheduling(self, scheduler, fake_time) -> None:
        times = _Times(white=1.0)
        clock = _clock(scheduler, fake_time, times)
        clock.start(Color.WHITE)
        fake_time.advance(3)
        scheduler.run_frame()
        assert times.values[Color.WHITE] == 0.0
        assert scheduler.pending == 0

    def test_untimed_side_is_not_counted(self, scheduler, fake_time) -> None:
        times = _Times(white=UNTIMED)
        clock = _clock(scheduler, fake_time, times)
        clock.start(Color.WHITE)
        fake_time.advance(3)
        scheduler.run_frame()
        assert times.writes == []
        assert scheduler.pending == 0

    def test_stop_is_terminal(self, scheduler, fake_time) -> None:
        times = _Times()
        clock = _clock(scheduler, fake_time, times)
        clock.start(Color.WHITE)
        clock.stop()
        assert clock.phase is ClockPhase.STOPPED
        assert scheduler.pending == 0
        clock.start(Color.BLACK)
        assert clock.phase is ClockPhase.STOPPED
        assert scheduler.pending == 0

    def test_stop_from_write_handler(self, scheduler, fake_time) -> None:
        times = _Times()
        clocks: list[CountdownClock] = []

        def write(color: Color, seconds: float) -> None:
            times.write(color, seconds)
            clocks[0].stop()

        clock = CountdownClock(scheduler, times.read, write, now=fake_time)
        clocks.append(clock)
        clock.start(Color.WHITE)
        fake_time.advance(1)
        scheduler.run_frame()
        assert times.values[Color.WHITE] == 59.0
        assert scheduler.pending == 0


class TestClockSchedulerFactory:
    def test_factory_called_lazily(self, scheduler, fake_time) -> None:
        made = []

        def factory():
            made.append(scheduler)
            return scheduler

        clock = CountdownClock(factory, _Times().read, _Times().write, now=fake_time)
        assert made == []
        clock.start(Color.WHITE)
        clock.start(Color.BLACK)
        assert made == [scheduler]
        assert scheduler.pending == 1
