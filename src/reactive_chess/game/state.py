"""ChessState: a reactive game model over a rules engine.

Position (``fen``) and move list (``pgn``) are plain attributes that can be
assigned directly; the state keeps them, the rules engine and the undo/redo
timeline in sync.  Everything else (check, checkmate, winner, ...) is a
derived attribute recomputed when its inputs change, with ``change:<name>``
events for every net change and a ``move`` event per applied ply.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from reactive_chess.core.enums import Color
from reactive_chess.core.errors import ConfigurationError
from reactive_chess.engine.interfaces import (
    IRulesEngine,
    IScheduler,
    MoveInput,
    MoveListOptions,
    MoveRecord,
    PlacedPiece,
)
from reactive_chess.engine.python_chess import PythonChessEngine
from reactive_chess.game.clock import CountdownClock
from reactive_chess.game.config import (
    UNTIMED,
    DefaultStart,
    FromMoveList,
    FromPosition,
    InitialPosition,
    UpdateOptions,
    initial_position,
)
from reactive_chess.notation.fen import EMPTY_FEN, STARTING_FEN
from reactive_chess.notation.models import MoveRow
from reactive_chess.notation.pgn import appended_moves, furthest_move_list, move_rows
from reactive_chess.observable.model import Model, derived, prop

_LOGGER = logging.getLogger(__name__)

INVALID_PGN = "Invalid PGN"

# Latch gate of the attributes frozen by ``freeze_on_finish``
_GATE = "freeze_gate"


def _qt_scheduler() -> IScheduler:
    from reactive_chess.engine.qt_scheduler import QtFrameScheduler

    return QtFrameScheduler()


class ChessState(Model):
    """Observable chess game.

    Args:
        initial: Where the game starts; alternatively pass *fen* or *pgn*.
        fen: Starting position (exclusive with *pgn*).
        pgn: Starting move list (exclusive with *fen*).
        white_time: Seconds on White's clock, or ``UNTIMED``.
        black_time: Seconds on Black's clock, or ``UNTIMED``.
        freeze_on_finish: Keep the end-of-game status attributes once the
            game has finished, even when moves are undone afterwards.
        engine_factory: Builds the rules engine (two instances are made:
            the game engine and a scratch one for validating move lists).
        scheduler: Frame scheduler for the clock; a Qt one by default.
        now: Monotonic time source for the clock.
        rng: Random generator used by :meth:`random`.
        move_list_options: Formatting of the ``pgn`` attribute.
    """

    __slots__ = ("_engine", "_scratch", "_clock", "_rng", "_move_list_options")

    # ── Primitive attributes ─────────────────────────────────────────────

    fen = prop(STARTING_FEN)
    pgn = prop("")
    white_time = prop(UNTIMED)
    black_time = prop(UNTIMED)
    freeze_on_finish = prop(False)

    history = prop(factory=list)  # SAN of played plies, oldest first
    future = prop(factory=list)  # SAN of undone plies, most recent last
    final_pgn = prop("")  # furthest move list seen, see furthest_move_list
    valid = prop(True)
    error_message = prop("")

    # ── Derived attributes ───────────────────────────────────────────────

    @derived("fen", latch=_GATE)
    def start(self) -> bool:
        return self.fen == STARTING_FEN

    @derived("fen", latch=_GATE)
    def empty(self) -> bool:
        return self.fen == EMPTY_FEN

    # Frozen with checkmate: winner is read from the side to move
    @derived("fen", "history", latch=_GATE)
    def turn(self) -> Color:
        return self._engine.turn()

    @derived("fen", "history", latch=_GATE)
    def checkmate(self) -> bool:
        return self._engine.in_checkmate()

    @derived("fen", "history", latch=_GATE)
    def check(self) -> bool:
        return self._engine.in_check()

    @derived("fen", "history", latch=_GATE)
    def draw(self) -> bool:
        return self._engine.in_draw()

    @derived("fen", "history", latch=_GATE)
    def stalemate(self) -> bool:
        return self._engine.in_stalemate()

    @derived("fen", "history", latch=_GATE)
    def threefold_repetition(self) -> bool:
        return self._engine.in_threefold_repetition()

    @derived("fen", "history", latch=_GATE)
    def insufficient_material(self) -> bool:
        return self._engine.insufficient_material()

    @derived("fen", "history")
    def ascii(self) -> str:
        return self._engine.ascii()

    @derived("fen", "history")
    def moves(self) -> list[str]:
        """Legal moves in SAN."""
        return self._engine.legal_moves()

    @derived("fen", "history")
    def engine_over(self) -> bool:
        return self._engine.game_over()

    @derived("history")
    def can_undo(self) -> bool:
        return len(self.history) > 0

    @derived("future")
    def can_redo(self) -> bool:
        return len(self.future) > 0

    @derived("final_pgn", "history")
    def pgn_rows(self) -> list[MoveRow]:
        """Rows of the furthest move list, current ply marked active."""
        return move_rows(self.final_pgn, len(self.history))

    @derived("white_time", "black_time")
    def lost_on_time(self) -> bool:
        return self.white_time == 0 or self.black_time == 0

    @derived("checkmate", "turn", "white_time", "black_time")
    def winner(self) -> Color | None:
        if self.black_time == 0:
            return Color.WHITE
        if self.white_time == 0:
            return Color.BLACK
        if self.checkmate:
            return self.turn.opposite
        return None

    @derived("engine_over", "lost_on_time")
    def game_over(self) -> bool:
        return self.engine_over or self.lost_on_time

    @derived("game_over")
    def finished(self) -> bool:
        # Once finished, always finished
        return bool(self.cached("finished")) or self.game_over

    @derived("finished", "freeze_on_finish")
    def freeze_gate(self) -> bool:
        return self.finished and self.freeze_on_finish

    @derived(
        "game_over",
        "lost_on_time",
        "checkmate",
        "draw",
        "stalemate",
        "threefold_repetition",
        "insufficient_material",
    )
    def end_result(self) -> str:
        if not self.game_over:
            return ""
        if self.lost_on_time:
            return "Lost on time"
        if self.checkmate:
            return "Checkmate"
        if not self.draw:
            return ""
        if self.stalemate:
            return "Draw - Stalemate"
        if self.threefold_repetition:
            return "Draw - Threefold Repetition"
        if self.insufficient_material:
            return "Draw - Insufficient Material"
        return "Draw"

    # ── Construction ─────────────────────────────────────────────────────

    def __init__(
        self,
        initial: InitialPosition | None = None,
        *,
        fen: str | None = None,
        pgn: str | None = None,
        white_time: float = UNTIMED,
        black_time: float = UNTIMED,
        freeze_on_finish: bool = False,
        engine_factory: Callable[[], IRulesEngine] = PythonChessEngine,
        scheduler: IScheduler | None = None,
        now: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
        move_list_options: MoveListOptions | None = None,
    ) -> None:
        if initial is None:
            initial = initial_position(fen, pgn)
        elif fen is not None or pgn is not None:
            raise ConfigurationError(
                "Pass either an initial position or fen/pgn, not both"
            )

        super().__init__(
            white_time=white_time,
            black_time=black_time,
            freeze_on_finish=freeze_on_finish,
        )
        self._engine = engine_factory()
        self._scratch = engine_factory()
        self._rng = rng or random.Random()
        self._move_list_options = move_list_options or MoveListOptions()
        self._clock: CountdownClock | None = None

        self.on("change:fen", self._on_fen)
        self.on("change:pgn", self._on_pgn)

        # Closing the batch computes every derived attribute once
        with self.batch():
            self._apply_initial(initial)

        if white_time != UNTIMED and black_time != UNTIMED:
            self._clock = CountdownClock(
                scheduler if scheduler is not None else _qt_scheduler,
                self._read_time,
                self._write_time,
                now=now,
            )
            self.once("change:start", self._start_clock)
            self.once("change:finished", self._stop_clock)

    def _apply_initial(self, initial: InitialPosition) -> None:
        if isinstance(initial, FromPosition):
            self.fen = initial.fen
        elif isinstance(initial, FromMoveList):
            text = initial.pgn
            if initial.newline_char and initial.newline_char != "\n":
                text = text.replace(initial.newline_char, "\n")
            self.pgn = text
        elif not isinstance(initial, DefaultStart):
            raise ConfigurationError(f"Unknown initial position: {initial!r}")

    @property
    def clock(self) -> CountdownClock | None:
        """The countdown clock, or ``None`` for an untimed game."""
        return self._clock

    # ── Timeline ─────────────────────────────────────────────────────────

    def move(
        self, descriptor: MoveInput, options: UpdateOptions | None = None
    ) -> MoveRecord | None:
        """Play a move; ``None`` (and no state change) when it is illegal.

        A legal move drops the redo path.  The ``move`` event is emitted
        once the attributes are up to date.
        """
        record = self._engine.move(descriptor)
        if record is None:
            return None
        with self.batch():
            if self.future:
                self.future = []
            self._update_all_from_engine(options)
        self.trigger("move", self, record, options)
        return record

    def undo(
        self, silent: bool = False, options: UpdateOptions | None = None
    ) -> MoveRecord | None:
        """Take back the last ply and push it on the redo path.

        With *silent* the position attributes are not refreshed; the caller
        is expected to issue one update afterwards.
        """
        record = self._engine.undo()
        if record is None:
            return None
        with self.batch():
            self.future = [*self.future, record.san]
            if not silent:
                self._update_all_from_engine(options)
        return record

    def redo(
        self, silent: bool = False, options: UpdateOptions | None = None
    ) -> MoveRecord | None:
        """Replay the most recently undone ply."""
        if not self.future:
            return None
        record = self._engine.move(self.future[-1])
        if record is None:
            return None
        with self.batch():
            if not silent:
                self._update_all_from_engine(options)
            self.future = self.future[:-1]
        return record

    def first(self) -> MoveRecord | None:
        """Undo every ply; returns the first ply of the game."""
        record = None
        with self.batch():
            for _ in range(len(self.history)):
                record = self.undo(silent=True)
            self._update_all_from_engine(UpdateOptions(multiple_moves=True))
        return record

    def last(self) -> MoveRecord | None:
        """Redo every undone ply; returns the last ply of the game."""
        record = None
        with self.batch():
            for _ in range(len(self.future)):
                record = self.redo(silent=True)
            self._update_all_from_engine(UpdateOptions(multiple_moves=True))
        return record

    def random(self, options: UpdateOptions | None = None) -> MoveRecord | None:
        """Play a uniformly random legal move; ``None`` when there is none."""
        moves = self.moves
        if not moves:
            return None
        return self.move(self._rng.choice(moves), options)

    # ── Board editing and loading ────────────────────────────────────────

    def put(
        self, piece: PlacedPiece, square: str, options: UpdateOptions | None = None
    ) -> bool:
        return self._apply(self._engine.put(piece, square), options)

    def remove(
        self, square: str, options: UpdateOptions | None = None
    ) -> PlacedPiece | None:
        removed = self._engine.remove(square)
        self._apply(removed is not None, options)
        return removed

    def load(self, fen: str, options: UpdateOptions | None = None) -> bool:
        return self._apply(self._engine.load(fen), options)

    def load_pgn(
        self,
        pgn: str,
        newline_char: str | None = None,
        options: UpdateOptions | None = None,
    ) -> bool:
        return self._apply(self._engine.load_move_list(pgn, newline_char), options)

    def reset(self, options: UpdateOptions | None = None) -> None:
        self._engine.reset()
        self._apply(True, options)

    def clear(self, options: UpdateOptions | None = None) -> None:
        self._engine.clear()
        self._apply(True, options)

    # ── Queries ──────────────────────────────────────────────────────────

    def get_square(self, square: str) -> PlacedPiece | None:
        return self._engine.get(square)

    def get_square_color(self, square: str) -> str | None:
        return self._engine.square_color(square)

    def add_header(self, key: str, value: str) -> None:
        self._engine.set_header(key, value)
        self._update_all_from_engine()

    # ── Engine adapter ───────────────────────────────────────────────────

    def _apply(self, changed: bool, options: UpdateOptions | None) -> bool:
        if changed:
            with self.batch():
                self.future = []
                self._update_all_from_engine(options)
        return changed

    def _update_all_from_engine(self, options: UpdateOptions | None = None) -> None:
        opts = replace(options or UpdateOptions(), from_engine=True)
        with self.batch():
            self.set("fen", self._engine.fen(), opts)
            self.set("pgn", self._engine.pgn(self._move_list_options), opts)
            self.set("history", self._engine.history(), opts)

    # ── Synchronizer ─────────────────────────────────────────────────────

    def _on_fen(self, model: ChessState, fen: str, options: Any) -> None:
        if getattr(options, "from_engine", False):
            self._mark_valid()
            return

        validity = self._engine.validate(fen)
        if not validity.valid:
            with self.batch():
                self.error_message = validity.error
                self.valid = False
            return

        self._engine.load(fen)
        _LOGGER.debug("Loaded position %s", fen)
        with self.batch():
            self.future = []
            self._update_all_from_engine()
            self._mark_valid()

    def _on_pgn(self, model: ChessState, pgn: str, options: Any) -> None:
        if getattr(options, "from_engine", False):
            self._remember_furthest(pgn)
            self._mark_valid()
            return

        newline = self._move_list_options.newline_char
        if pgn and not self._scratch.load_move_list(pgn, newline):
            with self.batch():
                self.error_message = INVALID_PGN
                self.valid = False
            return

        previous = self.previous("pgn")
        with self.batch():
            self._remember_furthest(pgn)
            appended = None
            if previous == self._engine.pgn(self._move_list_options):
                appended = appended_moves(previous, pgn)
            if appended is None or not self._replay(appended):
                self._reload(pgn)
            self._update_all_from_engine()
            self._mark_valid()

    def _replay(self, sans: list[str]) -> bool:
        for played, san in enumerate(sans):
            if self.move(san) is None:
                _LOGGER.warning(
                    "Incremental replay stopped at %r after %d plies; reloading",
                    san,
                    played,
                )
                return False
        _LOGGER.debug("Replayed %d appended plies", len(sans))
        return True

    def _reload(self, pgn: str) -> None:
        self._engine.load_move_list(pgn, self._move_list_options.newline_char)
        self.future = []
        _LOGGER.debug("Reloaded move list (%d chars)", len(pgn))

    def _remember_furthest(self, pgn: str) -> None:
        # Jumping to the first ply empties the move list; keep the game
        if not pgn and self.future:
            return
        self.final_pgn = furthest_move_list(pgn, self.final_pgn, self.previous("pgn"))

    def _mark_valid(self) -> None:
        with self.batch():
            self.error_message = ""
            self.valid = True

    # ── Clock wiring ─────────────────────────────────────────────────────

    def _read_time(self, color: Color) -> float:
        return self.white_time if color is Color.WHITE else self.black_time

    def _write_time(self, color: Color, seconds: float) -> None:
        self.set("white_time" if color is Color.WHITE else "black_time", seconds)

    def _start_clock(self, model: ChessState, start: bool, options: Any) -> None:
        assert self._clock is not None
        if self.finished:
            self._clock.stop()
            return
        self._clock.start(self.turn)
        self.on("change:turn", self._restart_clock)

    def _restart_clock(self, model: ChessState, turn: Color, options: Any) -> None:
        assert self._clock is not None
        self._clock.start(turn)

    def _stop_clock(self, model: ChessState, finished: bool, options: Any) -> None:
        assert self._clock is not None
        self._clock.stop()
