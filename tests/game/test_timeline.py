"""Tests for undo/redo navigation on ChessState."""

from typing import Any

from reactive_chess.core.enums import Color
from reactive_chess.game.state import ChessState

MIDGAME_FEN = "2n1r3/p1k2pp1/B1p3b1/P7/5bP1/2N1B3/1P2KP2/2R5 b - - 4 25"
MIDGAME_MOVES = ("Rxe3+", "Kd1", "c5")


def _midgame() -> ChessState:
    state = ChessState(fen=MIDGAME_FEN)
    for san in MIDGAME_MOVES:
        state.move(san)
    return state


class TestUndoRedo:
    def test_undo_and_redo(self) -> None:
        state = _midgame()
        final_fen = state.fen
        assert state.can_undo
        assert not state.can_redo

        record = state.undo()
        assert record is not None
        assert record.san == "c5"
        assert state.history == ["Rxe3+", "Kd1"]
        assert state.future == ["c5"]
        assert state.can_redo

        record = state.redo()
        assert record is not None
        assert record.san == "c5"
        assert state.fen == final_fen
        assert state.future == []

    def test_undo_check_status(self) -> None:
        state = _midgame()
        state.undo()
        state.undo()
        assert state.check
        state.undo()
        assert not state.check
        assert state.fen == MIDGAME_FEN

    def test_overdoing_undo(self) -> None:
        state = _midgame()
        for _ in range(5):
            state.undo()
        assert state.fen == MIDGAME_FEN
        assert state.undo() is None
        assert not state.can_undo
        assert state.future == ["c5", "Kd1", "Rxe3+"]

    def test_overdoing_redo(self) -> None:
        state = _midgame()
        final_fen = state.fen
        for _ in range(3):
            state.undo()
        for _ in range(5):
            state.redo()
        assert state.fen == final_fen
        assert state.redo() is None
        assert not state.can_redo

    def test_history_and_future_form_the_game(self) -> None:
        state = _midgame()
        for _ in range(2):
            state.undo()
            assert [*state.history, *reversed(state.future)] == list(MIDGAME_MOVES)
        state.redo()
        assert [*state.history, *reversed(state.future)] == list(MIDGAME_MOVES)

    def test_redo_emits_no_move_event(self) -> None:
        state = _midgame()
        state.undo()
        moves: list[Any] = []
        state.on("move", lambda *args: moves.append(args))
        state.redo()
        assert moves == []

    def test_silent_undo_defers_position(self) -> None:
        state = _midgame()
        fen = state.fen
        state.undo(silent=True)
        assert state.fen == fen
        assert state.future == ["c5"]


class TestMovesWithHistory:
    def test_new_move_drops_redo_path(self) -> None:
        state = ChessState()
        for san in ("h4", "g5", "f3", "Bh6", "h5", "d6", "e3", "Kf8", "f4", "Qd7"):
            state.move(san)
        for _ in range(4):
            state.undo()
        assert state.future == ["Qd7", "f4", "Kf8", "e3"]

        state.move("Nh3")
        assert state.future == []
        assert not state.can_redo
        assert state.history == ["h4", "g5", "f3", "Bh6", "h5", "d6", "Nh3"]

    def test_illegal_move_keeps_redo_path(self) -> None:
        state = ChessState()
        state.move("e4")
        state.undo()
        assert state.move("e5") is None
        assert state.future == ["e4"]


class TestFirstLast:
    def test_first_and_last(self) -> None:
        state = _midgame()
        final_fen = state.fen

        record = state.first()
        assert record is not None
        assert record.san == "Rxe3+"
        assert state.fen == MIDGAME_FEN
        assert state.history == []
        assert state.future == ["c5", "Kd1", "Rxe3+"]
        assert state.turn is Color.BLACK

        record = state.last()
        assert record is not None
        assert record.san == "c5"
        assert state.fen == final_fen
        assert state.future == []

    def test_first_is_one_position_update(self) -> None:
        state = _midgame()
        seen: list[Any] = []
        state.on("change:fen", lambda model, fen, options: seen.append(options))
        state.first()
        assert len(seen) == 1
        assert seen[0].multiple_moves
        assert seen[0].from_engine

    def test_first_and_last_on_empty_timeline(self) -> None:
        state = ChessState()
        assert state.first() is None
        assert state.last() is None
        assert state.start

    def test_rows_survive_first(self) -> None:
        state = ChessState()
        for san in ("e4", "e5", "Nf3"):
            state.move(san)
        state.first()
        assert state.pgn == ""
        rows = state.pgn_rows
        assert [row.number for row in rows] == [1, 2]
        assert not any(
            entry.active
            for row in rows
            for entry in (row.white, row.black)
            if entry is not None
        )

    def test_rows_survive_single_undo(self) -> None:
        state = ChessState()
        state.move("e4")
        state.undo()
        assert state.can_redo
        assert state.final_pgn == "1. e4"
        rows = state.pgn_rows
        assert len(rows) == 1
        assert rows[0].white is not None and rows[0].white.san == "e4"
        assert not rows[0].white.active

    def test_active_ply_follows_undo(self) -> None:
        state = ChessState()
        for san in ("e4", "e5", "Nf3"):
            state.move(san)
        state.undo()
        rows = state.pgn_rows
        assert rows[0].black is not None and rows[0].black.active
        assert rows[1].white is not None and rows[1].white.san == "Nf3"
        assert not rows[1].white.active
