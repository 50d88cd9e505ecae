"""Game layer: the reactive ChessState, its clock and construction options.

Quick start::

    from reactive_chess.game import ChessState

    state = ChessState(white_time=300, black_time=300)
    state.on("change:check", lambda model, check, options: print("check!"))
    state.on("move", lambda model, record, options: print(record.san))
    state.move("e4")
    state.pgn += " e5 2. Nf3"  # replays e5 and Nf3, one move event each
"""

from reactive_chess.game.clock import ClockPhase, CountdownClock
from reactive_chess.game.config import (
    UNTIMED,
    DefaultStart,
    FromMoveList,
    FromPosition,
    InitialPosition,
    UpdateOptions,
    initial_position,
)
from reactive_chess.game.state import INVALID_PGN, ChessState

__all__ = [
    # Configuration
    "UNTIMED",
    "DefaultStart",
    "FromMoveList",
    "FromPosition",
    "InitialPosition",
    "UpdateOptions",
    "initial_position",
    # Concrete
    "ChessState",
    "ClockPhase",
    "CountdownClock",
    "INVALID_PGN",
]
