"""Notation package: FEN validation and PGN parsing/serialization."""

from reactive_chess.notation.fen import EMPTY_FEN, STARTING_FEN, validate_fen
from reactive_chess.notation.models import FenValidity, MoveRow, ParsedPgn, PlyEntry
from reactive_chess.notation.pgn import (
    appended_moves,
    build_move_list,
    furthest_move_list,
    is_move_prefix,
    move_rows,
    move_tokens,
    parse_move_list,
)

__all__ = [
    "EMPTY_FEN",
    "STARTING_FEN",
    "FenValidity",
    "MoveRow",
    "ParsedPgn",
    "PlyEntry",
    "appended_moves",
    "build_move_list",
    "furthest_move_list",
    "is_move_prefix",
    "move_rows",
    "move_tokens",
    "parse_move_list",
    "validate_fen",
]
