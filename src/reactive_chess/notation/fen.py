"""FEN constants and syntactic validation."""

from __future__ import annotations

import re

from reactive_chess.notation.models import FenValidity

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
EMPTY_FEN = "8/8/8/8/8/8/8/8 w - - 0 1"

_EN_PASSANT_RE = re.compile(r"^(-|[a-h][36])$")
_CASTLING_RE = re.compile(r"^(KQ?k?q?|Qk?q?|kq?|q|-)$")
_PIECES = frozenset("prnbqkPRNBQK")


def _is_number(text: str) -> bool:
    return text.isascii() and text.isdigit()


def validate_fen(fen: str) -> FenValidity:
    """Check that *fen* is syntactically well formed.

    Only the textual structure is checked; whether the position itself is
    playable is left to the rules engine.
    """
    parts = fen.split()
    if len(parts) != 6:
        return FenValidity(False, "FEN string must contain six space-delimited fields.")

    placement, side_part, castling_part, ep_part, halfmove, fullmove = parts

    # 6. Full-move number
    if not _is_number(fullmove) or int(fullmove) <= 0:
        return FenValidity(False, "6th field (move number) must be a positive integer.")

    # 5. Half-move clock
    if not _is_number(halfmove):
        return FenValidity(
            False, "5th field (half move counter) must be a non-negative integer."
        )

    # 4. En passant
    if not _EN_PASSANT_RE.match(ep_part):
        return FenValidity(False, "4th field (en-passant square) is invalid.")

    # 3. Castling
    if not _CASTLING_RE.match(castling_part):
        return FenValidity(False, "3rd field (castling availability) is invalid.")

    # 2. Side to move
    if side_part not in ("w", "b"):
        return FenValidity(False, "2nd field (side to move) is invalid.")

    # 1. Piece placement
    ranks = placement.split("/")
    if len(ranks) != 8:
        return FenValidity(
            False, "1st field (piece positions) does not contain 8 '/'-delimited rows."
        )
    for rank_text in ranks:
        width = 0
        previous_was_number = False
        for ch in rank_text:
            if ch.isdigit():
                if previous_was_number:
                    return FenValidity(
                        False,
                        "1st field (piece positions) is invalid [consecutive numbers].",
                    )
                width += int(ch)
                previous_was_number = True
            else:
                if ch not in _PIECES:
                    return FenValidity(
                        False, "1st field (piece positions) is invalid [invalid piece]."
                    )
                width += 1
                previous_was_number = False
        if width != 8:
            return FenValidity(
                False, "1st field (piece positions) is invalid [row too large]."
            )

    if (ep_part[-1] == "3" and side_part == "w") or (
        ep_part[-1] == "6" and side_part == "b"
    ):
        return FenValidity(False, "Illegal en-passant square")

    return FenValidity(True)
