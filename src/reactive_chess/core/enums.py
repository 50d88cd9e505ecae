"""Core enumerations and flags for chess domain."""

from __future__ import annotations

from enum import IntFlag, StrEnum


class Color(StrEnum):
    """Side color."""

    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> Color:
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def letter(self) -> str:
        """Single-letter form used in FEN and piece descriptors."""
        return "w" if self is Color.WHITE else "b"

    @classmethod
    def from_letter(cls, letter: str) -> Color:
        if letter == "w":
            return cls.WHITE
        if letter == "b":
            return cls.BLACK
        raise ValueError(f"Invalid color letter: {letter!r}")


class MoveFlag(IntFlag):
    """Special move classification (a move may carry several)."""

    NORMAL = 0
    CAPTURE = 1
    DOUBLE_PAWN = 2
    EN_PASSANT = 4
    CASTLE_KINGSIDE = 8
    CASTLE_QUEENSIDE = 16
    PROMOTION = 32
