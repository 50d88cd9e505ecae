"""Abstract interfaces for the engine layer.

The state object depends on these ABCs, not on python-chess or Qt
directly, so tests can plug in fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from reactive_chess.core.enums import Color, MoveFlag
from reactive_chess.notation.models import FenValidity


# ── Value objects ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """One applied ply, as reported by the rules engine."""

    color: Color
    from_square: str
    to_square: str
    piece: str  # lowercase piece letter: p n b r q k
    san: str
    flags: MoveFlag = MoveFlag.NORMAL
    captured: str | None = None
    promotion: str | None = None


@dataclass(frozen=True, slots=True)
class MoveDescriptor:
    """A move given by its squares, e.g. ``MoveDescriptor("e7", "e8", "q")``."""

    from_square: str
    to_square: str
    promotion: str | None = None


@dataclass(frozen=True, slots=True)
class PlacedPiece:
    type: str
    color: Color


@dataclass(frozen=True, slots=True)
class MoveListOptions:
    """Serialization options for move lists."""

    newline_char: str = "\n"
    max_width: int = 0


MoveInput = str | MoveDescriptor | Mapping[str, Any]


# ── Abstract interfaces ─────────────────────────────────────────────────────


class IRulesEngine(ABC):
    """Interface for a chess rules engine holding one game."""

    # Loading

    @abstractmethod
    def validate(self, fen: str) -> FenValidity:
        """Check *fen* without loading it."""

    @abstractmethod
    def load(self, fen: str) -> bool:
        """Replace the game with the position *fen*."""

    @abstractmethod
    def load_move_list(self, text: str, newline_char: str | None = None) -> bool:
        """Replace the game with the one described by the move list *text*.

        Leaves the current game untouched and returns ``False`` when *text*
        is not a legal game.
        """

    # Mutations

    @abstractmethod
    def move(self, descriptor: MoveInput) -> MoveRecord | None:
        """Play *descriptor*; ``None`` when the move is illegal."""

    @abstractmethod
    def undo(self) -> MoveRecord | None: ...

    @abstractmethod
    def put(self, piece: PlacedPiece, square: str) -> bool: ...

    @abstractmethod
    def remove(self, square: str) -> PlacedPiece | None: ...

    @abstractmethod
    def reset(self) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...

    # Predicates

    @abstractmethod
    def in_check(self) -> bool: ...

    @abstractmethod
    def in_checkmate(self) -> bool: ...

    @abstractmethod
    def in_stalemate(self) -> bool: ...

    @abstractmethod
    def in_draw(self) -> bool: ...

    @abstractmethod
    def in_threefold_repetition(self) -> bool: ...

    @abstractmethod
    def insufficient_material(self) -> bool: ...

    @abstractmethod
    def game_over(self) -> bool: ...

    @abstractmethod
    def turn(self) -> Color: ...

    # Serialization and queries

    @abstractmethod
    def fen(self) -> str: ...

    @abstractmethod
    def pgn(self, options: MoveListOptions | None = None) -> str: ...

    @abstractmethod
    def history(self, verbose: bool = False) -> list[Any]:
        """SAN strings of the plies played, or :class:`MoveRecord` objects."""

    @abstractmethod
    def legal_moves(self) -> list[str]: ...

    @abstractmethod
    def ascii(self) -> str: ...

    @abstractmethod
    def get(self, square: str) -> PlacedPiece | None: ...

    @abstractmethod
    def square_color(self, square: str) -> str | None:
        """``"light"`` or ``"dark"``; ``None`` for an unknown square."""

    @abstractmethod
    def set_header(self, key: str, value: str) -> None: ...

    @abstractmethod
    def headers(self) -> dict[str, str]: ...


class IScheduler(ABC):
    """Interface for a frame scheduler driving the clock."""

    @abstractmethod
    def schedule(self, callback: Callable[[], None]) -> int:
        """Run *callback* once on the next frame; return a cancel handle."""

    @abstractmethod
    def cancel(self, handle: int) -> None:
        """Drop a pending callback.  Unknown handles are ignored."""
