"""Construction-time configuration for :class:`~reactive_chess.game.state.ChessState`."""

from __future__ import annotations

from dataclasses import dataclass

from reactive_chess.core.errors import ConfigurationError

# Clock value meaning "this side plays without a clock"
UNTIMED = -1.0


# ── Initial position variants ────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DefaultStart:
    """Standard starting position."""


@dataclass(frozen=True, slots=True)
class FromPosition:
    """Start from a FEN position."""

    fen: str


@dataclass(frozen=True, slots=True)
class FromMoveList:
    """Start from a PGN move list.

    Args:
        pgn: Move list text.
        newline_char: Line separator used in *pgn* when it is not ``"\\n"``.
    """

    pgn: str
    newline_char: str | None = None


InitialPosition = DefaultStart | FromPosition | FromMoveList


def initial_position(fen: str | None = None, pgn: str | None = None) -> InitialPosition:
    """Build the initial-position variant from keyword-style arguments.

    Raises:
        ConfigurationError: if both *fen* and *pgn* are given.
    """
    if fen and pgn:
        raise ConfigurationError("Cannot set both fen and pgn during initialization")
    if fen:
        return FromPosition(fen)
    if pgn:
        return FromMoveList(pgn)
    return DefaultStart()


# ── Update options ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class UpdateOptions:
    """Options carried by ``change:*`` events raised by state updates.

    ``from_engine`` marks values read back from the rules engine, so the
    synchronizer does not re-apply them; ``multiple_moves`` marks the single
    bulk update issued after jumping several plies.
    """

    from_engine: bool = False
    multiple_moves: bool = False
