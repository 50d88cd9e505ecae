"""Shared notation-layer data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FenValidity:
    """Outcome of FEN validation; *error* is empty when valid."""

    valid: bool
    error: str = ""


@dataclass(slots=True)
class ParsedPgn:
    """Headers, mainline SAN moves and result token of one PGN game."""

    headers: dict[str, str]
    moves: list[str]
    result_token: str


@dataclass(slots=True)
class PlyEntry:
    """One ply of a move-list row."""

    san: str
    active: bool = False


@dataclass(slots=True)
class MoveRow:
    """A numbered move-list row, as shown by move-list panels.

    ``white`` is ``None`` when the list starts with a black move.
    """

    number: int
    white: PlyEntry | None = None
    black: PlyEntry | None = None
