"""Exception hierarchy.

Invalid user input (a malformed FEN, an unparsable PGN, an illegal move) is
never raised: it is reported through ``ChessState.valid`` /
``ChessState.error_message`` or a ``None`` return value.  The exceptions
below signal programmer errors and fail fast.
"""

from __future__ import annotations


class ReactiveChessError(Exception):
    """Base class for all library errors."""


class ConfigurationError(ReactiveChessError):
    """Invalid declaration or construction arguments."""


class CyclicDependencyError(ConfigurationError):
    """Derived attributes were declared with a dependency cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__("Cyclic derived dependency: " + " -> ".join(cycle))
