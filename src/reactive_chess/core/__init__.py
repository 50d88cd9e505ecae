"""Core domain layer: enums and errors shared by every other package."""

from reactive_chess.core.enums import Color, MoveFlag
from reactive_chess.core.errors import (
    ConfigurationError,
    CyclicDependencyError,
    ReactiveChessError,
)

__all__ = [
    "Color",
    "ConfigurationError",
    "CyclicDependencyError",
    "MoveFlag",
    "ReactiveChessError",
]
