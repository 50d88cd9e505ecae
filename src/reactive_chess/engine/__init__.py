"""Engine package: rules-engine and scheduler interfaces plus implementations.

``QtFrameScheduler`` is imported from :mod:`reactive_chess.engine.qt_scheduler`
directly so that loading this package does not require Qt.
"""

from reactive_chess.engine.interfaces import (
    IRulesEngine,
    IScheduler,
    MoveDescriptor,
    MoveInput,
    MoveListOptions,
    MoveRecord,
    PlacedPiece,
)
from reactive_chess.engine.python_chess import PythonChessEngine

__all__ = [
    "IRulesEngine",
    "IScheduler",
    "MoveDescriptor",
    "MoveInput",
    "MoveListOptions",
    "MoveRecord",
    "PlacedPiece",
    "PythonChessEngine",
]
