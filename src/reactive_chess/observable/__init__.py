"""Observable attribute store: events, dependency graph and models."""

from reactive_chess.observable.events import EventEmitter, Handler
from reactive_chess.observable.graph import DependencyGraph
from reactive_chess.observable.model import DerivedSlot, Model, derived, prop

__all__ = [
    "DependencyGraph",
    "DerivedSlot",
    "EventEmitter",
    "Handler",
    "Model",
    "derived",
    "prop",
]
