"""Minimal synchronous event emitter."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Handler = Callable[..., Any]


class EventEmitter:
    """Named events with multiple handlers per event.

    Handlers run synchronously, in subscription order.  Exceptions raised by
    a handler propagate to whoever triggered the event.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, event: str, handler: Handler) -> Handler:
        self._handlers.setdefault(event, []).append(handler)
        return handler

    def once(self, event: str, handler: Handler) -> Handler:
        """Subscribe *handler* for the next occurrence of *event* only."""

        def _wrapper(*args: Any) -> Any:
            self.off(event, _wrapper)
            return handler(*args)

        _wrapper.__wrapped__ = handler  # type: ignore[attr-defined]
        return self.on(event, _wrapper)

    def off(self, event: str | None = None, handler: Handler | None = None) -> None:
        """Remove handlers.  With no arguments every handler is removed."""
        if event is None:
            self._handlers.clear()
            return
        if handler is None:
            self._handlers.pop(event, None)
            return
        # Bound methods are recreated on every access: compare with ==
        handlers = self._handlers.get(event, [])
        self._handlers[event] = [
            h
            for h in handlers
            if h != handler and getattr(h, "__wrapped__", None) != handler
        ]

    def handlers(self, event: str) -> list[Handler]:
        """Snapshot of the handlers of *event*, in subscription order."""
        return list(self._handlers.get(event, ()))

    def trigger(self, event: str, *args: Any) -> None:
        for handler in self.handlers(event):
            handler(*args)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))
