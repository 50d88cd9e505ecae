"""Observable model with primitive and derived attributes.

Subclasses declare attributes on the class body::

    class Counter(Model):
        count = prop(0)

        @derived("count")
        def doubled(self) -> int:
            return self.count * 2

Declarations are validated when the subclass is created, so an unknown
dependency or a dependency cycle fails at import time rather than on first
use.

Every ``set`` runs inside a logical update pass (see :meth:`Model.batch`).
Primitive changes are announced immediately through ``change:<name>``; when
a handler sets the same attribute again, the handlers after it only hear
about the newer value.
Derived attributes are marked dirty, recomputed lazily when read during the
pass, and flushed in dependency order when the outermost pass closes; each
derived attribute whose value differs from its value at the start of the
pass is announced exactly once.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar

from reactive_chess.core.errors import ConfigurationError
from reactive_chess.observable.events import EventEmitter
from reactive_chess.observable.graph import DependencyGraph

_MAX_FLUSH_ROUNDS = 100


class prop:
    """Declares a primitive attribute."""

    def __init__(
        self,
        default: Any = None,
        *,
        factory: Callable[[], Any] | None = None,
    ) -> None:
        self.name = ""
        self.default = default
        self.factory = factory

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def initial(self) -> Any:
        return self.factory() if self.factory is not None else self.default

    def __get__(self, instance: Model | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: Model, value: Any) -> None:
        instance.set(self.name, value)


class derived:
    """Declares a derived attribute computed from *deps*.

    With ``latch="<gate>"`` the attribute also depends on the boolean
    attribute *gate*: once the gate is true, the next recomputation is kept
    and every later one returns that latched value.
    """

    def __init__(self, *deps: str, latch: str | None = None) -> None:
        if latch is not None and latch not in deps:
            deps = (*deps, latch)
        self.name = ""
        self.deps = deps
        self.latch = latch
        self.fn: Callable[[Any], Any] | None = None

    def __call__(self, fn: Callable[[Any], Any]) -> derived:
        self.fn = fn
        self.__doc__ = fn.__doc__
        return self

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Model | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: Model, value: Any) -> None:
        raise AttributeError(f"Derived attribute {self.name!r} is read-only")


@dataclass(slots=True)
class DerivedSlot:
    """Cache state of one derived attribute on one model instance."""

    value: Any = None
    dirty: bool = True
    computed: bool = False
    latched: bool = False


class Model(EventEmitter):
    """Base class for observable models."""

    __slots__ = ("_values", "_previous", "_versions", "_slots", "_depth", "_pending")

    _props: ClassVar[dict[str, prop]] = {}
    _derived: ClassVar[dict[str, derived]] = {}
    _graph: ClassVar[DependencyGraph] = DependencyGraph((), {})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        props: dict[str, prop] = {}
        derived_specs: dict[str, derived] = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, prop):
                    derived_specs.pop(name, None)
                    props[name] = value
                elif isinstance(value, derived):
                    if value.fn is None:
                        raise ConfigurationError(
                            f"Derived attribute {name!r} has no compute function"
                        )
                    props.pop(name, None)
                    derived_specs[name] = value
        cls._props = props
        cls._derived = derived_specs
        cls._graph = DependencyGraph(
            props, {name: spec.deps for name, spec in derived_specs.items()}
        )

    def __init__(self, **attrs: Any) -> None:
        super().__init__()
        unknown = set(attrs).difference(self._props)
        if unknown:
            raise TypeError(f"Unknown attributes: {sorted(unknown)}")
        self._values: dict[str, Any] = {
            name: attrs[name] if name in attrs else spec.initial()
            for name, spec in self._props.items()
        }
        self._previous: dict[str, Any] = dict(self._values)
        self._versions: dict[str, int] = dict.fromkeys(self._values, 0)
        self._slots: dict[str, DerivedSlot] = {
            name: DerivedSlot() for name in self._derived
        }
        self._depth = 0
        self._pending: dict[str, Any] = {}

    # ── Attribute access ─────────────────────────────────────────────────

    def get(self, name: str) -> Any:
        if name in self._values:
            return self._values[name]
        slot = self._slot(name)
        if slot.dirty:
            if self._depth:
                self._recompute(name)
            else:
                with self.batch():
                    self._recompute(name)
        return slot.value

    def set(self, name: str, value: Any, options: Any = None) -> None:
        if name not in self._values:
            if name in self._slots:
                raise AttributeError(f"Derived attribute {name!r} is read-only")
            raise AttributeError(f"Unknown attribute {name!r}")
        old = self._values[name]
        if old == value:
            return
        with self.batch():
            self._previous[name] = old
            self._values[name] = value
            version = self._versions[name] = self._versions[name] + 1
            for dependent in self._graph.dependents(name):
                self._slots[dependent].dirty = True
            for handler in self.handlers(f"change:{name}"):
                # A handler set the attribute again: later handlers only
                # hear about the newer value
                if self._versions[name] != version:
                    break
                handler(self, value, options)

    def previous(self, name: str) -> Any:
        """Value of primitive *name* before its most recent change."""
        if name not in self._previous:
            raise AttributeError(f"Unknown attribute {name!r}")
        return self._previous[name]

    def cached(self, name: str) -> Any:
        """Last computed value of derived *name*, without recomputing."""
        return self._slot(name).value

    def slot(self, name: str) -> DerivedSlot:
        """Cache state of derived *name* (read-only view for inspection)."""
        slot = self._slot(name)
        return DerivedSlot(slot.value, slot.dirty, slot.computed, slot.latched)

    # ── Update passes ────────────────────────────────────────────────────

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group several sets into one update pass.

        Re-entrant.  Derived attributes are flushed when the outermost
        pass closes without an exception.
        """
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
        if self._depth == 0:
            self._flush()

    # ── Internal ─────────────────────────────────────────────────────────

    def _slot(self, name: str) -> DerivedSlot:
        try:
            return self._slots[name]
        except KeyError:
            raise AttributeError(f"Unknown attribute {name!r}") from None

    def _recompute(self, name: str) -> None:
        spec = self._derived[name]
        slot = self._slots[name]
        if slot.latched:
            slot.dirty = False
            return
        if spec.latch is not None and self.get(spec.latch):
            slot.latched = True
        value = spec.fn(self)  # type: ignore[misc]
        if slot.computed and name not in self._pending:
            self._pending[name] = slot.value
        slot.value = value
        slot.computed = True
        slot.dirty = False

    def _flush(self) -> None:
        self._depth += 1
        try:
            for _ in range(_MAX_FLUSH_ROUNDS):
                for name in self._graph.order:
                    if self._slots[name].dirty:
                        self._recompute(name)
                if not self._pending:
                    if not any(slot.dirty for slot in self._slots.values()):
                        return
                    continue
                changes = [name for name in self._graph.order if name in self._pending]
                for name in changes:
                    slot = self._slots[name]
                    if slot.dirty:
                        # Invalidated by an earlier handler; announced next round
                        continue
                    old = self._pending.pop(name)
                    if slot.value != old:
                        self.trigger(f"change:{name}", self, slot.value, None)
        finally:
            self._depth -= 1
        raise RuntimeError("Derived attributes did not settle")
