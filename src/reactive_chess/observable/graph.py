"""Dependency graph for derived attributes.

Built once per model class.  Validates declarations and precomputes the
recomputation order and the transitive dependents of every attribute.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from graphlib import CycleError, TopologicalSorter

from reactive_chess.core.errors import ConfigurationError, CyclicDependencyError


class DependencyGraph:
    """Directed acyclic graph of derived attributes over primitive ones."""

    __slots__ = ("order", "_dependents")

    def __init__(
        self,
        props: Iterable[str],
        derived: Mapping[str, Sequence[str]],
    ) -> None:
        prop_names = set(props)
        shadowed = prop_names.intersection(derived)
        if shadowed:
            raise ConfigurationError(
                f"Derived attributes shadow primitive ones: {sorted(shadowed)}"
            )
        known = prop_names | set(derived)

        sorter: TopologicalSorter[str] = TopologicalSorter()
        direct: dict[str, set[str]] = defaultdict(set)
        for name, deps in derived.items():
            for dep in deps:
                if dep not in known:
                    raise ConfigurationError(
                        f"Derived attribute {name!r} depends on unknown {dep!r}"
                    )
                direct[dep].add(name)
            sorter.add(name, *(dep for dep in deps if dep in derived))

        try:
            self.order: tuple[str, ...] = tuple(sorter.static_order())
        except CycleError as exc:
            raise CyclicDependencyError(list(exc.args[1])) from exc

        rank = {name: idx for idx, name in enumerate(self.order)}
        self._dependents: dict[str, tuple[str, ...]] = {}
        for name in known:
            seen: set[str] = set()
            stack = list(direct.get(name, ()))
            while stack:
                node = stack.pop()
                if node in seen:
                    continue
                seen.add(node)
                stack.extend(direct.get(node, ()))
            self._dependents[name] = tuple(sorted(seen, key=rank.__getitem__))

    def dependents(self, name: str) -> tuple[str, ...]:
        """Derived attributes affected by *name*, in recomputation order."""
        return self._dependents.get(name, ())
