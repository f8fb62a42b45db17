"""
DependencyGraph

Records which components depend on which. An edge ``dependent -> name``
means the dependent used ``name`` (through a resolved reference or a
``depends_on`` declaration), so the dependent must be destroyed first.

Edges are only ever added during normal operation; they are removed when a
component is destroyed or the whole graph is cleared at shutdown.
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, Iterable, List, Set

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Thread-safe dependent/dependency edge tracker.

    Example::

        graph = DependencyGraph()
        graph.register_dependent("db", "repository")  # repository uses db

        graph.dependents_of("db")           # {"repository"}
        graph.dependencies_of("repository") # {"db"}
        graph.destroy_order(["db", "repository"])  # ["repository", "db"]
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._dependents: Dict[str, Set[str]] = defaultdict(set)
        self._dependencies: Dict[str, Set[str]] = defaultdict(set)

    def register_dependent(self, name: str, dependent_name: str) -> None:
        """Record that ``dependent_name`` depends on ``name``.

        Self edges are ignored. Registering the same edge twice is a no-op.
        """
        if name == dependent_name:
            return
        with self._lock:
            self._dependents[name].add(dependent_name)
            self._dependencies[dependent_name].add(name)

    def dependents_of(self, name: str) -> Set[str]:
        with self._lock:
            return set(self._dependents.get(name, ()))

    def dependencies_of(self, name: str) -> Set[str]:
        with self._lock:
            return set(self._dependencies.get(name, ()))

    def has_dependents(self, name: str) -> bool:
        with self._lock:
            return bool(self._dependents.get(name))

    def is_dependent(self, name: str, dependent_name: str) -> bool:
        """Check whether ``dependent_name`` depends on ``name``, transitively.

        Used to reject circular ``depends_on`` declarations before they
        turn into endless recursion.
        """
        with self._lock:
            seen: Set[str] = set()
            pending = [name]
            while pending:
                current = pending.pop()
                if current in seen:
                    continue
                seen.add(current)
                dependents = self._dependents.get(current, ())
                if dependent_name in dependents:
                    return True
                pending.extend(dependents)
            return False

    def remove(self, name: str) -> None:
        """Drop every edge touching ``name``."""
        with self._lock:
            for dependent in self._dependents.pop(name, ()):
                self._dependencies[dependent].discard(name)
            for dependency in self._dependencies.pop(name, ()):
                self._dependents[dependency].discard(name)

    def clear(self) -> None:
        with self._lock:
            self._dependents.clear()
            self._dependencies.clear()

    def destroy_order(self, names: Iterable[str]) -> List[str]:
        """Order ``names`` so that every dependent comes before what it uses.

        ``names`` must be given in registration order. Components are
        repeatedly picked, latest registered first, once all of their
        dependents inside ``names`` have been picked. If the remaining
        components form a cycle the rest are appended in reverse
        registration order and a warning is logged; this never raises.

        Args:
            names: Live component names in registration order

        Returns:
            The destruction order
        """
        ordered_input = list(dict.fromkeys(names))
        live = set(ordered_input)
        with self._lock:
            pending_dependents = {
                name: set(self._dependents.get(name, ())) & live
                for name in ordered_input
            }

        order: List[str] = []
        remaining = list(reversed(ordered_input))
        while remaining:
            for name in remaining:
                if not pending_dependents[name]:
                    break
            else:
                logger.warning(
                    "Dependency cycle among components %s; destroying them "
                    "in reverse registration order", remaining
                )
                order.extend(remaining)
                break

            remaining.remove(name)
            order.append(name)
            for dependents in pending_dependents.values():
                dependents.discard(name)

        return order
