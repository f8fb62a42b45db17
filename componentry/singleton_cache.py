"""
SingletonCache

Consistency-guaranteeing cache for singleton components.

Each name moves through ``ABSENT -> IN_CREATION -> READY``; a failed creation
goes back to ``ABSENT`` and leaves no trace in the cache. While a name is in
creation, the creating thread may publish an early-reference factory for it.
A nested request for the same name on the same creation path then receives
the early reference instead of recursing, which is how property-level cycles
resolve.

Locking:
    A single reentrant lock guards all bookkeeping. It is released while the
    creator runs, so unrelated names construct in parallel. Requests for a
    name another thread is creating wait on a condition variable until the
    creation finishes or fails. A wait that would close a wait-for cycle
    between creating threads takes the early reference instead, or fails
    with UnresolvableCircularReferenceError rather than deadlocking.
    Early-reference factories run while the lock is held.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Set

from .exceptions import (
    InstantiationError,
    SingletonAlreadyRegisteredError,
    UnresolvableCircularReferenceError,
)

logger = logging.getLogger(__name__)


class SingletonCache:
    """Thread-safe singleton registry with early reference exposure.

    Attributes:
        _singletons: READY instances by name
        _registration_order: Names in the order they became READY
        _in_creation: Names in creation mapped to the creating thread
        _early_factories: Unmaterialised early-reference factories
        _early_references: Materialised early references
        _waiting: Threads waiting on a creation, mapped to the awaited name
        _disposables: Destruction callbacks by name, in registration order
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._singletons: Dict[str, Any] = {}
        self._registration_order: Dict[str, None] = {}
        self._in_creation: Dict[str, int] = {}
        self._creation_check_excluded: Set[str] = set()
        self._early_factories: Dict[str, Callable[[], Any]] = {}
        self._early_references: Dict[str, Any] = {}
        self._waiting: Dict[int, str] = {}
        self._disposables: Dict[str, Callable[[], None]] = {}
        self._destroying = False

    def lookup(self, name: str, allow_early: bool = True) -> Optional[Any]:
        """Return the READY instance, or an early reference on the creating thread.

        Early references are only handed to the thread that is creating
        ``name``: that is the nested, cyclic request. Other threads get
        None here and wait in ``get_singleton()``.

        Args:
            name: Component name
            allow_early: Whether an early reference may be returned

        Returns:
            The instance, an early reference, or None
        """
        with self._lock:
            if name in self._singletons:
                return self._singletons[name]
            if not allow_early:
                return None
            if self._in_creation.get(name) != threading.get_ident():
                return None
            return self._materialize_early(name)

    def get_singleton(self, name: str, creator: Callable[[], Any]) -> Any:
        """Return the singleton ``name``, creating it with ``creator`` if absent.

        Args:
            name: Component name
            creator: Builds the fully initialised instance

        Returns:
            The cached or newly created instance

        Raises:
            UnresolvableCircularReferenceError: When the calling thread is
                already creating ``name`` (a cycle no early reference can
                break), or waiting would deadlock
            InstantiationError: When singletons are being destroyed
        """
        me = threading.get_ident()
        with self._lock:
            while True:
                if name in self._singletons:
                    return self._singletons[name]
                if self._destroying:
                    raise InstantiationError(
                        name,
                        "singleton creation not allowed while singletons of "
                        "this container are being destroyed"
                    )

                owner = self._in_creation.get(name)
                if owner is None:
                    break
                if owner == me:
                    raise UnresolvableCircularReferenceError(
                        f"Requested component '{name}' is currently in creation: "
                        f"is there an unresolvable circular reference?",
                        path=self._creation_path(me),
                    )
                if self._would_deadlock(me, owner):
                    early = self._materialize_early(name)
                    if early is not None:
                        logger.debug(
                            "Breaking cross-thread cycle on '%s' with its early reference", name
                        )
                        return early
                    raise UnresolvableCircularReferenceError(
                        f"Requested component '{name}' is being created by another "
                        f"thread that is waiting on this one: unresolvable circular reference",
                        path=self._creation_path(me) + [name],
                    )

                self._waiting[me] = name
                try:
                    self._changed.wait()
                finally:
                    del self._waiting[me]

            logger.debug("Creating shared instance of singleton '%s'", name)
            self._in_creation[name] = me

        try:
            instance = creator()
        except BaseException:
            with self._lock:
                self._purge(name)
                self._changed.notify_all()
            raise

        with self._lock:
            self._in_creation.pop(name, None)
            self._add(name, instance)
            self._changed.notify_all()
        return instance

    def add_early_reference_factory(self, name: str, factory: Callable[[], Any]) -> None:
        """Publish a factory producing an early reference to ``name``.

        Ignored once ``name`` is READY. Replaces any earlier factory and
        forgets an earlier materialised reference.
        """
        with self._lock:
            if name not in self._singletons:
                self._early_factories[name] = factory
                self._early_references.pop(name, None)

    def early_reference(self, name: str) -> Optional[Any]:
        """Return the early reference for ``name`` if one was materialised."""
        with self._lock:
            return self._early_references.get(name)

    def register_singleton(self, name: str, instance: Any) -> None:
        """Register an externally created object as a READY singleton.

        Raises:
            SingletonAlreadyRegisteredError: When ``name`` is already READY
        """
        if instance is None:
            raise ValueError("Singleton object must not be None")
        with self._lock:
            if name in self._singletons:
                raise SingletonAlreadyRegisteredError(name)
            self._add(name, instance)
            self._changed.notify_all()

    def remove(self, name: str) -> Optional[Any]:
        """Remove every trace of ``name``, returning the READY instance if any."""
        with self._lock:
            instance = self._singletons.pop(name, None)
            self._registration_order.pop(name, None)
            self._early_factories.pop(name, None)
            self._early_references.pop(name, None)
            return instance

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._singletons

    def names(self) -> List[str]:
        """READY names in registration order."""
        with self._lock:
            return list(self._registration_order)

    def count(self) -> int:
        with self._lock:
            return len(self._singletons)

    def is_in_creation(self, name: str) -> bool:
        with self._lock:
            return name in self._in_creation and name not in self._creation_check_excluded

    def set_in_creation_check_excluded(self, name: str, excluded: bool) -> None:
        """Exclude ``name`` from (or restore it to) in-creation checks."""
        with self._lock:
            if excluded:
                self._creation_check_excluded.add(name)
            else:
                self._creation_check_excluded.discard(name)

    # -- destruction bookkeeping --------------------------------------------

    def register_disposable(self, name: str, callback: Callable[[], None]) -> None:
        with self._lock:
            self._disposables[name] = callback

    def pop_disposable(self, name: str) -> Optional[Callable[[], None]]:
        with self._lock:
            return self._disposables.pop(name, None)

    def disposable_names(self) -> List[str]:
        with self._lock:
            return list(self._disposables)

    def set_destroying(self, destroying: bool) -> None:
        with self._lock:
            self._destroying = destroying

    def clear(self) -> None:
        """Drop all cached state."""
        with self._lock:
            self._singletons.clear()
            self._registration_order.clear()
            self._early_factories.clear()
            self._early_references.clear()
            self._disposables.clear()
            self._changed.notify_all()

    # -- internals ----------------------------------------------------------

    def _add(self, name: str, instance: Any) -> None:
        self._singletons[name] = instance
        self._registration_order[name] = None
        self._early_factories.pop(name, None)
        self._early_references.pop(name, None)

    def _purge(self, name: str) -> None:
        self._in_creation.pop(name, None)
        self._singletons.pop(name, None)
        self._registration_order.pop(name, None)
        self._early_factories.pop(name, None)
        self._early_references.pop(name, None)

    def _materialize_early(self, name: str) -> Optional[Any]:
        if name in self._early_references:
            return self._early_references[name]
        factory = self._early_factories.pop(name, None)
        if factory is None:
            return None
        reference = factory()
        self._early_references[name] = reference
        return reference

    def _would_deadlock(self, me: int, owner: int) -> bool:
        seen: Set[int] = set()
        thread: Optional[int] = owner
        while thread is not None and thread not in seen:
            if thread == me:
                return True
            seen.add(thread)
            awaited = self._waiting.get(thread)
            if awaited is None:
                return False
            thread = self._in_creation.get(awaited)
        return False

    def _creation_path(self, thread: int) -> List[str]:
        return [name for name, owner in self._in_creation.items() if owner == thread]
