"""
Scope

Scope strategies decide where instances of a component live. The container
hands a strategy the component name and a creator callable; the strategy
returns a cached instance or calls the creator and caches the result.

Built-in strategies:

- ``PrototypeScope``: never caches, every request creates a new instance
- ``CachingScope``: an explicit scope instance (one request, one session...)
  that caches until ``close()`` and then runs destruction callbacks
- ``ThreadLocalScope``: one cache per thread

Singleton scope is not a strategy object: the container manages it with the
``SingletonCache``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .exceptions import CurrentlyInCreationError, ScopeClosedError

logger = logging.getLogger(__name__)


class ScopeStrategy(ABC):
    """Strategy contract for custom scopes.

    Implementations must be thread-safe: the container may call them from
    any thread.
    """

    @abstractmethod
    def get(self, name: str, creator: Callable[[], Any]) -> Any:
        """Return the instance cached under ``name``, creating it if needed.

        Args:
            name: Component name
            creator: Builds a fully initialised instance

        Returns:
            The (possibly new) instance
        """

    @abstractmethod
    def remove(self, name: str) -> Optional[Any]:
        """Remove ``name`` from the scope, returning the removed instance.

        The destruction callback registered for ``name`` is dropped, not run;
        the caller is responsible for destroying the returned instance.
        """

    @abstractmethod
    def register_destruction_callback(self, name: str, callback: Callable[[], None]) -> None:
        """Register a callback to run when ``name`` is destroyed with the scope."""

    def conversation_id(self) -> Optional[str]:
        """Identifier of the current underlying scope, if any."""
        return None


class PrototypeScope(ScopeStrategy):
    """Strategy that never caches.

    Destruction callbacks are not retained: prototype instances are owned by
    the caller, who destroys them through ``ComponentContainer.destroy_bean()``.
    """

    def get(self, name: str, creator: Callable[[], Any]) -> Any:
        return creator()

    def remove(self, name: str) -> Optional[Any]:
        return None

    def register_destruction_callback(self, name: str, callback: Callable[[], None]) -> None:
        pass


class CachingScope(ScopeStrategy):
    """Runtime scope instance caching one instance per component name.

    A CachingScope represents a single instance of a scope (e.g., one HTTP
    request). Register it with the container under a scope name, resolve
    components, then close it to run the destruction callbacks.

    Attributes:
        scope_id: Unique identifier for this scope instance

    Example::

        request_scope = CachingScope("req-123")
        container.register_scope("request", request_scope)

        ctx = container.get("requestContext")   # Created and cached
        ctx2 = container.get("requestContext")  # Same instance

        request_scope.close()  # Destruction callbacks run, cache cleared
    """

    def __init__(self, scope_id: str):
        """Initialize a new scope instance.

        Args:
            scope_id: Unique identifier for this scope instance
        """
        self.scope_id = scope_id
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._instances: Dict[str, Any] = {}
        self._in_creation: Dict[str, int] = {}
        self._callbacks: Dict[str, Callable[[], None]] = {}
        self._closed = False

    def _ensure_not_closed(self) -> None:
        """Ensure the scope is not closed.

        Raises:
            ScopeClosedError: When the scope has been closed
        """
        if self._closed:
            raise ScopeClosedError(
                f"Scope '{self.scope_id}' has been closed. "
                "Cannot resolve components from a closed scope."
            )

    def get(self, name: str, creator: Callable[[], Any]) -> Any:
        """Return the cached instance for ``name`` or create and cache it.

        The scope lock is released while ``creator`` runs, so different
        names build in parallel. A request for a name another thread is
        creating waits for that creation to finish or fail.

        Raises:
            ScopeClosedError: When the scope has been closed
            CurrentlyInCreationError: When the calling thread is already
                creating ``name``
        """
        me = threading.get_ident()
        with self._lock:
            while True:
                self._ensure_not_closed()
                if name in self._instances:
                    return self._instances[name]
                owner = self._in_creation.get(name)
                if owner is None:
                    break
                if owner == me:
                    raise CurrentlyInCreationError(name)
                self._changed.wait()
            self._in_creation[name] = me

        instance = None
        try:
            instance = creator()
        finally:
            with self._lock:
                del self._in_creation[name]
                if instance is not None and not self._closed:
                    self._instances[name] = instance
                self._changed.notify_all()
        return instance

    def remove(self, name: str) -> Optional[Any]:
        with self._lock:
            self._callbacks.pop(name, None)
            return self._instances.pop(name, None)

    def register_destruction_callback(self, name: str, callback: Callable[[], None]) -> None:
        with self._lock:
            self._ensure_not_closed()
            self._callbacks[name] = callback

    def conversation_id(self) -> Optional[str]:
        return self.scope_id

    def close(self) -> List[Tuple[str, BaseException]]:
        """Close this scope, run destruction callbacks and release instances.

        Callbacks run in registration order. A failing callback is logged
        and recorded; the remaining callbacks still run. This method is
        idempotent.

        Returns:
            (name, exception) pairs for every callback that failed
        """
        with self._lock:
            if self._closed:
                return []
            self._closed = True
            callbacks = list(self._callbacks.items())
            self._callbacks.clear()
            self._instances.clear()
            self._changed.notify_all()

        failures: List[Tuple[str, BaseException]] = []
        for name, callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(
                    "Destruction callback for '%s' in scope '%s' failed",
                    name, self.scope_id, exc_info=True
                )
                failures.append((name, e))
        return failures

    @property
    def is_closed(self) -> bool:
        """Check whether this scope has been closed."""
        return self._closed

    def __enter__(self) -> 'CachingScope':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


class ThreadLocalScope(ScopeStrategy):
    """Scope holding one instance per component name per thread.

    Destruction callbacks are not supported: thread-local instances live as
    long as their thread and are dropped with it.
    """

    def __init__(self):
        self._local = threading.local()
        self._lock = threading.Lock()
        self._warned: Set[str] = set()

    def _instances(self) -> Dict[str, Any]:
        instances = getattr(self._local, "instances", None)
        if instances is None:
            instances = {}
            self._local.instances = instances
        return instances

    def get(self, name: str, creator: Callable[[], Any]) -> Any:
        instances = self._instances()
        if name not in instances:
            instances[name] = creator()
        return instances[name]

    def remove(self, name: str) -> Optional[Any]:
        return self._instances().pop(name, None)

    def register_destruction_callback(self, name: str, callback: Callable[[], None]) -> None:
        with self._lock:
            if name in self._warned:
                return
            self._warned.add(name)
        logger.warning(
            "ThreadLocalScope does not support destruction callbacks; "
            "consider using a CachingScope for '%s'", name
        )

    def conversation_id(self) -> Optional[str]:
        return threading.current_thread().name
