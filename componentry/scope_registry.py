"""
ScopeRegistry

Maps scope names to ScopeStrategy instances. ``"singleton"`` and
``"prototype"`` are built in and cannot be rebound.
"""

import logging
import threading
from typing import Dict, List, Optional

from .exceptions import ReservedScopeNameError
from .lifecycle import ComponentLifeCycle
from .scope import PrototypeScope, ScopeStrategy

logger = logging.getLogger(__name__)

RESERVED_SCOPE_NAMES = frozenset(scope.value for scope in ComponentLifeCycle)


class ScopeRegistry:
    """Thread-safe registry of custom scope strategies.

    Rebinding a custom scope name only affects later lookups; instances
    already cached by the previous strategy stay where they are.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._scopes: Dict[str, ScopeStrategy] = {}
        self._prototype = PrototypeScope()

    def register(self, scope_name: str, strategy: ScopeStrategy) -> None:
        """Bind ``scope_name`` to ``strategy``.

        Raises:
            ReservedScopeNameError: For ``"singleton"`` or ``"prototype"``
            ValueError: For an empty scope name
        """
        if not scope_name:
            raise ValueError("Scope name must not be empty")
        if scope_name in RESERVED_SCOPE_NAMES:
            raise ReservedScopeNameError(scope_name)

        with self._lock:
            previous = self._scopes.get(scope_name)
            self._scopes[scope_name] = strategy
        if previous is not None and previous is not strategy:
            logger.info(
                "Replacing scope '%s': %r -> %r", scope_name, previous, strategy
            )

    def get(self, scope_name: str) -> Optional[ScopeStrategy]:
        """Return the strategy for ``scope_name``, or None when unknown.

        ``"prototype"`` returns the built-in PrototypeScope; ``"singleton"``
        returns None because singletons are handled by the SingletonCache.
        """
        if scope_name == ComponentLifeCycle.PROTOTYPE.value:
            return self._prototype
        with self._lock:
            return self._scopes.get(scope_name)

    def names(self) -> List[str]:
        """Registered custom scope names; built-in scopes are excluded."""
        with self._lock:
            return list(self._scopes)

    def items(self) -> Dict[str, ScopeStrategy]:
        with self._lock:
            return dict(self._scopes)
