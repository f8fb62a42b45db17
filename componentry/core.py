"""
ComponentryCore

This module provides the application-level facade over a ComponentContainer:
it loads configuration sources, eagerly creates non-lazy singletons and
destroys them when closed.

Use Cases:
    - Application bootstrap and shutdown
    - Test isolation (fresh container per test)
    - Parent/child containers (shared infrastructure, per-tenant components)

Example::

    # Create a container from modules
    app = ComponentryCore(sources=[infrastructure, services])
    service = app.get("userService")

    # Use as context manager for automatic cleanup
    with ComponentryCore(sources=[module]) as app:
        service = app.get("userService")
    # close() destroys all singletons
"""

import logging
from typing import Any, Iterable, List, Optional, Tuple

from .container import ComponentContainer
from .exceptions import ContainerClosedError
from .scope import CachingScope
from .settings import ContainerSettings
from .strategies import ConfigSource

logger = logging.getLogger(__name__)


class ComponentryCore:
    """Closeable application container.

    Attributes:
        _container: Internal ComponentContainer instance
        _closed: Flag indicating if the container has been closed

    Example::

        # Multiple isolated containers can be used simultaneously
        app1 = ComponentryCore(sources=[module1])
        app2 = ComponentryCore(sources=[module2])

        # Child container sees the parent's components
        tenant = ComponentryCore(sources=[tenant_module], parent=app1)
    """

    def __init__(
        self,
        sources: Optional[Iterable[ConfigSource]] = None,
        settings: Optional[ContainerSettings] = None,
        parent: Optional['ComponentryCore'] = None,
    ):
        """Initialize the container and load ``sources``.

        Args:
            sources: ConfigSources (usually ComponentModules) to load initially
            settings: Container settings (defaults apply when omitted)
            parent: Parent whose components this container can resolve

        Example::

            module = ComponentModule()
            with module:
                module.single["database"](Database)

            app = ComponentryCore(sources=[module])
        """
        self._container: ComponentContainer = ComponentContainer(
            settings=settings,
            parent=parent.container if parent is not None else None,
        )
        self._closed: bool = False

        if sources:
            self.load(sources)

    def _ensure_not_closed(self) -> None:
        """Ensure the container is not closed.

        Raises:
            ContainerClosedError: When the container has been closed
        """
        if self._closed:
            raise ContainerClosedError("This container is already closed")

    @property
    def container(self) -> ComponentContainer:
        """The underlying ComponentContainer, for configuration.

        Raises:
            ContainerClosedError: When the container has been closed
        """
        self._ensure_not_closed()
        return self._container

    def get(self, name: str) -> Any:
        """Return the component registered under ``name``.

        Raises:
            ContainerClosedError: When the container has been closed
            NoSuchDefinitionError: When the name is not registered
        """
        self._ensure_not_closed()
        return self._container.get(name)

    def __getitem__(self, name: str):
        """Support subscript syntax: ``app["name"]()``."""
        self._ensure_not_closed()
        return self._container[name]

    def load(self, sources: Iterable[ConfigSource]) -> None:
        """Load additional sources, then create their non-lazy singletons.

        Args:
            sources: ConfigSources to load

        Raises:
            ContainerClosedError: When the container has been closed
            DuplicateDefinitionError: When a source defines a name already registered
        """
        self._ensure_not_closed()
        for source in sources:
            self._container.load(source)
        self._container.pre_instantiate_singletons()

    def create_scope(self, scope_name: str, scope_id: str) -> CachingScope:
        """Create a CachingScope and bind it to ``scope_name``.

        The new scope replaces whichever scope was bound to the name before.
        Closing it destroys the components it created.

        Args:
            scope_name: Custom scope name used by definitions
            scope_id: Unique identifier for this scope instance

        Returns:
            The new CachingScope

        Raises:
            ContainerClosedError: When the container has been closed
            ReservedScopeNameError: For ``"singleton"`` or ``"prototype"``

        Example::

            with app.create_scope("request", "req-1"):
                ctx = app.get("requestContext")
        """
        self._ensure_not_closed()
        scope = CachingScope(scope_id)
        self._container.register_scope(scope_name, scope)
        return scope

    def close(self) -> List[Tuple[str, BaseException]]:
        """Close the container and destroy its singletons.

        Destruction errors are logged and returned, never raised. This
        method is idempotent; later calls return an empty list.

        Returns:
            (name, exception) pairs for every destruction callback that failed
        """
        if self._closed:
            return []
        self._closed = True
        failures = self._container.destroy_singletons()
        if failures:
            logger.warning(
                "%d component(s) failed to shut down cleanly: %s",
                len(failures), ", ".join(name for name, _ in failures)
            )
        return failures

    @property
    def is_closed(self) -> bool:
        """Check whether the container has been closed."""
        return self._closed

    def __enter__(self) -> 'ComponentryCore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Exit context manager and close the container.

        Returns:
            False (exceptions are not suppressed)
        """
        self.close()
        return False
