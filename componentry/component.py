"""
Component Protocols

Base classes a component can inherit to take part in its own lifecycle.
The container only checks for these base classes; it never inspects
anything else about a component's type.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class InitializingComponent(ABC):
    """
    Component that wants a callback once all properties are set.

    Example:
        ```python
        class ConnectionPool(InitializingComponent):
            def after_properties_set(self):
                self.connections = [connect(self.url) for _ in range(self.size)]
        ```
    """

    @abstractmethod
    def after_properties_set(self) -> None:
        """Called after property population, before after-initialization hooks."""


class DisposableComponent(ABC):
    """
    Component that releases resources when its scope ends.

    ``destroy()`` runs once, when the container shuts down (singletons),
    when the owning scope closes (custom scopes), or when the owner calls
    ``ComponentContainer.destroy_bean()`` (prototypes).
    """

    @abstractmethod
    def destroy(self) -> None:
        """Release resources held by this component."""


class FactoryComponent(ABC):
    """
    Component that produces another object.

    ``container.get("name")`` returns the product of ``get_object()``;
    ``container.get("&name")`` returns the factory itself. Products of
    singleton factories are created once and cached.

    Example:
        ```python
        class ClientFactory(FactoryComponent):
            def __init__(self):
                self.base_url = None

            def get_object(self):
                return HttpClient(self.base_url)

            def object_type(self):
                return HttpClient
        ```
    """

    @abstractmethod
    def get_object(self) -> Any:
        """Return the produced object (must not be None)."""

    def object_type(self) -> Optional[type]:
        """Type of the produced object, or None when not known in advance."""
        return None

    def is_singleton(self) -> bool:
        """Whether ``get_object()`` should be called once and its result cached."""
        return True
