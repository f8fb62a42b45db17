"""
Strategies

Interfaces of the collaborators the container orchestrates but does not
implement itself, with small default implementations:

- ``ConstructionStrategy``: turns a merged definition and resolved
  constructor arguments into a raw instance
- ``ReferenceResolver``: turns a value-or-reference into the value to inject
- ``PropertyBinder``: applies one resolved property value to an instance
- ``ConfigSource``: supplies definitions at bootstrap
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .definition import Definition, RootDefinition
from .exceptions import InstantiationError, NoSuchDefinitionError
from .values import ComponentReference, ManagedList, ManagedMap, ManagedSet

if TYPE_CHECKING:
    from .container import ComponentContainer


class ConstructionStrategy(ABC):
    """Creates raw instances from merged definitions."""

    @abstractmethod
    def instantiate(
        self,
        definition: RootDefinition,
        args: Sequence[Any],
        container: 'ComponentContainer'
    ) -> Any:
        """Create a raw instance.

        Args:
            definition: The merged definition
            args: Constructor arguments, already resolved
            container: The container, for factory-component lookups

        Returns:
            The raw instance

        Raises:
            InstantiationError: When the definition cannot be instantiated
        """


class DefaultConstructionStrategy(ConstructionStrategy):
    """Calls the implementation, or a named factory method, with the arguments.

    - ``factory_component_name`` + ``factory_method_name``: calls the method
      on the named factory component
    - ``factory_method_name`` alone: calls that attribute of ``implementation``
    - otherwise: calls ``implementation`` itself

    The callable resolved from ``implementation`` is cached on the
    definition under its lock.
    """

    def instantiate(
        self,
        definition: RootDefinition,
        args: Sequence[Any],
        container: 'ComponentContainer'
    ) -> Any:
        if definition.factory_component_name:
            target = self._factory_component_method(definition, container)
        else:
            target = self._resolve_constructor(definition)
        return target(*args)

    def _factory_component_method(
        self,
        definition: RootDefinition,
        container: 'ComponentContainer'
    ) -> Any:
        if not definition.factory_method_name:
            raise InstantiationError(
                definition.name,
                f"factory component '{definition.factory_component_name}' "
                f"given without a factory method name"
            )
        factory = container.get(definition.factory_component_name)
        method = getattr(factory, definition.factory_method_name, None)
        if not callable(method):
            raise InstantiationError(
                definition.name,
                f"factory component '{definition.factory_component_name}' has no "
                f"callable '{definition.factory_method_name}'"
            )
        return method

    def _resolve_constructor(self, definition: RootDefinition) -> Any:
        with definition.lock:
            if definition.resolved_constructor is not None:
                return definition.resolved_constructor

            implementation = definition.implementation
            if implementation is None:
                raise InstantiationError(
                    definition.name,
                    "definition has no implementation.\n"
                    "Hint: set Definition.implementation to a class or factory callable"
                )
            target = implementation
            if definition.factory_method_name:
                target = getattr(implementation, definition.factory_method_name, None)
                if target is None:
                    raise InstantiationError(
                        definition.name,
                        f"no factory method '{definition.factory_method_name}' "
                        f"on {implementation!r}"
                    )
            if not callable(target):
                raise InstantiationError(definition.name, f"{target!r} is not callable")

            definition.resolved_constructor = target
            return target


class ReferenceResolver(ABC):
    """Resolves values-or-references to injectable values."""

    @abstractmethod
    def resolve(self, value: Any, requesting_name: str, container: 'ComponentContainer') -> Any:
        """Return the value to inject for ``value``.

        May call back into ``container.get()``, which is how nested creation
        and cycle resolution happen.
        """


class DefaultReferenceResolver(ReferenceResolver):
    """Resolves ComponentReference values and managed collections.

    Managed collections become plain ``list``/``set``/``dict`` values with
    every element (and map key) resolved. Other values pass through.
    """

    def resolve(self, value: Any, requesting_name: str, container: 'ComponentContainer') -> Any:
        if isinstance(value, ComponentReference):
            if value.to_parent:
                if container.parent is None:
                    raise NoSuchDefinitionError(
                        value.name,
                        f"Cannot resolve reference to '{value.name}' from component "
                        f"'{requesting_name}' in parent container: no parent container"
                    )
                return container.parent.get(value.name)
            return container.get(value.name)
        if isinstance(value, ManagedList):
            return [self.resolve(item, requesting_name, container) for item in value]
        if isinstance(value, ManagedSet):
            return {self.resolve(item, requesting_name, container) for item in value}
        if isinstance(value, ManagedMap):
            return {
                self.resolve(key, requesting_name, container):
                    self.resolve(item, requesting_name, container)
                for key, item in value.items()
            }
        return value


class PropertyBinder(ABC):
    """Applies resolved property values to instances."""

    @abstractmethod
    def bind(self, instance: Any, property_name: str, value: Any) -> None:
        """Assign ``value`` to ``property_name`` on ``instance``."""


class DefaultPropertyBinder(PropertyBinder):
    """Binds properties with ``setattr``."""

    def bind(self, instance: Any, property_name: str, value: Any) -> None:
        setattr(instance, property_name, value)


class ConfigSource(ABC):
    """Supplies definitions (and optionally aliases) at bootstrap."""

    @abstractmethod
    def load(self) -> Iterable[Tuple[str, Definition]]:
        """Return (name, definition) pairs in registration order."""

    def load_aliases(self) -> Iterable[Tuple[str, str]]:
        """Return (alias, target) pairs to register after the definitions."""
        return ()


class MappingConfigSource(ConfigSource):
    """ConfigSource over an in-memory collection of definitions.

    Example::

        source = MappingConfigSource(
            [Definition(name="db", implementation=Database)],
            aliases={"database": "db"},
        )
        container.load(source)
    """

    def __init__(
        self,
        definitions: Union[Mapping[str, Definition], Iterable[Definition]],
        aliases: Optional[Mapping[str, str]] = None,
    ):
        if isinstance(definitions, Mapping):
            self._definitions = list(definitions.items())
        else:
            self._definitions = [(d.name, d) for d in definitions]
        self._aliases = list((aliases or {}).items())

    def load(self) -> Iterable[Tuple[str, Definition]]:
        return list(self._definitions)

    def load_aliases(self) -> Iterable[Tuple[str, str]]:
        return list(self._aliases)
