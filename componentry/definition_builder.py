"""
DefinitionBuilder

Fluent builder for Definition objects. Every setter returns the builder, so
a definition reads as a single expression. ComponentModule uses it behind
its subscript DSL.

Example::

    definition = (
        DefinitionBuilder.generic("userService", UserService)
        .add_constructor_arg(ComponentReference("userRepository"))
        .add_property_value("timeout", 30)
        .add_property_reference("mailer", "mailService")
        .set_destroy_method("close")
        .get_definition()
    )
    container.register_definition("userService", definition)
"""

from typing import Any, Dict, List, Optional

from .definition import Definition
from .lifecycle import ComponentLifeCycle, INFER_METHOD
from .values import ComponentReference


class DefinitionBuilder:
    """Programmatic construction of a Definition.

    Attributes:
        name: Name the definition is built for
    """

    def __init__(
        self,
        name: str,
        implementation: Any = None,
        parent_name: Optional[str] = None
    ):
        if not name:
            raise ValueError("Definition name must not be empty")
        self.name = name
        self._implementation = implementation
        self._parent_name = parent_name
        self._constructor_args: List[Any] = []
        self._properties: Dict[str, Any] = {}
        self._depends_on: List[str] = []
        self._scope_name = ""
        self._lazy_init: Optional[bool] = None
        self._primary = False
        self._abstract = False
        self._factory_method_name: Optional[str] = None
        self._factory_component_name: Optional[str] = None
        self._init_method_name: Optional[str] = None
        self._destroy_method_name: Optional[str] = None
        self._description: Optional[str] = None

    @classmethod
    def generic(cls, name: str, implementation: Any = None) -> 'DefinitionBuilder':
        """Start a definition without a parent."""
        return cls(name, implementation)

    @classmethod
    def child(cls, name: str, parent_name: str) -> 'DefinitionBuilder':
        """Start a definition inheriting from ``parent_name``."""
        if not parent_name:
            raise ValueError("Parent name must not be empty")
        return cls(name, parent_name=parent_name)

    def set_implementation(self, implementation: Any) -> 'DefinitionBuilder':
        self._implementation = implementation
        return self

    def add_constructor_arg(self, value: Any) -> 'DefinitionBuilder':
        """Append a positional constructor argument (value or reference)."""
        self._constructor_args.append(value)
        return self

    def add_constructor_reference(self, component_name: str) -> 'DefinitionBuilder':
        return self.add_constructor_arg(ComponentReference(component_name))

    def add_property_value(self, property_name: str, value: Any) -> 'DefinitionBuilder':
        """Assign ``value`` to ``property_name``; later calls replace earlier ones."""
        self._properties[property_name] = value
        return self

    def add_property_reference(self, property_name: str, component_name: str) -> 'DefinitionBuilder':
        return self.add_property_value(property_name, ComponentReference(component_name))

    def set_scope(self, scope_name: str) -> 'DefinitionBuilder':
        self._scope_name = scope_name
        return self

    def set_singleton(self) -> 'DefinitionBuilder':
        return self.set_scope(ComponentLifeCycle.SINGLETON.value)

    def set_prototype(self) -> 'DefinitionBuilder':
        return self.set_scope(ComponentLifeCycle.PROTOTYPE.value)

    def set_lazy_init(self, lazy_init: bool) -> 'DefinitionBuilder':
        self._lazy_init = lazy_init
        return self

    def set_primary(self, primary: bool = True) -> 'DefinitionBuilder':
        self._primary = primary
        return self

    def set_abstract(self, abstract: bool = True) -> 'DefinitionBuilder':
        self._abstract = abstract
        return self

    def add_depends_on(self, component_name: str) -> 'DefinitionBuilder':
        """Require ``component_name`` to be created before this component."""
        if component_name not in self._depends_on:
            self._depends_on.append(component_name)
        return self

    def set_factory_method(self, method_name: str) -> 'DefinitionBuilder':
        """Create instances by calling ``implementation.<method_name>(*args)``."""
        self._factory_method_name = method_name
        return self

    def set_factory_component(self, component_name: str, method_name: str) -> 'DefinitionBuilder':
        """Create instances by calling ``<method_name>`` on another component."""
        self._factory_component_name = component_name
        self._factory_method_name = method_name
        return self

    def set_init_method(self, method_name: str) -> 'DefinitionBuilder':
        self._init_method_name = method_name
        return self

    def set_destroy_method(self, method_name: Optional[str] = INFER_METHOD) -> 'DefinitionBuilder':
        """Call ``method_name`` on destruction.

        Without an argument the method is inferred: ``close`` or ``shutdown``,
        whichever the instance has.
        """
        self._destroy_method_name = method_name
        return self

    def set_description(self, description: str) -> 'DefinitionBuilder':
        self._description = description
        return self

    def get_definition(self) -> Definition:
        """Return a new Definition with the current settings."""
        return Definition(
            name=self.name,
            implementation=self._implementation,
            parent_name=self._parent_name,
            constructor_args=tuple(self._constructor_args),
            property_assignments=dict(self._properties),
            scope_name=self._scope_name,
            lazy_init=self._lazy_init,
            primary=self._primary,
            depends_on=tuple(self._depends_on),
            factory_method_name=self._factory_method_name,
            factory_component_name=self._factory_component_name,
            init_method_name=self._init_method_name,
            destroy_method_name=self._destroy_method_name,
            abstract=self._abstract,
            description=self._description,
        )
