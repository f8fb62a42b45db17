"""
ComponentModule

This module provides the DI module class for declaring definitions.
A ComponentModule collects definitions and aliases, and is loaded into a
container as a ConfigSource.

Key features:
- Subscript DSL: module.single["name"](...) and module.prototype["name"](...)
- Scoped definitions within ``with module.scope("request"):`` blocks
- Child definitions inheriting from a parent definition
- Context manager support for cleaner definition blocks

Example::

    module = ComponentModule()
    with module:
        module.single["database"](Database, "sqlite://", destroy_method="close")
        module.prototype["repository"](
            UserRepository,
            properties={"db": module.ref("database")},
        )
        with module.scope("request"):
            module.scoped["requestContext"](RequestContext)
        module.alias("db", "database")

    app = ComponentryCore(sources=[module])
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .definition import Definition
from .definition_builder import DefinitionBuilder
from .exceptions import ComponentryError
from .lifecycle import ComponentLifeCycle
from .strategies import ConfigSource
from .values import ComponentReference


def _build_definition(
    name: str,
    implementation: Any,
    args: Sequence[Any],
    scope_name: str,
    parent: Optional[str] = None,
    properties: Optional[Dict[str, Any]] = None,
    depends_on: Sequence[str] = (),
    lazy_init: Optional[bool] = None,
    primary: bool = False,
    init_method: Optional[str] = None,
    destroy_method: Optional[str] = None,
    factory_method: Optional[str] = None,
    factory_component: Optional[str] = None,
    abstract: bool = False,
    description: Optional[str] = None,
) -> Definition:
    builder = DefinitionBuilder(name, implementation, parent_name=parent)
    builder.set_scope(scope_name).set_primary(primary).set_abstract(abstract)
    for arg in args:
        builder.add_constructor_arg(arg)
    for property_name, value in (properties or {}).items():
        builder.add_property_value(property_name, value)
    for dependency in depends_on:
        builder.add_depends_on(dependency)
    if lazy_init is not None:
        builder.set_lazy_init(lazy_init)
    if init_method:
        builder.set_init_method(init_method)
    if destroy_method:
        builder.set_destroy_method(destroy_method)
    if factory_component:
        builder.set_factory_component(factory_component, factory_method)
    elif factory_method:
        builder.set_factory_method(factory_method)
    if description:
        builder.set_description(description)
    return builder.get_definition()


class RegistrationBuilder:
    """Subscript builder registering definitions of one scope.

    Attributes:
        module: The ComponentModule to register definitions to
        scope_name: Scope given to every definition built here

    Note:
        This class is not used directly. Use module.single, module.prototype
        or module.scoped instead.
    """

    def __init__(self, module: 'ComponentModule', scope_name: str):
        self.module = module
        self.scope_name = scope_name

    def __getitem__(self, name: str) -> Callable[..., None]:
        """Enable subscript syntax: builder["name"](implementation, *args, **options).

        Args:
            name: Component name to register

        Returns:
            A registration function taking the implementation, constructor
            arguments and keyword options (``properties``, ``depends_on``,
            ``lazy_init``, ``primary``, ``init_method``, ``destroy_method``,
            ``factory_method``, ``factory_component``, ``abstract``,
            ``parent``, ``description``)

        Example::

            module.single["cache"](RedisCache, "localhost", 6379,
                                   properties={"ttl": 60})

            # Is equivalent to:
            register = module.single["cache"]
            register(RedisCache, "localhost", 6379, properties={"ttl": 60})
        """

        def register(implementation: Any = None, *args: Any, **options: Any) -> None:
            if (self.scope_name == ComponentLifeCycle.SINGLETON.value
                    and options.get("lazy_init") is None):
                options["lazy_init"] = self.module.lazy_init
            definition = _build_definition(name, implementation, args, self.scope_name, **options)
            self.module.add(name, definition)

        return register


class ChildBuilder:
    """Subscript builder for definitions inheriting from a parent definition.

    Scope, implementation and lazy-init are inherited unless given.

    Example::

        module.single["baseService"](Service, properties={"timeout": 5}, abstract=True)
        module.child["fastService"]("baseService", properties={"timeout": 1})
    """

    def __init__(self, module: 'ComponentModule'):
        self.module = module

    def __getitem__(self, name: str) -> Callable[..., None]:
        def register(parent: str, *args: Any, implementation: Any = None,
                     scope: str = "", **options: Any) -> None:
            definition = _build_definition(
                name, implementation, args, scope, parent=parent, **options
            )
            self.module.add(name, definition)

        return register


class ScopeDefinitionContext:
    """Context manager enabling ``module.scoped`` for one scope name.

    Example::

        with module.scope("request"):
            module.scoped["requestContext"](RequestContext)
    """

    def __init__(self, module: 'ComponentModule', scope_name: str):
        self.module = module
        self.scope_name = scope_name
        self._previous_builder: Optional[RegistrationBuilder] = None

    def __enter__(self) -> 'ScopeDefinitionContext':
        # Save previous scoped builder (for nested scopes)
        self._previous_builder = self.module._current_scoped_builder
        self.module._current_scoped_builder = RegistrationBuilder(self.module, self.scope_name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.module._current_scoped_builder = self._previous_builder
        return False


class ComponentModule(ConfigSource):
    """DI Module for declaring component definitions.

    This class provides the subscript DSL for registering definitions:
    - single["name"]: Register a singleton (same instance reused)
    - prototype["name"]: Register a prototype (new instance per request)
    - scoped["name"]: Register a custom-scoped component (only valid
      within a ``with module.scope("name"):`` block)
    - child["name"]: Register a definition inheriting from another one

    Attributes:
        single: Builder for singleton registrations
        prototype: Builder for prototype registrations
        child: Builder for child definitions
        lazy_init: Default lazy-init flag for singletons of this module

    Example::

        module = ComponentModule(lazy_init=True)
        with module:
            # Singleton - same instance every time, created on first use
            module.single["database"](Database)

            # Prototype - new instance every time
            module.prototype["unitOfWork"](
                UnitOfWork,
                module.ref("database"),
            )
    """

    def __init__(self, lazy_init: bool = False):
        """Initialize a new module with no definitions.

        Args:
            lazy_init: If True, singleton definitions of this module are
                created on first use instead of when the module is loaded
                by ComponentryCore. Defaults to False.
        """
        self.lazy_init = lazy_init
        self._definitions: Dict[str, Definition] = {}
        self._aliases: Dict[str, str] = {}
        self.single = RegistrationBuilder(self, ComponentLifeCycle.SINGLETON.value)
        self.prototype = RegistrationBuilder(self, ComponentLifeCycle.PROTOTYPE.value)
        self.child = ChildBuilder(self)
        self._current_scoped_builder: Optional[RegistrationBuilder] = None

    def __enter__(self) -> 'ComponentModule':
        """Enter context manager for cleaner definition blocks.

        The context manager is optional but provides visual structure
        for module definitions.
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False

    def scope(self, scope_name: str) -> ScopeDefinitionContext:
        """Open a block in which ``module.scoped`` registers ``scope_name`` components."""
        return ScopeDefinitionContext(self, scope_name)

    @property
    def scoped(self) -> RegistrationBuilder:
        """Get the builder for the scope of the enclosing ``scope()`` block.

        Raises:
            ComponentryError: When called outside a scope block
        """
        if self._current_scoped_builder is None:
            raise ComponentryError(
                "scoped[] must be used within a scope context. "
                "Use 'with module.scope(\"name\"):' first."
            )
        return self._current_scoped_builder

    @staticmethod
    def ref(name: str, to_parent: bool = False) -> ComponentReference:
        """Reference to another component, for arguments and properties."""
        return ComponentReference(name, to_parent=to_parent)

    def add(self, name: str, definition: Definition) -> None:
        """Add a prebuilt definition under ``name``.

        Note:
            A later definition with the same name replaces the earlier one
            within this module. Duplicates across modules are detected when
            they are loaded into a container.
        """
        self._definitions[name] = definition

    def alias(self, alias: str, target: str) -> None:
        """Declare ``alias`` as another name for ``target``."""
        self._aliases[alias] = target

    @property
    def definitions(self) -> List[Definition]:
        """Registered definitions in registration order."""
        return list(self._definitions.values())

    def load(self) -> Iterable[Tuple[str, Definition]]:
        return list(self._definitions.items())

    def load_aliases(self) -> Iterable[Tuple[str, str]]:
        return list(self._aliases.items())

    def __repr__(self) -> str:
        return f"ComponentModule(definitions={len(self._definitions)}, aliases={len(self._aliases)})"
