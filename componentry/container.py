"""
ComponentContainer

This module provides the lifecycle engine of Componentry. It is the heart of
the runtime, responsible for:

- Storing definitions and aliases (through its DefinitionStore)
- Creating components: construction, property population, initialization
- Caching instances per scope (singleton, prototype, custom scopes)
- Breaking property-level reference cycles with early references
- Destroying components in dependency order

Containers can be nested: a container with a parent delegates every name it
does not define itself to the parent.

The container is usually driven through ComponentryCore, which loads sources,
pre-instantiates singletons and destroys them on close.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .component import FactoryComponent, InitializingComponent
from .definition import Definition, RootDefinition
from .dependency_graph import DependencyGraph
from .definition_store import DefinitionStore
from .disposable import DisposableAdapter, requires_destruction
from .exceptions import (
    AbstractDefinitionError,
    AliasInUseError,
    ComponentryError,
    CurrentlyInCreationError,
    CycleIdentityError,
    CyclicDependencyError,
    InstantiationError,
    MissingDependencyError,
    NoSuchDefinitionError,
    NoSuchScopeError,
    NotAFactoryError,
)
from .lifecycle import FACTORY_PREFIX, INFER_METHOD
from .post_processor import ComponentPostProcessor, PostProcessorPipeline
from .resolution_context import ResolutionContext, _resolution_context
from .scope import ScopeStrategy
from .scope_registry import RESERVED_SCOPE_NAMES, ScopeRegistry
from .settings import ContainerSettings
from .singleton_cache import SingletonCache
from .strategies import (
    ConfigSource,
    ConstructionStrategy,
    DefaultConstructionStrategy,
    DefaultPropertyBinder,
    DefaultReferenceResolver,
    PropertyBinder,
    ReferenceResolver,
)

logger = logging.getLogger(__name__)

DestructionFailures = List[Tuple[str, BaseException]]


class ComponentContainer:
    """Component registry and lifecycle engine.

    Creation of a component named ``n``:

    1. A cached singleton (or manually registered object) is returned as is
    2. Names unknown here are delegated to the parent container
    3. The merged definition is looked up; abstract definitions are rejected
    4. ``depends_on`` components are created first
    5. The scope decides whether to reuse or create: singletons go through
       the SingletonCache, prototypes are always created, custom scopes ask
       their ScopeStrategy
    6. Creation runs post-processors, construction, property population and
       init callbacks, exposing an early reference for singletons so that
       property-level cycles resolve

    Attributes:
        settings: The container's ContainerSettings
        parent: Parent container, or None

    Example::

        container = ComponentContainer()
        container.register_definition("db", Definition(name="db", implementation=Database))
        container.register_definition("repo", Definition(
            name="repo",
            implementation=Repository,
            property_assignments={"db": ComponentReference("db")},
        ))

        repo = container.get("repo")
        assert repo.db is container.get("db")

        container.destroy_singletons()
    """

    def __init__(
        self,
        settings: Optional[ContainerSettings] = None,
        parent: Optional['ComponentContainer'] = None,
        construction_strategy: Optional[ConstructionStrategy] = None,
        reference_resolver: Optional[ReferenceResolver] = None,
        property_binder: Optional[PropertyBinder] = None,
    ):
        self.settings = settings or ContainerSettings()
        self.parent = parent
        self.construction_strategy = construction_strategy or DefaultConstructionStrategy()
        self.reference_resolver = reference_resolver or DefaultReferenceResolver()
        self.property_binder = property_binder or DefaultPropertyBinder()

        self._store = DefinitionStore(
            self.settings,
            parent=parent._store if parent is not None else None,
        )
        self._singletons = SingletonCache()
        self._dependency_graph = DependencyGraph()
        self._scopes = ScopeRegistry()
        self._pipeline = PostProcessorPipeline()
        self._products_lock = threading.Lock()
        self._factory_products: Dict[str, Any] = {}

    # -- retrieval -----------------------------------------------------------

    def get(self, name: str) -> Any:
        """Return the component registered under ``name``.

        When called while another component of this container is being
        created, the requested component is recorded as a dependency of it.

        Args:
            name: Component name or alias. Prefix a FactoryComponent's name
                with ``&`` to get the factory instead of its product.

        Returns:
            The component instance

        Raises:
            NoSuchDefinitionError: When the name is not registered
            CyclicDependencyError: When a circular ``depends_on`` or an
                endless creation path is detected
            UnresolvableCircularReferenceError: When a cycle cannot be
                broken with an early reference
            InstantiationError: When creating the component fails
        """
        ctx = _resolution_context.get()
        instance = self._do_get(name)
        if ctx is not None and ctx.container is self:
            self._dependency_graph.register_dependent(self._transformed_name(name), ctx.name)
        return instance

    def __getitem__(self, name: str) -> Callable[[], Any]:
        """Support subscript syntax: ``container["name"]()``.

        Example::

            # These are equivalent:
            service = container["service"]()
            service = container.get("service")
        """

        def getter() -> Any:
            return self.get(name)

        return getter

    def _transformed_name(self, name: str) -> str:
        return self._store.canonical_name(name.lstrip(FACTORY_PREFIX))

    def _do_get(self, name: str) -> Any:
        bean_name = self._transformed_name(name)
        is_dereference = name.startswith(FACTORY_PREFIX)

        shared = self._singletons.lookup(bean_name)
        if shared is not None:
            return self._object_for_instance(shared, name, bean_name)

        if not self._store.contains_local(bean_name) and self.parent is not None:
            return self.parent.get(FACTORY_PREFIX + bean_name if is_dereference else bean_name)

        merged = self._store.get_merged(bean_name)
        if merged.abstract:
            raise AbstractDefinitionError(bean_name)

        for dependency in merged.depends_on:
            if self._dependency_graph.is_dependent(bean_name, dependency):
                raise CyclicDependencyError(
                    f"Circular depends-on relationship between '{bean_name}' "
                    f"and '{dependency}'",
                    path=[bean_name, dependency],
                )
            if not self.contains(dependency):
                raise MissingDependencyError(bean_name, dependency)
            self._dependency_graph.register_dependent(
                self._transformed_name(dependency), bean_name
            )
            self._do_get(dependency)

        if merged.is_singleton:
            instance = self._singletons.get_singleton(
                bean_name, lambda: self._create_guarded(bean_name, merged)
            )
            return self._object_for_instance(instance, name, bean_name)

        ctx = _resolution_context.get()
        if ctx is not None and ctx.is_prototype_in_creation(self, bean_name):
            raise CurrentlyInCreationError(bean_name)

        if merged.is_prototype:
            instance = self._create_guarded(bean_name, merged)
        else:
            strategy = self._scopes.get(merged.scope_name)
            if strategy is None:
                raise NoSuchScopeError(merged.scope_name, bean_name)
            instance = strategy.get(bean_name, lambda: self._create_guarded(bean_name, merged))
        return self._object_for_instance(instance, name, bean_name)

    def _object_for_instance(self, instance: Any, name: str, bean_name: str) -> Any:
        """Return ``instance`` or, for a FactoryComponent, its product."""
        if name.startswith(FACTORY_PREFIX):
            if not isinstance(instance, FactoryComponent):
                raise NotAFactoryError(bean_name, type(instance))
            return instance
        if not isinstance(instance, FactoryComponent):
            return instance

        if not (instance.is_singleton() and self._singletons.contains(bean_name)):
            return self._produce(instance, bean_name)

        with self._products_lock:
            product = self._factory_products.get(bean_name)
        if product is not None:
            return product

        product = self._produce(instance, bean_name)
        with self._products_lock:
            return self._factory_products.setdefault(bean_name, product)

    def _produce(self, factory: FactoryComponent, bean_name: str) -> Any:
        try:
            product = factory.get_object()
        except ComponentryError:
            raise
        except Exception as e:
            raise InstantiationError(
                bean_name, f"FactoryComponent raised exception on object creation: {e}"
            ) from e
        if product is None:
            raise InstantiationError(bean_name, "FactoryComponent returned None from get_object()")
        return self._pipeline.apply_after_initialization(product, bean_name)

    # -- creation ------------------------------------------------------------

    def _create_guarded(self, bean_name: str, merged: RootDefinition) -> Any:
        """Create a component inside its own resolution context frame."""
        parent_ctx = _resolution_context.get()
        ctx = ResolutionContext(
            self, bean_name, prototype=not merged.is_singleton, parent=parent_ctx
        )
        if ctx.depth > self.settings.max_creation_depth:
            raise CyclicDependencyError(
                f"Creation of component '{bean_name}' exceeds the maximum depth of "
                f"{self.settings.max_creation_depth} nested creations: "
                f"is there a circular dependency?",
                path=ctx.path(),
            )

        token = _resolution_context.set(ctx)
        try:
            return self._create_component(bean_name, merged)
        except ComponentryError:
            raise
        except RecursionError as e:
            # An overflow while converting propagates to the next outer frame
            raise CyclicDependencyError(
                f"Creation of component '{bean_name}' exhausted the interpreter stack "
                f"at depth {ctx.depth}: is there a circular dependency?",
                path=ctx.path(),
            ) from e
        except Exception as e:
            raise InstantiationError(bean_name, f"{type(e).__name__}: {e}") from e
        finally:
            _resolution_context.reset(token)

    def _create_component(self, bean_name: str, merged: RootDefinition) -> Any:
        logger.debug("Creating instance of component '%s'", bean_name)
        self._apply_merged_definition_processors(merged, bean_name)

        if self._pipeline.has_instantiation_aware():
            replacement = self._pipeline.apply_before_instantiation(merged, bean_name)
            with merged.lock:
                merged.before_instantiation_resolved = replacement is not None
            if replacement is not None:
                logger.debug("Component '%s' supplied by a post-processor", bean_name)
                return self._pipeline.apply_after_initialization(replacement, bean_name)

        args = [
            self.reference_resolver.resolve(arg, bean_name, self)
            for arg in merged.constructor_args
        ]
        raw = self.construction_strategy.instantiate(merged, args, self)
        if raw is None:
            raise InstantiationError(bean_name, "construction strategy returned None")
        with merged.lock:
            merged.resolved_type = type(raw)

        early_exposure = (
            merged.is_singleton
            and self.settings.allow_circular_references
            and self._singletons.is_in_creation(bean_name)
        )
        if early_exposure:
            logger.debug("Eagerly caching component '%s' to allow circular references", bean_name)
            self._singletons.add_early_reference_factory(
                bean_name, lambda: self._pipeline.apply_early_reference(raw, bean_name)
            )

        self._populate(bean_name, merged, raw)
        exposed = self._initialize(bean_name, merged, raw)

        if early_exposure:
            exposed = self._check_early_identity(bean_name, raw, exposed)

        self._register_disposable_if_necessary(bean_name, raw, merged)
        return exposed

    def _apply_merged_definition_processors(self, merged: RootDefinition, bean_name: str) -> None:
        with merged.lock:
            if merged.post_processed:
                return
            self._pipeline.apply_merged_definition(merged, bean_name)
            merged.post_processed = True

    def _populate(self, bean_name: str, merged: RootDefinition, instance: Any) -> None:
        if not self._pipeline.apply_after_instantiation(instance, bean_name):
            return

        properties = self._pipeline.apply_process_properties(
            dict(merged.property_assignments), instance, bean_name
        )
        if properties is None:
            return

        for property_name, value in properties.items():
            resolved = self.reference_resolver.resolve(value, bean_name, self)
            self.property_binder.bind(instance, property_name, resolved)

    def _initialize(self, bean_name: str, merged: RootDefinition, instance: Any) -> Any:
        current = self._pipeline.apply_before_initialization(instance, bean_name)
        self._invoke_init_methods(bean_name, merged, current)
        return self._pipeline.apply_after_initialization(current, bean_name)

    def _invoke_init_methods(self, bean_name: str, merged: RootDefinition, instance: Any) -> None:
        is_initializing = isinstance(instance, InitializingComponent)
        if is_initializing and not merged.has_any_externally_managed_init_method(
                "after_properties_set"):
            logger.debug("Invoking after_properties_set() on component '%s'", bean_name)
            instance.after_properties_set()

        method_name = merged.init_method_name
        if not method_name or method_name == INFER_METHOD:
            return
        if is_initializing and method_name == "after_properties_set":
            return
        if merged.has_any_externally_managed_init_method(method_name):
            return

        method = getattr(instance, method_name, None)
        if method is None:
            raise InstantiationError(
                bean_name, f"Could not find an init method named '{method_name}'"
            )
        logger.debug("Invoking init method '%s' on component '%s'", method_name, bean_name)
        method()

    def _check_early_identity(self, bean_name: str, raw: Any, exposed: Any) -> Any:
        early = self._singletons.early_reference(bean_name)
        if early is None:
            return exposed
        if exposed is raw or exposed is early:
            return early
        if (not self.settings.allow_raw_injection_despite_wrapping
                and self._dependency_graph.has_dependents(bean_name)):
            raise CycleIdentityError(
                bean_name, sorted(self._dependency_graph.dependents_of(bean_name))
            )
        return exposed

    def _register_disposable_if_necessary(
        self,
        bean_name: str,
        instance: Any,
        merged: RootDefinition
    ) -> None:
        if merged.is_prototype:
            return
        if not requires_destruction(instance, merged, self._pipeline):
            return

        adapter = DisposableAdapter(bean_name, instance, merged, self._pipeline)
        if merged.is_singleton:
            self._singletons.register_disposable(bean_name, adapter)
        else:
            strategy = self._scopes.get(merged.scope_name)
            if strategy is None:
                raise NoSuchScopeError(merged.scope_name, bean_name)
            strategy.register_destruction_callback(bean_name, adapter)

    def pre_instantiate_singletons(self) -> None:
        """Create every non-abstract, non-lazy singleton defined here.

        FactoryComponents are created, their products are not.
        """
        names = self._store.names()
        logger.debug("Pre-instantiating singletons in %r: %s", self, names)
        for name in names:
            merged = self._store.get_merged(name)
            if merged.abstract or not merged.is_singleton or merged.is_lazy_init:
                continue
            if self.is_factory_component(name):
                self.get(FACTORY_PREFIX + name)
            else:
                self.get(name)

    # -- queries -------------------------------------------------------------

    def contains(self, name: str) -> bool:
        """Check this container and its ancestors for a definition or singleton."""
        if self.contains_local(name):
            if name.startswith(FACTORY_PREFIX):
                return self.is_factory_component(name)
            return True
        return self.parent is not None and self.parent.contains(name)

    def contains_local(self, name: str) -> bool:
        bean_name = self._transformed_name(name)
        return self._singletons.contains(bean_name) or self._store.contains_local(bean_name)

    def _delegates(self, bean_name: str) -> bool:
        return (self.parent is not None
                and not self._singletons.contains(bean_name)
                and not self._store.contains_local(bean_name))

    def is_singleton(self, name: str) -> bool:
        """Check whether ``get(name)`` always returns the same instance.

        Raises:
            NoSuchDefinitionError: When the name is not registered
        """
        bean_name = self._transformed_name(name)
        is_dereference = name.startswith(FACTORY_PREFIX)

        instance = self._singletons.lookup(bean_name, allow_early=False)
        if instance is not None:
            if isinstance(instance, FactoryComponent):
                return is_dereference or instance.is_singleton()
            return not is_dereference

        if self._delegates(bean_name):
            return self.parent.is_singleton(name)

        merged = self._store.get_merged(bean_name)
        if not merged.is_singleton:
            return False
        if self.is_factory_component(bean_name) and not is_dereference:
            return self.get(FACTORY_PREFIX + bean_name).is_singleton()
        return not is_dereference or self.is_factory_component(bean_name)

    def is_prototype(self, name: str) -> bool:
        """Check whether ``get(name)`` returns a new instance each time.

        Raises:
            NoSuchDefinitionError: When the name is not registered
        """
        bean_name = self._transformed_name(name)

        if self._delegates(bean_name):
            return self.parent.is_prototype(name)
        if self._singletons.contains(bean_name) and not self._store.contains_local(bean_name):
            return False

        merged = self._store.get_merged(bean_name)
        if merged.is_prototype:
            return not name.startswith(FACTORY_PREFIX) or self.is_factory_component(bean_name)
        if name.startswith(FACTORY_PREFIX) or not self.is_factory_component(bean_name):
            return False
        factory = self.get(FACTORY_PREFIX + bean_name)
        return not factory.is_singleton()

    def is_factory_component(self, name: str) -> bool:
        """Check whether ``name`` is a FactoryComponent, without creating it."""
        bean_name = self._transformed_name(name)
        instance = self._singletons.lookup(bean_name, allow_early=False)
        if instance is not None:
            return isinstance(instance, FactoryComponent)
        if self._delegates(bean_name):
            return self.parent.is_factory_component(name)
        target = self._store.get_merged(bean_name).target_type
        return isinstance(target, type) and issubclass(target, FactoryComponent)

    def get_type(self, name: str) -> Optional[type]:
        """Return the type ``get(name)`` would produce, or None when unknown.

        Does not create the component. The product type of a FactoryComponent
        is only known once the factory exists.
        """
        bean_name = self._transformed_name(name)
        is_dereference = name.startswith(FACTORY_PREFIX)

        instance = self._singletons.lookup(bean_name, allow_early=False)
        if instance is not None:
            if isinstance(instance, FactoryComponent) and not is_dereference:
                return instance.object_type()
            return type(instance)

        if self._delegates(bean_name):
            return self.parent.get_type(name)

        merged = self._store.get_merged(bean_name)
        target = merged.target_type
        if (target is not None and issubclass(target, FactoryComponent)
                and not is_dereference):
            return None
        return target

    def get_aliases(self, name: str) -> List[str]:
        """Return the other names ``name`` is known by.

        For an alias this includes the canonical name. Aliases defined in
        ancestor containers are included.
        """
        prefix = FACTORY_PREFIX if name.startswith(FACTORY_PREFIX) else ""
        stripped = name.lstrip(FACTORY_PREFIX)
        bean_name = self._store.canonical_name(stripped)

        aliases = []
        if bean_name != stripped:
            aliases.append(prefix + bean_name)
        for alias in self._store.aliases_for(bean_name):
            if alias != stripped:
                aliases.append(prefix + alias)
        if self._delegates(bean_name):
            aliases.extend(
                alias for alias in self.parent.get_aliases(prefix + bean_name)
                if alias not in aliases and alias != name
            )
        return aliases

    def get_merged_definition(self, name: str) -> RootDefinition:
        """Return the merged definition for ``name``, consulting ancestors.

        Raises:
            NoSuchDefinitionError: When no definition is registered
        """
        bean_name = self._transformed_name(name)
        if not self._store.contains_local(bean_name) and self.parent is not None:
            return self.parent.get_merged_definition(bean_name)
        return self._store.get_merged(bean_name)

    def definition_names(self) -> List[str]:
        """Locally defined names in registration order."""
        return self._store.names()

    def definition_count(self) -> int:
        return self._store.count()

    def singleton_names(self) -> List[str]:
        """Names of cached singletons in registration order."""
        return self._singletons.names()

    def is_currently_in_creation(self, name: str) -> bool:
        bean_name = self._transformed_name(name)
        if self._singletons.is_in_creation(bean_name):
            return True
        ctx = _resolution_context.get()
        return ctx is not None and ctx.is_prototype_in_creation(self, bean_name)

    def set_currently_in_creation(self, name: str, in_creation: bool) -> None:
        """Include ``name`` in (or exclude it from) in-creation checks.

        An excluded singleton is not exposed early while it is being created.
        """
        self._singletons.set_in_creation_check_excluded(name, not in_creation)

    # -- configuration -------------------------------------------------------

    def register_definition(self, name: str, definition: Definition) -> None:
        """Register a definition under ``name``.

        Replacing an existing definition (when overriding is allowed) destroys
        the singleton created from it, together with the singletons of child
        definitions and of components depending on it.

        Raises:
            DuplicateDefinitionError: When ``name`` is taken and overriding
                is not allowed
            AliasInUseError: When ``name`` is an alias and overriding is not
                allowed
        """
        existed = name in self._store.names()
        self._store.register(name, definition)
        if existed or self._singletons.contains(name):
            self._reset_definition(name, set())

    def remove_definition(self, name: str) -> None:
        """Remove the definition ``name`` and destroy its singleton.

        Raises:
            NoSuchDefinitionError: When ``name`` is not defined here
        """
        self._store.remove(name)
        self._reset_definition(name, set())

    def _reset_definition(self, name: str, visited: Set[str]) -> None:
        if name in visited:
            return
        visited.add(name)
        self.destroy_singleton(name)
        self._pipeline.apply_reset_definition(name)

        for other in self._store.names():
            parent_name = self._store.get_raw(other).parent_name
            if parent_name is not None and self._store.canonical_name(parent_name) == name:
                self._reset_definition(other, visited)

    def register_alias(self, alias: str, target: str) -> None:
        """Register ``alias`` as another name for ``target``.

        Raises:
            AliasInUseError: When ``alias`` is taken by another target, or
                is a definition name and overriding is not allowed
            AliasCycleError: When the alias would close a loop
        """
        if (alias != target and alias in self._store.names()
                and not self.settings.allow_definition_overriding):
            raise AliasInUseError(alias, alias, target)
        self._store.register_alias(alias, target)

    def resolve_aliases(self, resolver: Callable[[str], Optional[str]]) -> None:
        """Rewrite every alias and target through ``resolver``."""
        self._store.resolve_aliases(resolver)

    def register_scope(self, scope_name: str, strategy: ScopeStrategy) -> None:
        """Bind a custom scope name to a ScopeStrategy.

        Raises:
            ReservedScopeNameError: For ``"singleton"`` or ``"prototype"``
        """
        self._scopes.register(scope_name, strategy)

    def get_registered_scope(self, scope_name: str) -> Optional[ScopeStrategy]:
        """Return the strategy bound to a custom scope name, or None."""
        if scope_name in RESERVED_SCOPE_NAMES:
            return None
        return self._scopes.get(scope_name)

    def registered_scope_names(self) -> List[str]:
        return self._scopes.names()

    def add_post_processor(self, processor: ComponentPostProcessor) -> None:
        """Append a post-processor; it applies to components created afterwards."""
        self._pipeline.add(processor)

    def post_processor_count(self) -> int:
        return self._pipeline.count()

    @property
    def post_processors(self) -> Tuple[ComponentPostProcessor, ...]:
        return self._pipeline.processors

    def register_singleton(self, name: str, instance: Any) -> None:
        """Register an existing object as a fully initialized singleton.

        The object receives no lifecycle callbacks, including destruction.

        Raises:
            SingletonAlreadyRegisteredError: When ``name`` is already bound
        """
        self._singletons.register_singleton(name, instance)

    def register_dependent_bean(self, name: str, dependent_name: str) -> None:
        """Record that ``dependent_name`` depends on ``name``."""
        self._dependency_graph.register_dependent(
            self._transformed_name(name), self._transformed_name(dependent_name)
        )

    def get_dependent_beans(self, name: str) -> List[str]:
        """Names of components depending on ``name``, sorted."""
        return sorted(self._dependency_graph.dependents_of(self._transformed_name(name)))

    def get_dependencies_for_bean(self, name: str) -> List[str]:
        """Names of components ``name`` depends on, sorted."""
        return sorted(self._dependency_graph.dependencies_of(self._transformed_name(name)))

    def copy_configuration_from(self, other: 'ComponentContainer') -> None:
        """Copy strategies, scopes and post-processors from ``other``.

        Definitions, aliases and instances are not copied. Settings are fixed
        when a container is created and are not copied either.
        """
        self.construction_strategy = other.construction_strategy
        self.reference_resolver = other.reference_resolver
        self.property_binder = other.property_binder
        for scope_name, strategy in other._scopes.items().items():
            self._scopes.register(scope_name, strategy)
        for processor in other.post_processors:
            self._pipeline.add(processor)

    def load(self, source: ConfigSource) -> None:
        """Register every definition, then every alias, supplied by ``source``.

        Raises:
            DuplicateDefinitionError: When a name is already registered
        """
        count = 0
        for name, definition in source.load():
            self.register_definition(name, definition)
            count += 1
        for alias, target in source.load_aliases():
            self.register_alias(alias, target)
        logger.debug("Loaded %d definitions from %r", count, source)

    # -- destruction ---------------------------------------------------------

    def destroy_bean(self, name: str, instance: Any) -> None:
        """Destroy ``instance`` according to the definition of ``name``.

        Meant for prototype instances, which the container does not track.
        Errors are logged, never raised.
        """
        try:
            merged: Optional[RootDefinition] = self.get_merged_definition(name)
        except NoSuchDefinitionError:
            merged = None
        adapter = DisposableAdapter(name, instance, merged, self._pipeline)
        try:
            adapter()
        except Exception:
            logger.warning("Destruction of component '%s' threw an exception", name, exc_info=True)

    def destroy_scoped_bean(self, name: str) -> None:
        """Remove ``name`` from its custom scope and destroy it.

        Raises:
            ValueError: When the component is singleton or prototype scoped
            NoSuchScopeError: When its scope is not registered
        """
        bean_name = self._transformed_name(name)
        merged = self.get_merged_definition(bean_name)
        if merged.is_singleton or merged.is_prototype:
            raise ValueError(
                f"Component '{bean_name}' does not have a custom scope "
                f"(scope '{merged.scope_name}')"
            )
        strategy = self._scopes.get(merged.scope_name)
        if strategy is None:
            raise NoSuchScopeError(merged.scope_name, bean_name)
        instance = strategy.remove(bean_name)
        if instance is not None:
            self.destroy_bean(bean_name, instance)

    def destroy_singleton(self, name: str) -> DestructionFailures:
        """Destroy the singleton ``name`` after every component depending on it.

        Returns:
            (name, exception) pairs for every destruction callback that failed
        """
        failures: DestructionFailures = []
        self._destroy_singleton(self._transformed_name(name), failures, set())
        return failures

    def _destroy_singleton(self, name: str, failures: DestructionFailures, visited: Set[str]) -> None:
        if name in visited:
            return
        visited.add(name)

        for dependent in sorted(self._dependency_graph.dependents_of(name)):
            self._destroy_singleton(dependent, failures, visited)

        callback = self._singletons.pop_disposable(name)
        if callback is not None:
            logger.debug("Destroying component '%s'", name)
            try:
                callback()
            except Exception as e:
                logger.warning("Destruction of component '%s' threw an exception", name, exc_info=True)
                failures.append((name, e))

        self._singletons.remove(name)
        with self._products_lock:
            self._factory_products.pop(name, None)
        self._dependency_graph.remove(name)

    def destroy_singletons(self) -> DestructionFailures:
        """Destroy every singleton, dependents first. Never raises.

        The order comes from the dependency graph; a dependency cycle falls
        back to reverse registration order. Every destruction error is logged
        and collected, and shutdown carries on.

        Returns:
            (name, exception) pairs for every destruction callback that failed
        """
        logger.debug("Destroying singletons in %r", self)
        self._singletons.set_destroying(True)
        failures: DestructionFailures = []
        try:
            names = list(dict.fromkeys(
                self._singletons.names() + self._singletons.disposable_names()
            ))
            visited: Set[str] = set()
            for name in self._dependency_graph.destroy_order(names):
                self._destroy_singleton(name, failures, visited)
        finally:
            self._dependency_graph.clear()
            self._singletons.clear()
            with self._products_lock:
                self._factory_products.clear()
            self._singletons.set_destroying(False)
        return failures

    def __repr__(self) -> str:
        return (
            f"ComponentContainer(definitions={self._store.count()}, "
            f"singletons={self._singletons.count()})"
        )
