"""
Componentry Exceptions

Custom exception hierarchy for the Componentry DI runtime
"""

from typing import Optional, Sequence


class ComponentryError(Exception):
    """
    Base exception for all Componentry errors.

    All Componentry-specific exceptions inherit from this class.
    You can catch this to handle any Componentry error generically.

    Example:
        >>> try:
        ...     service = container.get("userService")
        ... except ComponentryError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class ContainerClosedError(ComponentryError):
    """
    Raised when attempting to use a closed container.

    This error occurs when calling ``get()`` or any configuration method
    on a ``ComponentryCore`` that has been closed.

    Solution:
        Create a new ``ComponentryCore`` instead of reusing a closed one::

            with ComponentryCore(sources=[module]) as app:
                service = app.get("service")  # OK
            # Container is now closed
    """

    pass


class ScopeClosedError(ComponentryError):
    """
    Raised when a closed ``CachingScope`` is asked for a component.
    """

    pass


class NoSuchDefinitionError(ComponentryError, LookupError):
    """
    Raised when a requested name is not registered in the container.

    The lookup covers the local definition store, aliases, manually
    registered singletons and every parent store/container.

    Common causes:
        - Forgetting to register the definition
        - Typo in the component name
        - The source holding the definition was never loaded

    Note:
        The error message lists the registered names to help identify
        available components.
    """

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"No component named '{name}' is defined")


class DuplicateDefinitionError(ComponentryError):
    """
    Raised when the same name is registered twice.

    Common causes:
        - Registering the same name in multiple modules
        - Loading the same module twice

    Solution:
        Remove one of the registrations, or allow overriding explicitly::

            settings = ContainerSettings(allow_definition_overriding=True)
            container = ComponentContainer(settings=settings)
    """

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(
            message or
            f"Cannot register definition '{name}': a definition with that name "
            f"is already registered and overriding is not allowed"
        )


class SingletonAlreadyRegisteredError(ComponentryError):
    """
    Raised when ``register_singleton()`` is called for a name that is
    already bound to a singleton instance.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Could not register object under name '{name}': "
            f"there is already a singleton bound"
        )


class CyclicParentError(ComponentryError):
    """
    Raised when a definition's parent chain loops back on itself or is
    deeper than the configured limit.

    Example of a cyclic parent chain::

        store.register("a", Definition(name="a", parent_name="b"))
        store.register("b", Definition(name="b", parent_name="a"))
        store.get_merged("a")  # CyclicParentError

    Attributes:
        chain: The names visited before the cycle was detected
    """

    def __init__(self, name: str, chain: Sequence[str], message: Optional[str] = None):
        self.name = name
        self.chain = tuple(chain)
        super().__init__(
            message or
            f"Cyclic parent chain for definition '{name}': " + " -> ".join(self.chain)
        )


class AliasInUseError(ComponentryError):
    """
    Raised when an alias is already bound to a different target.

    Solution:
        Remove the alias first with ``remove_alias()``, or pick a new name.
    """

    def __init__(self, alias: str, existing_target: str, requested_target: str):
        self.alias = alias
        self.existing_target = existing_target
        self.requested_target = requested_target
        super().__init__(
            f"Cannot register alias '{alias}' for name '{requested_target}': "
            f"it is already registered for name '{existing_target}'"
        )


class AliasCycleError(ComponentryError):
    """
    Raised when aliases resolve back onto themselves or the alias chain
    is longer than the configured limit.
    """

    def __init__(self, alias: str, chain: Sequence[str]):
        self.alias = alias
        self.chain = tuple(chain)
        super().__init__(
            f"Circular alias reference for '{alias}': " + " -> ".join(self.chain)
        )


class CyclicDependencyError(ComponentryError):
    """
    Raised when a circular dependency is detected during creation.

    This covers circular ``depends_on`` declarations and resolution paths
    that recurse past the configured creation depth.

    Solution:
        1. Refactor to remove the circular dependency
        2. Move one side of the cycle from a constructor argument to a
           property assignment so an early reference can break it

    Attributes:
        path: The component names on the creation path, outermost first
    """

    def __init__(self, message: str, path: Sequence[str] = ()):
        self.path = tuple(path)
        super().__init__(message)


class UnresolvableCircularReferenceError(CyclicDependencyError):
    """
    Raised when a cycle cannot be broken with an early reference.

    Early references exist only once the raw object has been constructed,
    so a cycle through constructor arguments can never be resolved::

        a = Definition(name="a", implementation=A,
                       constructor_args=(ComponentReference("b"),))
        b = Definition(name="b", implementation=B,
                       constructor_args=(ComponentReference("a"),))

    The container fails fast instead of blocking forever.
    """

    pass


class CurrentlyInCreationError(ComponentryError):
    """
    Raised when a prototype component re-enters its own creation.

    Prototype instances are never exposed early, so ``a -> b -> a`` with a
    prototype ``a`` can only recurse forever.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Error creating component '{name}': requested component is "
            f"currently in creation: is there an unresolvable circular reference?"
        )


class CycleIdentityError(ComponentryError):
    """
    Raised when an early reference handed out during a cycle differs from
    the final instance.

    A post-processor wrapped the component after other components had
    already captured the raw early reference, so they hold a different
    identity than the one now cached.

    Solution:
        Return the wrapper from ``get_early_reference()`` as well, or enable
        ``allow_raw_injection_despite_wrapping`` if that is acceptable.
    """

    def __init__(self, name: str, dependents: Sequence[str]):
        self.name = name
        self.dependents = tuple(dependents)
        super().__init__(
            f"Component '{name}' has been injected into other components "
            f"[{', '.join(self.dependents)}] in its raw version as part of a "
            f"circular reference, but has eventually been wrapped"
        )


class InstantiationError(ComponentryError):
    """
    Raised when constructing or initialising a component fails.

    Wraps exceptions raised by user code (constructors, factory methods,
    init callbacks, post-processors) with the name of the failing
    component. The original exception is available as ``__cause__``.
    """

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(f"Error creating component '{name}': {message}")


class MissingDependencyError(ComponentryError):
    """
    Raised when a name listed in ``depends_on`` cannot be resolved.
    """

    def __init__(self, name: str, dependency: str):
        self.name = name
        self.dependency = dependency
        super().__init__(
            f"Component '{name}' depends on missing component '{dependency}'"
        )


class AbstractDefinitionError(ComponentryError):
    """
    Raised when an abstract (template-only) definition is requested.

    Abstract definitions can only serve as parents for other definitions.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Component definition '{name}' is abstract")


class ReservedScopeNameError(ComponentryError, ValueError):
    """
    Raised when registering a scope under a built-in name.

    ``"singleton"`` and ``"prototype"`` are handled by the container itself
    and cannot be replaced.
    """

    def __init__(self, scope_name: str):
        self.scope_name = scope_name
        super().__init__(f"Cannot replace built-in scope '{scope_name}'")


class NoSuchScopeError(ComponentryError):
    """
    Raised when a definition names a scope that was never registered.
    """

    def __init__(self, scope_name: str, name: str):
        self.scope_name = scope_name
        self.name = name
        super().__init__(
            f"No scope registered for scope name '{scope_name}' "
            f"(required by component '{name}')"
        )


class NotAFactoryError(ComponentryError, TypeError):
    """
    Raised when ``get("&name")`` names a component that is not a
    ``FactoryComponent``.

    The ``&`` prefix only dereferences factory components to the factory
    itself; drop the prefix to get an ordinary component.
    """

    def __init__(self, name: str, actual_type: type):
        self.name = name
        self.actual_type = actual_type
        super().__init__(
            f"Component named '{name}' is expected to be a FactoryComponent "
            f"but was actually of type '{actual_type.__name__}'"
        )
