# Public API
from .component import DisposableComponent, FactoryComponent, InitializingComponent
from .container import ComponentContainer
from .core import ComponentryCore
from .definition import Definition, RootDefinition, merge_definitions
from .definition_builder import DefinitionBuilder
from .definition_store import DefinitionStore
from .dependency_graph import DependencyGraph
from .exceptions import (
    AbstractDefinitionError,
    AliasCycleError,
    AliasInUseError,
    ComponentryError,
    ContainerClosedError,
    CurrentlyInCreationError,
    CycleIdentityError,
    CyclicDependencyError,
    CyclicParentError,
    DuplicateDefinitionError,
    InstantiationError,
    MissingDependencyError,
    NoSuchDefinitionError,
    NoSuchScopeError,
    NotAFactoryError,
    ReservedScopeNameError,
    ScopeClosedError,
    SingletonAlreadyRegisteredError,
    UnresolvableCircularReferenceError,
)
from .lifecycle import FACTORY_PREFIX, INFER_METHOD, ComponentLifeCycle
from .module import ComponentModule
from .post_processor import (
    ComponentPostProcessor,
    DestructionAwarePostProcessor,
    InstantiationAwarePostProcessor,
    MergedDefinitionPostProcessor,
    PostProcessorPipeline,
    SmartInstantiationAwarePostProcessor,
)
from .scope import CachingScope, PrototypeScope, ScopeStrategy, ThreadLocalScope
from .scope_registry import ScopeRegistry
from .settings import ContainerSettings
from .singleton_cache import SingletonCache
from .strategies import (
    ConfigSource,
    ConstructionStrategy,
    DefaultConstructionStrategy,
    DefaultPropertyBinder,
    DefaultReferenceResolver,
    MappingConfigSource,
    PropertyBinder,
    ReferenceResolver,
)
from .values import ComponentReference, ManagedList, ManagedMap, ManagedSet

__all__ = [
    "ComponentryCore",
    "ComponentContainer",
    "ComponentModule",
    "ContainerSettings",
    "ComponentLifeCycle",
    "FACTORY_PREFIX",
    "INFER_METHOD",
    # Definitions
    "Definition",
    "RootDefinition",
    "merge_definitions",
    "DefinitionBuilder",
    "DefinitionStore",
    "ComponentReference",
    "ManagedList",
    "ManagedSet",
    "ManagedMap",
    # Runtime
    "SingletonCache",
    "DependencyGraph",
    "ScopeRegistry",
    "ScopeStrategy",
    "PrototypeScope",
    "CachingScope",
    "ThreadLocalScope",
    # Component protocols
    "InitializingComponent",
    "DisposableComponent",
    "FactoryComponent",
    # Post-processors
    "ComponentPostProcessor",
    "InstantiationAwarePostProcessor",
    "SmartInstantiationAwarePostProcessor",
    "DestructionAwarePostProcessor",
    "MergedDefinitionPostProcessor",
    "PostProcessorPipeline",
    # Strategies
    "ConfigSource",
    "MappingConfigSource",
    "ConstructionStrategy",
    "DefaultConstructionStrategy",
    "ReferenceResolver",
    "DefaultReferenceResolver",
    "PropertyBinder",
    "DefaultPropertyBinder",
    # Exceptions
    "ComponentryError",
    "ContainerClosedError",
    "ScopeClosedError",
    "NoSuchDefinitionError",
    "DuplicateDefinitionError",
    "SingletonAlreadyRegisteredError",
    "CyclicParentError",
    "AliasInUseError",
    "AliasCycleError",
    "CyclicDependencyError",
    "UnresolvableCircularReferenceError",
    "CurrentlyInCreationError",
    "CycleIdentityError",
    "InstantiationError",
    "MissingDependencyError",
    "AbstractDefinitionError",
    "ReservedScopeNameError",
    "NoSuchScopeError",
    "NotAFactoryError",
]

__version__ = '0.1.0'
