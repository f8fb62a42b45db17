"""
Definition

Data classes representing component definitions.

``Definition`` is the raw, configuration-time description of how to build a
component. It may name a parent definition whose settings it inherits.
``RootDefinition`` is the merged result: the parent chain has been folded in,
so no further parent lookups happen for it. Root definitions also carry the
lazily populated caches a construction strategy may fill in, guarded by a
per-definition lock.
"""

import threading
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Set, Tuple

from .lifecycle import ComponentLifeCycle
from .values import merge_value


@dataclass
class Definition:
    """Component definition"""
    name: str
    implementation: Any = None  # Class or factory callable, opaque to the container
    parent_name: Optional[str] = None
    constructor_args: Tuple[Any, ...] = ()
    property_assignments: Dict[str, Any] = field(default_factory=dict)
    scope_name: str = ""  # Empty means inherited, or singleton for roots
    lazy_init: Optional[bool] = None
    primary: bool = False
    depends_on: Tuple[str, ...] = ()
    factory_method_name: Optional[str] = None
    factory_component_name: Optional[str] = None
    init_method_name: Optional[str] = None
    destroy_method_name: Optional[str] = None
    abstract: bool = False
    description: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Definition name must not be empty")
        self.constructor_args = tuple(self.constructor_args)
        self.depends_on = tuple(self.depends_on)
        self.property_assignments = dict(self.property_assignments)

    @property
    def effective_scope(self) -> str:
        return self.scope_name or ComponentLifeCycle.SINGLETON.value

    @property
    def is_singleton(self) -> bool:
        return self.effective_scope == ComponentLifeCycle.SINGLETON.value

    @property
    def is_prototype(self) -> bool:
        return self.effective_scope == ComponentLifeCycle.PROTOTYPE.value

    @property
    def is_lazy_init(self) -> bool:
        return bool(self.lazy_init)

    def copy(self) -> 'Definition':
        """Return a copy that shares no mutable containers with this one."""
        return Definition(**_field_values(self, Definition))


@dataclass
class RootDefinition(Definition):
    """Merged component definition.

    A root definition never has a parent. It is treated as immutable once
    built; only the resolution caches below change after construction, and
    only while holding ``lock``.

    Attributes:
        stale: Set when a raw definition in the merged chain changed;
            the definition store re-merges on next access
        resolved_type: Cached implementation type, if known
        resolved_constructor: Cached callable used to instantiate
        before_instantiation_resolved: Whether before-instantiation hooks
            produced an instance on the last creation
        post_processed: Whether merged-definition post-processors ran
    """
    stale: bool = field(default=False, compare=False, repr=False)
    resolved_type: Any = field(default=None, compare=False, repr=False)
    resolved_constructor: Any = field(default=None, compare=False, repr=False)
    before_instantiation_resolved: Optional[bool] = field(default=None, compare=False, repr=False)
    post_processed: bool = field(default=False, compare=False, repr=False)
    lock: Any = field(default_factory=threading.RLock, compare=False, repr=False)
    _external_init_methods: Set[str] = field(default_factory=set, compare=False, repr=False)
    _external_destroy_methods: Set[str] = field(default_factory=set, compare=False, repr=False)

    def __setattr__(self, key, value):
        if key == "parent_name" and value is not None:
            raise ValueError(
                "Root definition cannot be changed into a child definition with parent reference"
            )
        super().__setattr__(key, value)

    @classmethod
    def from_definition(cls, definition: Definition) -> 'RootDefinition':
        """Build a root from a definition, dropping any parent reference."""
        values = _field_values(definition, Definition)
        values["parent_name"] = None
        values["scope_name"] = definition.effective_scope
        values["lazy_init"] = definition.is_lazy_init
        return cls(**values)

    @property
    def target_type(self) -> Optional[type]:
        if self.resolved_type is not None:
            return self.resolved_type
        if isinstance(self.implementation, type) and self.factory_method_name is None:
            return self.implementation
        return None

    def mark_stale(self) -> None:
        self.stale = True

    def register_externally_managed_init_method(self, method_name: str) -> None:
        with self.lock:
            self._external_init_methods.add(method_name)

    def is_externally_managed_init_method(self, method_name: str) -> bool:
        with self.lock:
            return method_name in self._external_init_methods

    def has_any_externally_managed_init_method(self, method_name: str) -> bool:
        """Match ``method_name`` exactly or as the tail of a ``Type.method`` entry."""
        with self.lock:
            return _matches_managed(self._external_init_methods, method_name)

    def register_externally_managed_destroy_method(self, method_name: str) -> None:
        with self.lock:
            self._external_destroy_methods.add(method_name)

    def is_externally_managed_destroy_method(self, method_name: str) -> bool:
        with self.lock:
            return method_name in self._external_destroy_methods

    def has_any_externally_managed_destroy_method(self, method_name: str) -> bool:
        with self.lock:
            return _matches_managed(self._external_destroy_methods, method_name)


def merge_definitions(parent: RootDefinition, child: Definition) -> RootDefinition:
    """Merge a child definition into its already merged parent.

    Child settings win. Properties and constructor arguments are overlaid
    key by key (index by index), and managed collections present on both
    sides are merged element-wise.

    Args:
        parent: The merged parent definition
        child: The raw child definition

    Returns:
        A new RootDefinition named after the child
    """
    properties = dict(parent.property_assignments)
    for key, value in child.property_assignments.items():
        properties[key] = merge_value(properties.get(key), value)

    args = list(parent.constructor_args)
    for index, value in enumerate(child.constructor_args):
        if index < len(args):
            args[index] = merge_value(args[index], value)
        else:
            args.append(value)

    lazy_init = child.lazy_init if child.lazy_init is not None else parent.lazy_init

    return RootDefinition(
        name=child.name,
        implementation=(
            child.implementation if child.implementation is not None
            else parent.implementation
        ),
        constructor_args=tuple(args),
        property_assignments=properties,
        scope_name=child.scope_name or parent.effective_scope,
        lazy_init=bool(lazy_init),
        primary=child.primary,
        depends_on=child.depends_on or parent.depends_on,
        factory_method_name=child.factory_method_name or parent.factory_method_name,
        factory_component_name=child.factory_component_name or parent.factory_component_name,
        init_method_name=child.init_method_name or parent.init_method_name,
        destroy_method_name=child.destroy_method_name or parent.destroy_method_name,
        abstract=child.abstract,
        description=child.description or parent.description,
    )


def _field_values(definition: Definition, cls: type) -> Dict[str, Any]:
    values = {f.name: getattr(definition, f.name) for f in fields(cls)}
    values["property_assignments"] = dict(definition.property_assignments)
    return values


def _matches_managed(candidates: Set[str], method_name: str) -> bool:
    if method_name in candidates:
        return True
    for candidate in candidates:
        index = candidate.rfind(".")
        if index > 0 and candidate[index + 1:] == method_name:
            return True
    return False
