"""
Values

Value-or-reference types used in constructor arguments and property
assignments. Plain values are injected as-is; a ``ComponentReference``
is resolved to another component at creation time, and the managed
collections are resolved element-wise (they may contain references).

Example::

    definition = Definition(
        name="composite",
        implementation=CompositeObj,
        property_assignments={
            "name": "auto",
            "primary_car": ComponentReference("car1"),
            "cars": ManagedList([ComponentReference("car1"), ComponentReference("car2")]),
            "tags": ManagedSet({"fast", "red"}),
            "by_name": ManagedMap({"car1": ComponentReference("car1")}),
        },
    )
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ComponentReference:
    """Reference to another component by name.

    Attributes:
        name: Name (or alias) of the referenced component
        to_parent: Resolve against the parent container only
    """
    name: str
    to_parent: bool = False

    def __post_init__(self):
        if not self.name:
            raise ValueError("Component reference name must not be empty")


class Mergeable(ABC):
    """Base for collection values that merge with a parent definition's value.

    When a child definition and its parent both assign the same kind of
    managed collection to a property (or constructor index), the merged
    definition holds the parent's elements followed by the child's
    instead of the child's collection alone.
    """

    merge_enabled: bool = True

    @abstractmethod
    def merge(self, parent: Any) -> Any:
        """Return a new collection holding ``parent``'s elements followed by this one's."""


class ManagedList(Mergeable, list):
    """List value; merging appends the child's elements after the parent's."""

    def __init__(self, iterable=(), merge_enabled: bool = True):
        super().__init__(iterable)
        self.merge_enabled = merge_enabled

    def merge(self, parent: Any) -> 'ManagedList':
        if not isinstance(parent, ManagedList):
            return self
        return ManagedList(list(parent) + list(self), merge_enabled=self.merge_enabled)


class ManagedSet(Mergeable, set):
    """Set value; merging takes the union of both sides."""

    def __init__(self, iterable=(), merge_enabled: bool = True):
        super().__init__(iterable)
        self.merge_enabled = merge_enabled

    def merge(self, parent: Any) -> 'ManagedSet':
        if not isinstance(parent, ManagedSet):
            return self
        merged = ManagedSet(parent, merge_enabled=self.merge_enabled)
        merged.update(self)
        return merged


class ManagedMap(Mergeable, dict):
    """Mapping value; merging overlays the child's keys on the parent's."""

    def __init__(self, mapping=(), merge_enabled: bool = True):
        super().__init__(mapping)
        self.merge_enabled = merge_enabled

    def merge(self, parent: Any) -> 'ManagedMap':
        if not isinstance(parent, ManagedMap):
            return self
        merged = ManagedMap(parent, merge_enabled=self.merge_enabled)
        merged.update(self)
        return merged


def merge_value(parent_value: Any, child_value: Any) -> Any:
    """Combine a parent's and a child's value for the same slot.

    The child wins unless both are managed collections of the same kind
    and the child has merging enabled.
    """
    if (isinstance(child_value, Mergeable)
            and child_value.merge_enabled
            and type(parent_value) is type(child_value)):
        return child_value.merge(parent_value)
    return child_value
