"""
ContainerSettings

Configuration for a component container. Settings are fixed when the
container is created; build a new container to change them.

Example::

    settings = ContainerSettings(allow_definition_overriding=True)
    container = ComponentContainer(settings=settings)

    # Or from plain configuration data
    settings = ContainerSettings.from_mapping({"max_alias_depth": 8})
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class ContainerSettings:
    """Container configuration.

    Attributes:
        allow_definition_overriding: Re-registering a name replaces the
            previous definition instead of raising DuplicateDefinitionError
        allow_circular_references: Expose early references for singletons
            under construction so property-level cycles resolve
        allow_raw_injection_despite_wrapping: Accept a wrapped final instance
            even though dependents captured the raw early reference
        cache_metadata: Cache merged definitions between lookups
        max_parent_depth: Longest parent chain accepted when merging
        max_alias_depth: Longest alias chain accepted when resolving names
        max_creation_depth: Deepest nested creation before the resolution
            path is reported as a cyclic dependency
    """
    allow_definition_overriding: bool = False
    allow_circular_references: bool = True
    allow_raw_injection_despite_wrapping: bool = False
    cache_metadata: bool = True
    max_parent_depth: int = 64
    max_alias_depth: int = 64
    max_creation_depth: int = 256

    def __post_init__(self):
        for name in ("max_parent_depth", "max_alias_depth", "max_creation_depth"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'ContainerSettings':
        """Build settings from a mapping, rejecting unknown keys.

        Args:
            values: Setting names mapped to values

        Returns:
            A new ContainerSettings

        Raises:
            ValueError: When the mapping contains an unknown setting
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(
                f"Unknown container settings: {', '.join(unknown)}. "
                f"Known settings: {', '.join(sorted(known))}"
            )
        return cls(**dict(values))
