"""
DefinitionStore

Registry of raw component definitions, their merged (root) forms and the
alias table. Stores can be chained: a lookup that misses in this store is
delegated to the parent store before failing.

Merged definitions are cached per name together with the chain of raw
definitions they were built from, including the names resolved in parent
stores. Registering or removing any name in that chain, here or in a parent
store, marks the cached merge stale, so the next lookup re-merges.

The alias table is copy-on-write: writers build a new table under the alias
lock and swap it in, readers never lock.
"""

import logging
import threading
import weakref
from typing import Callable, Dict, List, Optional, Tuple

from .definition import Definition, RootDefinition, merge_definitions
from .exceptions import (
    AliasCycleError,
    AliasInUseError,
    CyclicParentError,
    DuplicateDefinitionError,
    NoSuchDefinitionError,
)
from .settings import ContainerSettings

logger = logging.getLogger(__name__)


class DefinitionStore:
    """Thread-safe store of component definitions and aliases.

    Attributes:
        parent: Store consulted when a name is unknown here

    Example::

        store = DefinitionStore()
        store.register("base", Definition(name="base", implementation=Service,
                                          property_assignments={"timeout": 5}))
        store.register("fast", Definition(name="fast", parent_name="base",
                                          property_assignments={"timeout": 1}))
        store.register_alias("quick", "fast")

        merged = store.get_merged("quick")
        assert merged.implementation is Service
        assert merged.property_assignments["timeout"] == 1
    """

    def __init__(
        self,
        settings: Optional[ContainerSettings] = None,
        parent: Optional['DefinitionStore'] = None,
    ):
        self._settings = settings or ContainerSettings()
        self.parent = parent
        self._lock = threading.RLock()
        self._children: 'weakref.WeakSet[DefinitionStore]' = weakref.WeakSet()
        if parent is not None:
            with parent._lock:
                parent._children.add(self)
        self._definitions: Dict[str, Definition] = {}
        self._merged: Dict[str, RootDefinition] = {}
        self._merged_chains: Dict[str, Tuple[str, ...]] = {}
        self._alias_lock = threading.Lock()
        self._aliases: Dict[str, str] = {}

    # -- definitions -----------------------------------------------------

    def register(self, name: str, definition: Definition) -> None:
        """Register a raw definition under ``name``.

        The definition is copied, so later changes to the caller's object
        have no effect until it is registered again.

        Args:
            name: Component name
            definition: The raw definition

        Raises:
            DuplicateDefinitionError: When ``name`` is taken and overriding
                is not allowed
            AliasInUseError: When ``name`` is an alias and overriding is
                not allowed
        """
        stored = definition.copy()
        stored.name = name

        with self._lock:
            target = self._aliases.get(name)
            if target is not None:
                if not self._settings.allow_definition_overriding:
                    raise AliasInUseError(name, target, name)
                self.remove_alias(name)

            if name in self._definitions:
                if not self._settings.allow_definition_overriding:
                    raise DuplicateDefinitionError(name)
                logger.info("Overriding definition for component '%s'", name)

            self._definitions[name] = stored
            self._invalidate(name)
        self._invalidate_children(name)

    def remove(self, name: str) -> None:
        """Remove the raw definition registered under ``name``.

        Raises:
            NoSuchDefinitionError: When ``name`` is not registered here
        """
        with self._lock:
            if name not in self._definitions:
                raise NoSuchDefinitionError(name)
            del self._definitions[name]
            self._invalidate(name)
        self._invalidate_children(name)

    def get_raw(self, name: str) -> Definition:
        """Return the raw definition registered locally under ``name``.

        Raises:
            NoSuchDefinitionError: When ``name`` is not registered here
        """
        with self._lock:
            definition = self._definitions.get(self.canonical_name(name))
        if definition is None:
            raise NoSuchDefinitionError(name)
        return definition

    def contains(self, name: str) -> bool:
        """Check this store and its ancestors for ``name`` (aliases resolved)."""
        if self.contains_local(name):
            return True
        return self.parent is not None and self.parent.contains(name)

    def contains_local(self, name: str) -> bool:
        with self._lock:
            return self.canonical_name(name) in self._definitions

    def names(self) -> List[str]:
        """Locally registered names in registration order."""
        with self._lock:
            return list(self._definitions)

    def count(self) -> int:
        with self._lock:
            return len(self._definitions)

    def get_merged(self, name: str) -> RootDefinition:
        """Return the merged definition for ``name``.

        A cached merge is reused unless it has been marked stale. Otherwise
        the parent chain is walked and folded into a new root definition.

        Args:
            name: Component name or alias

        Returns:
            The merged RootDefinition

        Raises:
            NoSuchDefinitionError: When neither this store nor an ancestor
                knows the name (or a parent named in the chain)
            CyclicParentError: When the parent chain loops or is too deep
        """
        return self._get_merged_with_chain(name)[0]

    def _get_merged_with_chain(self, name: str) -> Tuple[RootDefinition, Tuple[str, ...]]:
        canonical = self.canonical_name(name)
        with self._lock:
            cached = self._merged.get(canonical)
            if cached is not None and not cached.stale:
                return cached, self._merged_chains[canonical]

            if canonical not in self._definitions:
                if self.parent is not None:
                    return self.parent._get_merged_with_chain(canonical)
                raise NoSuchDefinitionError(
                    name,
                    f"No component named '{name}' is defined.\n"
                    f"Registered names: {', '.join(self._definitions) or 'None'}"
                )

            merged, chain = self._merge(canonical)
            if self._settings.cache_metadata:
                self._merged[canonical] = merged
                self._merged_chains[canonical] = chain
            return merged, chain

    def clear_metadata_cache(self) -> None:
        """Mark every cached merge stale and drop it."""
        with self._lock:
            for merged in self._merged.values():
                merged.mark_stale()
            self._merged.clear()
            self._merged_chains.clear()

    def _merge(self, name: str) -> Tuple[RootDefinition, Tuple[str, ...]]:
        chain = [name]
        lineage = [self._definitions[name]]
        base: Optional[RootDefinition] = None
        inherited: Tuple[str, ...] = ()

        definition = lineage[0]
        while definition.parent_name is not None:
            parent_name = self.canonical_name(definition.parent_name)

            if parent_name == definition.name:
                # Same name as the child: only a parent store can hold it
                if self.parent is None:
                    raise CyclicParentError(
                        name, chain + [parent_name],
                        f"Parent name '{parent_name}' is equal to component name "
                        f"'{definition.name}': cannot be resolved without a parent store"
                    )
                base, inherited = self.parent._get_merged_with_chain(parent_name)
                break

            if parent_name in chain:
                raise CyclicParentError(name, chain + [parent_name])
            if len(chain) >= self._settings.max_parent_depth:
                raise CyclicParentError(
                    name, chain + [parent_name],
                    f"Parent chain of definition '{name}' exceeds "
                    f"{self._settings.max_parent_depth} levels"
                )
            chain.append(parent_name)

            parent_definition = self._definitions.get(parent_name)
            if parent_definition is None:
                if self.parent is None:
                    raise NoSuchDefinitionError(
                        parent_name,
                        f"Could not resolve parent definition '{parent_name}' "
                        f"of component '{name}'"
                    )
                base, inherited = self.parent._get_merged_with_chain(parent_name)
                break

            lineage.append(parent_definition)
            definition = parent_definition

        if base is None:
            base = RootDefinition.from_definition(lineage.pop())
            if not lineage:
                return base, tuple(chain)

        merged = base
        for child in reversed(lineage):
            merged = merge_definitions(merged, child)
        return merged, tuple(chain) + inherited

    def _invalidate(self, name: str) -> None:
        for merged_name, chain in list(self._merged_chains.items()):
            if name in chain:
                self._merged.pop(merged_name).mark_stale()
                del self._merged_chains[merged_name]

    def _invalidate_children(self, name: str) -> None:
        """Mark stale the merges of child stores built on ``name``.

        Called without holding this store's lock: child stores take their
        own lock first and this one second while merging.
        """
        with self._lock:
            children = list(self._children)
        for child in children:
            with child._lock:
                child._invalidate(name)
            child._invalidate_children(name)

    # -- aliases -----------------------------------------------------------

    def register_alias(self, alias: str, target: str) -> None:
        """Register ``alias`` as another name for ``target``.

        Registering an alias equal to its target removes the alias.
        Registering the same mapping twice is a no-op.

        Args:
            alias: The new name
            target: The name it stands for (may itself be an alias)

        Raises:
            AliasInUseError: When ``alias`` maps to a different target
            AliasCycleError: When the new alias would close a loop
        """
        if not alias or not target:
            raise ValueError("Alias and target must not be empty")

        with self._alias_lock:
            if alias == target:
                if alias in self._aliases:
                    self._aliases = {
                        a: t for a, t in self._aliases.items() if a != alias
                    }
                    logger.debug("Alias '%s' removed: it equals its target", alias)
                return

            existing = self._aliases.get(alias)
            if existing is not None:
                if existing == target:
                    return
                raise AliasInUseError(alias, existing, target)

            _check_alias_cycle(self._aliases, alias, target)
            aliases = dict(self._aliases)
            aliases[alias] = target
            self._aliases = aliases
            logger.debug("Alias '%s' registered for '%s'", alias, target)

    def remove_alias(self, alias: str) -> None:
        """Remove ``alias``.

        Raises:
            NoSuchDefinitionError: When no such alias is registered
        """
        with self._alias_lock:
            if alias not in self._aliases:
                raise NoSuchDefinitionError(alias, f"No alias '{alias}' registered")
            self._aliases = {a: t for a, t in self._aliases.items() if a != alias}

    def is_alias(self, name: str) -> bool:
        return name in self._aliases

    def aliases_for(self, name: str) -> List[str]:
        """All aliases that resolve to ``name``, directly or transitively."""
        aliases = self._aliases
        found: List[str] = []
        pending = [name]
        while pending:
            current = pending.pop()
            for alias, target in aliases.items():
                if target == current and alias not in found:
                    found.append(alias)
                    pending.append(alias)
        return found

    def canonical_name(self, name: str) -> str:
        """Follow aliases from ``name`` to the name they finally stand for.

        Raises:
            AliasCycleError: When the chain loops or exceeds the configured
                alias depth
        """
        aliases = self._aliases
        seen = [name]
        current = name
        for _ in range(self._settings.max_alias_depth):
            target = aliases.get(current)
            if target is None:
                return current
            if target in seen:
                raise AliasCycleError(name, seen + [target])
            seen.append(target)
            current = target
        if current in aliases:
            raise AliasCycleError(name, seen)
        return current

    def resolve_aliases(self, resolver: Callable[[str], Optional[str]]) -> None:
        """Rewrite every alias and target through ``resolver``.

        Pairs that resolve to ``None`` or whose alias resolves to its target
        are dropped; pairs that collapse onto an existing identical mapping
        are merged. The rewritten table replaces the old one in one step.

        Args:
            resolver: Name-rewriting function, e.g. placeholder resolution

        Raises:
            AliasInUseError: When two aliases collapse onto one name with
                different targets
            AliasCycleError: When the rewritten table contains a loop
        """
        with self._alias_lock:
            current = dict(self._aliases)
            result = dict(current)
            for alias, target in current.items():
                resolved_alias = resolver(alias)
                resolved_target = resolver(target)

                if (resolved_alias is None or resolved_target is None
                        or resolved_alias == resolved_target):
                    result.pop(alias, None)
                elif resolved_alias != alias:
                    existing = result.get(resolved_alias)
                    if existing is not None:
                        if existing == resolved_target:
                            result.pop(alias, None)
                            continue
                        raise AliasInUseError(resolved_alias, existing, resolved_target)
                    result.pop(alias, None)
                    _check_alias_cycle(result, resolved_alias, resolved_target)
                    result[resolved_alias] = resolved_target
                elif target != resolved_target:
                    result.pop(alias, None)
                    _check_alias_cycle(result, alias, resolved_target)
                    result[alias] = resolved_target

            self._aliases = result


def _check_alias_cycle(aliases: Dict[str, str], alias: str, target: str) -> None:
    chain = [alias, target]
    current = target
    while current in aliases:
        current = aliases[current]
        chain.append(current)
        if current == alias:
            raise AliasCycleError(alias, chain)
        if len(chain) > len(aliases) + 2:
            break
