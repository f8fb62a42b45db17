"""
Post-Processors

Hook objects invoked by the container at defined points of a component's
lifecycle, always in registration order:

1. ``post_process_merged_definition`` - once per merged definition
2. ``before_instantiation`` - may return a replacement, skipping construction
3. ``after_instantiation`` - may veto property population
4. ``process_properties`` - may rewrite the property assignments
5. ``before_initialization`` / ``after_initialization`` - around init callbacks
6. ``get_early_reference`` - when a cycle needs the component before it is done
7. ``before_destruction`` - before destroy callbacks

Subclass the base class matching the hooks you need; every hook has a
pass-through default.

Example::

    class TimingPostProcessor(ComponentPostProcessor):
        def after_initialization(self, instance, name):
            logger.info("Component %s ready", name)
            return instance

    container.add_post_processor(TimingPostProcessor())
"""

import threading
from typing import Any, Dict, Optional, Tuple

from .definition import RootDefinition


class ComponentPostProcessor:
    """Hooks around initialization callbacks.

    Returning None from either hook keeps the current instance and stops
    the remaining processors from seeing it.
    """

    def before_initialization(self, instance: Any, name: str) -> Any:
        return instance

    def after_initialization(self, instance: Any, name: str) -> Any:
        return instance


class InstantiationAwarePostProcessor(ComponentPostProcessor):
    """Adds hooks around instantiation and property population."""

    def before_instantiation(self, definition: RootDefinition, name: str) -> Optional[Any]:
        """Return an object to use instead of constructing one, or None."""
        return None

    def after_instantiation(self, instance: Any, name: str) -> bool:
        """Return False to skip property population for this instance."""
        return True

    def process_properties(
        self,
        properties: Dict[str, Any],
        instance: Any,
        name: str
    ) -> Optional[Dict[str, Any]]:
        """Return the (possibly rewritten) properties, or None to skip binding."""
        return properties


class SmartInstantiationAwarePostProcessor(InstantiationAwarePostProcessor):
    """Adds the early-reference hook used to break reference cycles."""

    def get_early_reference(self, instance: Any, name: str) -> Any:
        """Return the object other components should see before ``name`` is done.

        A processor that wraps components in ``after_initialization`` must
        return the same wrapper here (or return the raw instance from
        ``after_initialization`` once it wrapped it here), or the cycle ends
        in CycleIdentityError.
        """
        return instance


class DestructionAwarePostProcessor(ComponentPostProcessor):
    """Adds a hook that runs before a component's destroy callbacks."""

    def before_destruction(self, instance: Any, name: str) -> None:
        pass

    def requires_destruction(self, instance: Any) -> bool:
        return True


class MergedDefinitionPostProcessor(ComponentPostProcessor):
    """Adds a hook that inspects each merged definition once before creation."""

    def post_process_merged_definition(self, definition: RootDefinition, name: str) -> None:
        pass

    def reset_definition(self, name: str) -> None:
        """Forget cached metadata for ``name`` after its definition changed."""
        pass


class PostProcessorPipeline:
    """Ordered, thread-safe list of post-processors.

    The list is copy-on-write: hooks iterate an immutable snapshot, so a
    processor added during a creation only affects later creations.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._processors: Tuple[ComponentPostProcessor, ...] = ()

    def add(self, processor: ComponentPostProcessor) -> None:
        """Append ``processor``; re-adding moves it to the end."""
        if processor is None:
            raise ValueError("Post-processor must not be None")
        with self._lock:
            processors = [p for p in self._processors if p is not processor]
            processors.append(processor)
            self._processors = tuple(processors)

    def remove(self, processor: ComponentPostProcessor) -> None:
        with self._lock:
            self._processors = tuple(p for p in self._processors if p is not processor)

    def clear(self) -> None:
        with self._lock:
            self._processors = ()

    def count(self) -> int:
        return len(self._processors)

    @property
    def processors(self) -> Tuple[ComponentPostProcessor, ...]:
        return self._processors

    def _of_type(self, kind: type) -> Tuple[Any, ...]:
        return tuple(p for p in self._processors if isinstance(p, kind))

    def has_instantiation_aware(self) -> bool:
        return bool(self._of_type(InstantiationAwarePostProcessor))

    def apply_merged_definition(self, definition: RootDefinition, name: str) -> None:
        for processor in self._of_type(MergedDefinitionPostProcessor):
            processor.post_process_merged_definition(definition, name)

    def apply_reset_definition(self, name: str) -> None:
        for processor in self._of_type(MergedDefinitionPostProcessor):
            processor.reset_definition(name)

    def apply_before_instantiation(self, definition: RootDefinition, name: str) -> Optional[Any]:
        for processor in self._of_type(InstantiationAwarePostProcessor):
            result = processor.before_instantiation(definition, name)
            if result is not None:
                return result
        return None

    def apply_after_instantiation(self, instance: Any, name: str) -> bool:
        for processor in self._of_type(InstantiationAwarePostProcessor):
            if not processor.after_instantiation(instance, name):
                return False
        return True

    def apply_process_properties(
        self,
        properties: Dict[str, Any],
        instance: Any,
        name: str
    ) -> Optional[Dict[str, Any]]:
        for processor in self._of_type(InstantiationAwarePostProcessor):
            properties = processor.process_properties(properties, instance, name)
            if properties is None:
                return None
        return properties

    def apply_early_reference(self, instance: Any, name: str) -> Any:
        exposed = instance
        for processor in self._of_type(SmartInstantiationAwarePostProcessor):
            exposed = processor.get_early_reference(exposed, name)
        return exposed

    def apply_before_initialization(self, instance: Any, name: str) -> Any:
        result = instance
        for processor in self._processors:
            current = processor.before_initialization(result, name)
            if current is None:
                return result
            result = current
        return result

    def apply_after_initialization(self, instance: Any, name: str) -> Any:
        result = instance
        for processor in self._processors:
            current = processor.after_initialization(result, name)
            if current is None:
                return result
            result = current
        return result

    def destruction_processors(self, instance: Any) -> Tuple[DestructionAwarePostProcessor, ...]:
        """Destruction-aware processors that want to see ``instance`` destroyed."""
        return tuple(
            processor for processor in self._of_type(DestructionAwarePostProcessor)
            if processor.requires_destruction(instance)
        )

    def requires_destruction(self, instance: Any) -> bool:
        return bool(self.destruction_processors(instance))
