"""
DisposableAdapter

Destruction callback registered for a component instance. Running it
performs, in order:

1. ``before_destruction`` of every destruction-aware post-processor
2. ``DisposableComponent.destroy()``
3. The configured destroy method (or the inferred ``close``/``shutdown``)

Steps whose method a post-processor declared externally managed are skipped.
"""

import logging
from typing import Any, Optional

from .component import DisposableComponent
from .definition import RootDefinition
from .lifecycle import INFER_METHOD
from .post_processor import PostProcessorPipeline

logger = logging.getLogger(__name__)

_INFERRED_METHOD_NAMES = ("close", "shutdown")


def infer_destroy_method(instance: Any, definition: Optional[RootDefinition]) -> Optional[str]:
    """Return the destroy method name to call on ``instance``, if any."""
    if definition is None or not definition.destroy_method_name:
        return None
    method_name = definition.destroy_method_name
    if method_name == INFER_METHOD:
        if isinstance(instance, DisposableComponent):
            return None
        for candidate in _INFERRED_METHOD_NAMES:
            if callable(getattr(instance, candidate, None)):
                return candidate
        return None
    if isinstance(instance, DisposableComponent) and method_name == "destroy":
        return None
    return method_name


def requires_destruction(
    instance: Any,
    definition: Optional[RootDefinition],
    pipeline: PostProcessorPipeline
) -> bool:
    if isinstance(instance, DisposableComponent):
        return True
    if infer_destroy_method(instance, definition) is not None:
        return True
    return pipeline.requires_destruction(instance)


class DisposableAdapter:
    """Callable that destroys one component instance.

    Attributes:
        name: Component name
        instance: The raw instance to destroy
    """

    def __init__(
        self,
        name: str,
        instance: Any,
        definition: Optional[RootDefinition],
        pipeline: PostProcessorPipeline
    ):
        self.name = name
        self.instance = instance
        self._definition = definition
        self._processors = pipeline.destruction_processors(instance)
        self._destroy_method = infer_destroy_method(instance, definition)

    def _externally_managed(self, method_name: str) -> bool:
        return (self._definition is not None
                and self._definition.has_any_externally_managed_destroy_method(method_name))

    def __call__(self) -> None:
        for processor in self._processors:
            processor.before_destruction(self.instance, self.name)

        if isinstance(self.instance, DisposableComponent) and not self._externally_managed("destroy"):
            logger.debug("Invoking destroy() on component '%s'", self.name)
            self.instance.destroy()

        if self._destroy_method and not self._externally_managed(self._destroy_method):
            method = getattr(self.instance, self._destroy_method, None)
            if method is None:
                raise AttributeError(
                    f"Could not find a destroy method named '{self._destroy_method}' "
                    f"on component '{self.name}'"
                )
            logger.debug(
                "Invoking destroy method '%s' on component '%s'", self._destroy_method, self.name
            )
            method()

    def __repr__(self) -> str:
        return f"DisposableAdapter({self.name!r})"
