"""
ResolutionContext

This module tracks the creation path of the current thread: which
components are being created, innermost last. The container uses it to:

- Record dependency edges: a component requested while another one is
  being created becomes a dependency of it
- Detect prototype components re-entering their own creation
- Bound recursion depth for cycles no other mechanism catches

The context is stored in a ContextVar, so each thread (and each asyncio
task, if one ever drives the container) sees its own path.
"""

from contextvars import ContextVar
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .container import ComponentContainer


class ResolutionContext:
    """One frame of the creation path.

    Attributes:
        container: The container creating the component
        name: The component being created
        prototype: Whether the component is prototype-scoped
        parent: The enclosing frame, or None at the top level
        depth: Number of frames including this one

    Note:
        This class is used internally by ComponentContainer.
        Users should not need to interact with it directly.
    """

    def __init__(
        self,
        container: 'ComponentContainer',
        name: str,
        prototype: bool = False,
        parent: Optional['ResolutionContext'] = None
    ):
        self.container = container
        self.name = name
        self.prototype = prototype
        self.parent = parent
        self.depth: int = parent.depth + 1 if parent is not None else 1

    def path(self) -> List[str]:
        """Component names on the path, outermost first."""
        names = []
        frame: Optional[ResolutionContext] = self
        while frame is not None:
            names.append(frame.name)
            frame = frame.parent
        return list(reversed(names))

    def is_prototype_in_creation(self, container: 'ComponentContainer', name: str) -> bool:
        frame: Optional[ResolutionContext] = self
        while frame is not None:
            if frame.prototype and frame.container is container and frame.name == name:
                return True
            frame = frame.parent
        return False


# Creation path of the current thread
_resolution_context: ContextVar[Optional[ResolutionContext]] = ContextVar(
    '_COMPONENTRY_RESOLUTION_CONTEXT',
    default=None
)
