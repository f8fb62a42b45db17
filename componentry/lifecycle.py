"""
ComponentLifeCycle Enum

Built-in scope names and lifecycle markers
"""

from enum import Enum


class ComponentLifeCycle(str, Enum):
    """Built-in scopes handled by the container itself"""
    SINGLETON = "singleton"
    PROTOTYPE = "prototype"


# Destroy method marker: infer ``close`` or ``shutdown`` from the instance
INFER_METHOD = "(inferred)"

# Name prefix that dereferences a factory component to the factory itself
FACTORY_PREFIX = "&"
