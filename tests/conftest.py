"""
Test Configuration and Utilities

Common base classes and helper functions for Componentry tests
"""

import threading
import unittest
from typing import Any, Callable, Optional

from componentry import ComponentContainer, ContainerSettings, Definition


class ComponentryTestCase(unittest.TestCase):
    """
    Base test case class for Componentry tests.

    Creates a fresh container before each test and destroys its singletons
    afterwards.
    """

    settings: Optional[ContainerSettings] = None

    def setUp(self):
        """Create a fresh container before each test"""
        self.container = ComponentContainer(settings=self.settings)

    def tearDown(self):
        """Destroy singletons after each test"""
        self.container.destroy_singletons()

    def define(self, name: str, implementation: Any = None, **fields: Any) -> Definition:
        """Register a definition on the test container and return it."""
        definition = Definition(name=name, implementation=implementation, **fields)
        self.container.register_definition(name, definition)
        return definition


def run_with_timeout(target: Callable[[], Any], timeout: float = 5.0) -> Any:
    """
    Run ``target`` in a daemon thread and return its result.

    Fails the calling test instead of hanging when ``target`` does not finish
    within ``timeout`` seconds. An exception raised by ``target`` is re-raised.

    Example:
        >>> run_with_timeout(lambda: container.get("a"), timeout=2.0)
    """
    outcome = {}

    def runner():
        try:
            outcome["result"] = target()
        except BaseException as e:
            outcome["error"] = e

    thread = threading.Thread(target=runner, daemon=True)
    thread.start()
    thread.join(timeout)
    if thread.is_alive():
        raise AssertionError(f"Operation did not finish within {timeout} seconds")
    if "error" in outcome:
        raise outcome["error"]
    return outcome.get("result")
