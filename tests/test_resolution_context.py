"""
Resolution Context Tests

Tests for the per-thread creation path used to record dependency edges
and detect prototype recursion.
"""

import unittest

from componentry import ComponentContainer
from componentry.resolution_context import ResolutionContext, _resolution_context

from conftest import ComponentryTestCase, run_with_timeout
from fixtures import Bean


class TestResolutionContextFrames(unittest.TestCase):
    """Tests for ResolutionContext frames"""

    def setUp(self):
        self.container = ComponentContainer()

    def test_top_level_frame(self):
        """A frame without parent has depth 1"""
        frame = ResolutionContext(self.container, "a")

        self.assertEqual(frame.depth, 1)
        self.assertEqual(frame.path(), ["a"])

    def test_nested_frames(self):
        """Nested frames extend the path, innermost last"""
        outer = ResolutionContext(self.container, "a")
        middle = ResolutionContext(self.container, "b", parent=outer)
        inner = ResolutionContext(self.container, "c", parent=middle)

        self.assertEqual(inner.depth, 3)
        self.assertEqual(inner.path(), ["a", "b", "c"])
        self.assertEqual(outer.path(), ["a"])

    def test_prototype_in_creation(self):
        """Only prototype frames of the same container match"""
        outer = ResolutionContext(self.container, "p", prototype=True)
        inner = ResolutionContext(self.container, "s", parent=outer)

        self.assertTrue(inner.is_prototype_in_creation(self.container, "p"))
        self.assertFalse(inner.is_prototype_in_creation(self.container, "s"))
        self.assertFalse(inner.is_prototype_in_creation(ComponentContainer(), "p"))


class TestResolutionContextLifetime(ComponentryTestCase):
    """Tests for the context seen while the container creates components"""

    def test_no_context_outside_creation(self):
        self.assertIsNone(_resolution_context.get())

    def test_context_during_creation(self):
        """Factories observe the creation path and it is reset afterwards"""
        seen = []

        def make_inner():
            seen.append(_resolution_context.get().path())
            return Bean()

        def make_outer():
            self.container.get("inner")
            return Bean()

        self.define("inner", make_inner)
        self.define("outer", make_outer)
        self.container.get("outer")

        self.assertEqual(seen, [["outer", "inner"]])
        self.assertIsNone(_resolution_context.get())

    def test_context_is_reset_after_failure(self):
        def broken():
            raise ValueError("boom")

        self.define("broken", broken)

        with self.assertRaises(Exception):
            self.container.get("broken")

        self.assertIsNone(_resolution_context.get())

    def test_other_threads_start_empty(self):
        """A thread spawned during creation has no creation path"""
        seen = []

        def make():
            seen.append(run_with_timeout(_resolution_context.get))
            return Bean()

        self.define("bean", make)
        self.container.get("bean")

        self.assertEqual(seen, [None])


if __name__ == '__main__':
    unittest.main()
