"""
Definition Tests

Tests for Definition/RootDefinition records and the merge of a child
definition into its parent.
"""

import unittest

from componentry import (
    ComponentReference,
    Definition,
    DefinitionBuilder,
    ManagedList,
    ManagedMap,
    ManagedSet,
    RootDefinition,
    merge_definitions,
)
from componentry.values import Mergeable

from fixtures import Bean, Database


def root(**fields) -> RootDefinition:
    fields.setdefault("name", "parent")
    return RootDefinition.from_definition(Definition(**fields))


class TestDefinition(unittest.TestCase):
    """Test raw Definition behavior."""

    def test_empty_name_is_rejected(self):
        with self.assertRaises(ValueError):
            Definition(name="")

    def test_default_scope_is_singleton(self):
        definition = Definition(name="a")
        self.assertEqual(definition.effective_scope, "singleton")
        self.assertTrue(definition.is_singleton)
        self.assertFalse(definition.is_prototype)
        self.assertFalse(definition.is_lazy_init)

    def test_copy_shares_no_property_dict(self):
        definition = Definition(name="a", property_assignments={"x": 1})
        copy = definition.copy()
        copy.property_assignments["y"] = 2

        self.assertEqual(definition.property_assignments, {"x": 1})
        self.assertEqual(copy, Definition(name="a", property_assignments={"x": 1, "y": 2}))

    def test_sequences_are_stored_as_tuples(self):
        definition = Definition(name="a", constructor_args=[1, 2], depends_on=["b"])
        self.assertEqual(definition.constructor_args, (1, 2))
        self.assertEqual(definition.depends_on, ("b",))


class TestRootDefinition(unittest.TestCase):
    """Test merged definition invariants."""

    def test_from_definition_drops_parent_and_fixes_scope(self):
        """Roots have no parent and an explicit scope"""
        merged = RootDefinition.from_definition(
            Definition(name="a", parent_name="p", implementation=Bean)
        )
        self.assertIsNone(merged.parent_name)
        self.assertEqual(merged.scope_name, "singleton")
        self.assertIs(merged.lazy_init, False)

    def test_parent_cannot_be_set(self):
        merged = root(implementation=Bean)
        with self.assertRaises(ValueError):
            merged.parent_name = "other"

    def test_merging_a_root_again_is_idempotent(self):
        """Merging an empty child into a root changes nothing"""
        merged = root(
            implementation=Bean,
            property_assignments={"w": 1},
            scope_name="prototype",
            lazy_init=True,
        )
        self.assertEqual(RootDefinition.from_definition(merged), merged)

    def test_caches_do_not_take_part_in_equality(self):
        first = root(implementation=Bean)
        second = root(implementation=Bean)
        first.resolved_type = Bean
        first.post_processed = True
        first.mark_stale()
        self.assertEqual(first, second)

    def test_target_type(self):
        self.assertIs(root(implementation=Bean).target_type, Bean)
        self.assertIsNone(root(implementation=Bean, factory_method_name="create").target_type)
        self.assertIsNone(root(implementation=lambda: Bean()).target_type)

    def test_externally_managed_methods_match_qualified_names(self):
        """Type.method entries match the bare method name"""
        merged = root(implementation=Database)
        merged.register_externally_managed_destroy_method("Database.close")
        merged.register_externally_managed_init_method("setup")

        self.assertTrue(merged.has_any_externally_managed_destroy_method("close"))
        self.assertFalse(merged.is_externally_managed_destroy_method("close"))
        self.assertTrue(merged.is_externally_managed_init_method("setup"))
        self.assertFalse(merged.is_externally_managed_destroy_method("setup"))


class TestMergeDefinitions(unittest.TestCase):
    """Test merge of a child definition into its merged parent."""

    def setUp(self):
        self.parent = root(implementation=Bean, property_assignments={"w": 1, "z": 2})

    def test_child_overrides_one_property_and_inherits_another(self):
        """Child properties win key by key"""
        child = Definition(name="child", parent_name="parent", property_assignments={"z": 3})
        merged = merge_definitions(self.parent, child)

        self.assertEqual(merged.name, "child")
        self.assertIsNone(merged.parent_name)
        self.assertIs(merged.implementation, Bean)
        self.assertEqual(merged.property_assignments, {"w": 1, "z": 3})

    def test_merge_equals_parent_with_only_the_override_changed(self):
        child = Definition(name="child", parent_name="parent", property_assignments={"z": 3})
        expected = root(name="child", implementation=Bean, property_assignments={"w": 1, "z": 3})
        self.assertEqual(merge_definitions(self.parent, child), expected)

    def test_merge_does_not_modify_parent(self):
        child = Definition(name="child", parent_name="parent", property_assignments={"z": 3})
        merge_definitions(self.parent, child)
        self.assertEqual(self.parent.property_assignments, {"w": 1, "z": 2})

    def test_constructor_args_are_overridden_by_position(self):
        """Constructor args are overlaid index by index"""
        parent = root(implementation=Bean, constructor_args=(1, 2, 3))
        child = Definition(name="child", parent_name="parent", constructor_args=("a",))
        self.assertEqual(merge_definitions(parent, child).constructor_args, ("a", 2, 3))

    def test_child_may_add_constructor_args(self):
        parent = root(implementation=Bean, constructor_args=(1,))
        child = Definition(name="child", parent_name="parent", constructor_args=("a", "b"))
        self.assertEqual(merge_definitions(parent, child).constructor_args, ("a", "b"))

    def test_scalar_fields_child_wins_when_set(self):
        parent = root(
            implementation=Bean,
            scope_name="prototype",
            init_method_name="start",
            destroy_method_name="stop",
            depends_on=("db",),
            lazy_init=True,
            description="parent",
        )
        child = Definition(
            name="child",
            parent_name="parent",
            implementation=Database,
            init_method_name="begin",
        )
        merged = merge_definitions(parent, child)

        self.assertIs(merged.implementation, Database)
        self.assertEqual(merged.scope_name, "prototype")
        self.assertEqual(merged.init_method_name, "begin")
        self.assertEqual(merged.destroy_method_name, "stop")
        self.assertEqual(merged.depends_on, ("db",))
        self.assertIs(merged.lazy_init, True)
        self.assertEqual(merged.description, "parent")

    def test_abstract_and_primary_are_not_inherited(self):
        """abstract and primary always come from the child"""
        parent = root(implementation=Bean, abstract=True, primary=True)
        merged = merge_definitions(parent, Definition(name="child", parent_name="parent"))
        self.assertFalse(merged.abstract)
        self.assertFalse(merged.primary)

    def test_managed_list_merges_parent_elements_first(self):
        """Parent elements come first in a merged ManagedList"""
        parent = root(implementation=Bean, property_assignments={"items": ManagedList([1, 2])})
        child = Definition(
            name="child", parent_name="parent",
            property_assignments={"items": ManagedList([3])},
        )
        self.assertEqual(merge_definitions(parent, child).property_assignments["items"], [1, 2, 3])

    def test_managed_list_with_merging_disabled_replaces(self):
        parent = root(implementation=Bean, property_assignments={"items": ManagedList([1, 2])})
        child = Definition(
            name="child", parent_name="parent",
            property_assignments={"items": ManagedList([3], merge_enabled=False)},
        )
        self.assertEqual(merge_definitions(parent, child).property_assignments["items"], [3])

    def test_managed_map_and_set_merge(self):
        parent = root(
            implementation=Bean,
            property_assignments={
                "map": ManagedMap({"a": 1, "b": 2}),
                "set": ManagedSet({"x"}),
            },
        )
        child = Definition(
            name="child", parent_name="parent",
            property_assignments={
                "map": ManagedMap({"b": 3, "c": ComponentReference("db")}),
                "set": ManagedSet({"y"}),
            },
        )
        merged = merge_definitions(parent, child).property_assignments

        self.assertEqual(merged["map"], {"a": 1, "b": 3, "c": ComponentReference("db")})
        self.assertEqual(merged["set"], {"x", "y"})

    def test_plain_list_is_not_merged(self):
        parent = root(implementation=Bean, property_assignments={"items": [1, 2]})
        child = Definition(
            name="child", parent_name="parent",
            property_assignments={"items": ManagedList([3])},
        )
        self.assertEqual(merge_definitions(parent, child).property_assignments["items"], [3])

    def test_mergeable_requires_merge(self):
        """Collections without merge() cannot be instantiated"""

        class Incomplete(Mergeable, list):
            pass

        with self.assertRaises(TypeError):
            Mergeable()
        with self.assertRaises(TypeError):
            Incomplete()
        self.assertIsInstance(ManagedList([1]), Mergeable)


class TestDefinitionBuilder(unittest.TestCase):
    """Test the fluent DefinitionBuilder."""

    def test_builds_definition(self):
        """Every setter lands in the built Definition"""
        definition = (
            DefinitionBuilder.generic("repo", Bean)
            .add_constructor_arg("x")
            .add_constructor_reference("db")
            .add_property_value("timeout", 5)
            .add_property_reference("cache", "cache")
            .add_depends_on("init")
            .add_depends_on("init")
            .set_prototype()
            .set_lazy_init(True)
            .set_init_method("start")
            .set_destroy_method()
            .set_description("repository")
            .get_definition()
        )

        self.assertEqual(definition.name, "repo")
        self.assertIs(definition.implementation, Bean)
        self.assertEqual(definition.constructor_args, ("x", ComponentReference("db")))
        self.assertEqual(
            definition.property_assignments,
            {"timeout": 5, "cache": ComponentReference("cache")},
        )
        self.assertEqual(definition.depends_on, ("init",))
        self.assertEqual(definition.scope_name, "prototype")
        self.assertTrue(definition.lazy_init)
        self.assertEqual(definition.init_method_name, "start")
        self.assertEqual(definition.destroy_method_name, "(inferred)")
        self.assertEqual(definition.description, "repository")

    def test_child_definition(self):
        definition = DefinitionBuilder.child("fast", "base").add_property_value("t", 1).get_definition()
        self.assertEqual(definition.parent_name, "base")
        self.assertIsNone(definition.implementation)
        self.assertEqual(definition.scope_name, "")

    def test_factory_component(self):
        definition = (
            DefinitionBuilder.generic("db")
            .set_factory_component("connector", "connect")
            .get_definition()
        )
        self.assertEqual(definition.factory_component_name, "connector")
        self.assertEqual(definition.factory_method_name, "connect")

    def test_each_definition_is_independent(self):
        builder = DefinitionBuilder.generic("a", Bean).add_property_value("x", 1)
        first = builder.get_definition()
        builder.add_property_value("y", 2)
        self.assertEqual(first.property_assignments, {"x": 1})


if __name__ == '__main__':
    unittest.main()
