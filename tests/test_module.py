"""
Module DSL Tests

Tests for ComponentModule:
- single[] / prototype[] / scoped[] / child[] registration
- Registration options (properties, lifecycle methods, factory methods)
- Aliases and prebuilt definitions
- Loading modules into a container
"""

import unittest

from componentry import (
    CachingScope,
    ComponentModule,
    ComponentReference,
    ComponentryCore,
    ComponentryError,
    Definition,
    DuplicateDefinitionError,
)

from fixtures import (
    Bean,
    CacheService,
    ConnectionFactory,
    CounterService,
    Database,
    UserRepository,
)


class TestRegistrationBuilders(unittest.TestCase):
    """Tests for the definitions the subscript builders produce"""

    def test_single_registers_singleton(self):
        """single[] registers a non-lazy singleton by default"""
        module = ComponentModule()
        with module:
            module.single["db"](Database, "postgres://main")

        definition = module.definitions[0]
        self.assertEqual(definition.name, "db")
        self.assertIs(definition.implementation, Database)
        self.assertEqual(definition.scope_name, "singleton")
        self.assertEqual(definition.constructor_args, ("postgres://main",))
        self.assertIs(definition.lazy_init, False)

    def test_lazy_module_marks_singletons_lazy(self):
        """ComponentModule(lazy_init=True) makes singletons lazy"""
        module = ComponentModule(lazy_init=True)
        module.single["db"](Database)
        module.single["cache"](CacheService, lazy_init=False)

        db, cache = module.definitions
        self.assertTrue(db.lazy_init)
        self.assertFalse(cache.lazy_init)

    def test_prototype_registers_prototype(self):
        """prototype[] registers a prototype without a lazy-init flag"""
        module = ComponentModule()
        module.prototype["db"](Database)

        definition = module.definitions[0]
        self.assertEqual(definition.scope_name, "prototype")
        self.assertIsNone(definition.lazy_init)

    def test_options(self):
        """Keyword options map onto definition fields"""
        module = ComponentModule()
        module.single["repo"](
            UserRepository,
            module.ref("db"),
            module.ref("cache"),
            properties={"timeout": 5},
            depends_on=["migrations", "migrations"],
            primary=True,
            init_method="start",
            destroy_method="close",
            description="User storage",
        )

        definition = module.definitions[0]
        self.assertEqual(
            definition.constructor_args,
            (ComponentReference("db"), ComponentReference("cache")),
        )
        self.assertEqual(definition.property_assignments, {"timeout": 5})
        self.assertEqual(definition.depends_on, ("migrations",))
        self.assertTrue(definition.primary)
        self.assertEqual(definition.init_method_name, "start")
        self.assertEqual(definition.destroy_method_name, "close")
        self.assertEqual(definition.description, "User storage")

    def test_factory_options(self):
        """factory_method and factory_component options"""
        module = ComponentModule()
        module.single["primary"](ConnectionFactory, "postgres://main", factory_method="create")
        module.single["replica"](
            None, "postgres://replica",
            factory_component="connections", factory_method="connect",
        )

        primary, replica = module.definitions
        self.assertEqual(primary.factory_method_name, "create")
        self.assertIsNone(primary.factory_component_name)
        self.assertEqual(replica.factory_component_name, "connections")
        self.assertEqual(replica.factory_method_name, "connect")

    def test_ref(self):
        """ref() builds component references"""
        self.assertEqual(ComponentModule.ref("db"), ComponentReference("db"))
        self.assertTrue(ComponentModule.ref("db", to_parent=True).to_parent)

    def test_later_registration_replaces_earlier(self):
        """Same name twice within one module keeps the last definition"""
        module = ComponentModule()
        module.single["db"](Database, "first://")
        module.single["db"](Database, "second://")

        self.assertEqual(len(module.definitions), 1)
        self.assertEqual(module.definitions[0].constructor_args, ("second://",))

    def test_add_prebuilt_definition(self):
        """add() registers a prebuilt Definition"""
        module = ComponentModule()
        module.add("db", Definition(name="db", implementation=Database))
        self.assertEqual(module.load(), [("db", module.definitions[0])])

    def test_repr(self):
        module = ComponentModule()
        module.single["db"](Database)
        module.alias("database", "db")
        self.assertEqual(repr(module), "ComponentModule(definitions=1, aliases=1)")


class TestScopedRegistration(unittest.TestCase):
    """Tests for scoped[] within scope() blocks"""

    def test_scoped_outside_scope_block(self):
        """scoped[] outside a scope block raises"""
        module = ComponentModule()
        with self.assertRaises(ComponentryError) as ctx:
            module.scoped["ctx"](Bean)
        self.assertIn("module.scope", str(ctx.exception))

    def test_scoped_registers_scope_name(self):
        """scoped[] uses the enclosing scope name"""
        module = ComponentModule()
        with module.scope("request"):
            module.scoped["ctx"](Bean)

        definition = module.definitions[0]
        self.assertEqual(definition.scope_name, "request")
        self.assertIsNone(definition.lazy_init)

    def test_nested_scope_blocks(self):
        """Leaving a nested block restores the outer scope"""
        module = ComponentModule()
        with module.scope("request"):
            with module.scope("session"):
                module.scoped["user"](Bean)
            module.scoped["ctx"](Bean)

        user, ctx = module.definitions
        self.assertEqual(user.scope_name, "session")
        self.assertEqual(ctx.scope_name, "request")
        with self.assertRaises(ComponentryError):
            module.scoped["late"](Bean)


class TestChildRegistration(unittest.TestCase):
    """Tests for child[] definitions"""

    def test_child_inherits(self):
        """child[] builds a definition with a parent and no own scope"""
        module = ComponentModule()
        module.single["base"](Bean, properties={"timeout": 5}, abstract=True)
        module.child["fast"]("base", properties={"timeout": 1})

        base, fast = module.definitions
        self.assertTrue(base.abstract)
        self.assertEqual(fast.parent_name, "base")
        self.assertIsNone(fast.implementation)
        self.assertEqual(fast.scope_name, "")

    def test_child_resolves_through_container(self):
        """Child definitions merge with their parent when loaded"""
        module = ComponentModule()
        module.single["base"](Bean, properties={"timeout": 5, "retries": 3}, abstract=True)
        module.child["fast"]("base", properties={"timeout": 1})
        module.child["proto"]("base", scope="prototype")

        with ComponentryCore(sources=[module]) as app:
            fast = app.get("fast")
            self.assertEqual((fast.timeout, fast.retries), (1, 3))
            self.assertIsNot(app.get("proto"), app.get("proto"))


class TestModuleLoading(unittest.TestCase):
    """Tests for loading modules into ComponentryCore"""

    def setUp(self):
        CounterService.reset()

    def test_eager_singletons_created_on_load(self):
        """Non-lazy singletons are created when the module is loaded"""
        module = ComponentModule()
        module.single["counter"](CounterService)

        with ComponentryCore(sources=[module]):
            self.assertEqual(CounterService.instances, 1)

    def test_lazy_singletons_created_on_first_use(self):
        """Lazy singletons are created on first get()"""
        module = ComponentModule(lazy_init=True)
        module.single["counter"](CounterService)

        with ComponentryCore(sources=[module]) as app:
            self.assertEqual(CounterService.instances, 0)
            app.get("counter")
            self.assertEqual(CounterService.instances, 1)

    def test_references_between_modules(self):
        """Components of one module can reference another module's"""
        infrastructure = ComponentModule()
        infrastructure.single["db"](Database)
        infrastructure.single["cache"](CacheService)

        services = ComponentModule()
        services.single["repo"](UserRepository, services.ref("db"), services.ref("cache"))

        with ComponentryCore(sources=[infrastructure, services]) as app:
            repo = app.get("repo")
            self.assertIs(repo.db, app.get("db"))

    def test_aliases_loaded_after_definitions(self):
        """Aliases may point at definitions declared later in the module"""
        module = ComponentModule()
        module.alias("database", "db")
        module.single["db"](Database)

        with ComponentryCore(sources=[module]) as app:
            self.assertIs(app.get("database"), app.get("db"))

    def test_duplicates_across_modules(self):
        """The same name in two modules is rejected on load"""
        first = ComponentModule()
        first.single["db"](Database)
        second = ComponentModule()
        second.single["db"](Database)

        with self.assertRaises(DuplicateDefinitionError):
            ComponentryCore(sources=[first, second])

    def test_scoped_components_through_core(self):
        """Scoped definitions resolve against the bound scope"""
        module = ComponentModule()
        with module.scope("request"):
            module.scoped["ctx"](Bean)

        with ComponentryCore(sources=[module]) as app:
            with app.create_scope("request", "req-1") as scope:
                self.assertIsInstance(scope, CachingScope)
                self.assertIs(app.get("ctx"), app.get("ctx"))


if __name__ == '__main__':
    unittest.main()
