"""
Test Fixtures

Common test classes used across test modules
"""

import threading

from componentry import DisposableComponent, FactoryComponent, InitializingComponent


class Database:
    """Test database class"""

    def __init__(self, url: str = "sqlite://"):
        self.url = url
        self.closed = False

    def close(self):
        self.closed = True


class CacheService:
    """Test cache service"""

    def __init__(self):
        self.cache = {}


class UserRepository:
    """Test repository with constructor dependencies"""

    def __init__(self, db: Database, cache: CacheService):
        self.db = db
        self.cache = cache


class Bean:
    """Plain component whose properties are assigned by the container"""

    def __init__(self, *args):
        self.args = args


class CounterService:
    """Service counting its instantiations across all instances"""

    instances = 0
    lock = threading.Lock()

    def __init__(self):
        with CounterService.lock:
            CounterService.instances += 1
        self.counter = 0

    @classmethod
    def reset(cls):
        cls.instances = 0


class Node:
    """Component taking part in cycles: ``peer`` is set as a property"""

    def __init__(self, peer=None):
        self.peer = peer


class LifecycleRecorder(InitializingComponent, DisposableComponent):
    """Records lifecycle callbacks into a shared event list"""

    def __init__(self, events: list, label: str):
        self.events = events
        self.label = label

    def after_properties_set(self):
        self.events.append(f"{self.label}.after_properties_set")

    def setup(self):
        self.events.append(f"{self.label}.setup")

    def destroy(self):
        self.events.append(f"{self.label}.destroy")

    def teardown(self):
        self.events.append(f"{self.label}.teardown")


class ClosingResource:
    """Resource with only an inferable ``shutdown`` method"""

    def __init__(self, events: list, label: str):
        self.events = events
        self.label = label

    def shutdown(self):
        self.events.append(f"{self.label}.shutdown")


class ExplodingResource(DisposableComponent):
    """Resource whose destroy() always fails"""

    def destroy(self):
        raise RuntimeError("boom")


class Greeting:
    def __init__(self, text: str):
        self.text = text


class GreetingFactory(FactoryComponent):
    """FactoryComponent producing Greeting objects"""

    def __init__(self, text: str = "hello", singleton: bool = True):
        self.text = text
        self.singleton = singleton
        self.calls = 0

    def get_object(self):
        self.calls += 1
        return Greeting(self.text)

    def object_type(self):
        return Greeting

    def is_singleton(self):
        return self.singleton


class ConnectionFactory:
    """Plain class exposing factory methods"""

    created = 0

    @staticmethod
    def create(url: str) -> Database:
        return Database(url)

    def connect(self, url: str) -> Database:
        ConnectionFactory.created += 1
        return Database(url)
