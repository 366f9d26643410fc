import pytest

from refcache.di import Container
from refcache.errors import CircularDependencyError, ResolutionError


class Channel:
    pass


class Consumer:
    def __init__(self, channel):
        self.channel = channel


class WithArgs:
    def __init__(self, value):
        self.value = value


def test_singleton_is_shared():
    container = Container()
    container.register_singleton(Channel)
    assert container.resolve(Channel) is container.resolve(Channel)


def test_transient_is_fresh():
    container = Container()
    container.register_transient(Channel)
    assert container.resolve(Channel) is not container.resolve(Channel)


def test_transient_kwargs():
    container = Container()
    container.register_transient(WithArgs, value=3)
    assert container.resolve(WithArgs).value == 3


def test_factory_receives_container():
    container = Container()
    container.register_singleton(Channel)
    container.register_factory(Consumer, lambda c: Consumer(c.resolve(Channel)))
    consumer = container.resolve(Consumer)
    assert consumer.channel is container.resolve(Channel)


def test_singleton_factory():
    container = Container()
    container.register_singleton(Channel)
    container.register_singleton(Consumer, factory=lambda c: Consumer(c.resolve(Channel)))
    assert container.resolve(Consumer) is container.resolve(Consumer)


def test_register_instance():
    container = Container()
    channel = Channel()
    container.register_instance(Channel, channel)
    assert container.resolve(Channel) is channel


def test_resolve_unregistered():
    with pytest.raises(ResolutionError):
        Container().resolve(Channel)


def test_circular_dependency_detected():
    container = Container()
    container.register_factory(Channel, lambda c: c.resolve(Consumer))
    container.register_factory(Consumer, lambda c: Consumer(c.resolve(Channel)))
    with pytest.raises(CircularDependencyError):
        container.resolve(Channel)
