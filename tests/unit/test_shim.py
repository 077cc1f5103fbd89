import pytest

from jmxbridge.errors import (
    AdapterError,
    InstanceNotFound,
    UnsupportedOperationError,
)
from jmxbridge.names import ObjectName
from jmxbridge.query import (
    AttributeEquals,
    ClassNameMatches,
    ContextRegistryBinding,
    QueryExp,
    bind_registry,
)
from jmxbridge.shim import QueryRegistryStandin, apply_query

FOO = ObjectName.parse("app:type=Foo,id=1")


class FixedBinding:
    def __init__(self, registry=None):
        self.registry = registry

    def current(self):
        return self.registry


class Recording(QueryExp):
    def __init__(self, result=True, error=None):
        super().__init__()
        self.result = result
        self.error = error
        self.seen = None

    def apply(self, name):
        self.seen = ContextRegistryBinding().current()
        if self.error is not None:
            raise self.error
        return self.result


def test_standin_bound_only_during_evaluation(adapter) -> None:
    query = Recording()
    assert apply_query(query, FOO, adapter, FixedBinding()) is True
    assert isinstance(query.seen, QueryRegistryStandin)
    assert query.registry is None
    assert ContextRegistryBinding().current() is None


def test_query_registry_is_left_untouched(adapter, registry) -> None:
    query = Recording(result=False)
    query.set_registry(registry)
    assert apply_query(query, FOO, adapter, FixedBinding()) is False
    assert query.registry is registry


def test_outer_binding_survives_evaluation(adapter, registry) -> None:
    query = Recording()
    with bind_registry(registry):
        apply_query(query, FOO, adapter, FixedBinding())
        assert ContextRegistryBinding().current() is registry
    assert isinstance(query.seen, QueryRegistryStandin)


def test_nothing_installed_when_a_registry_is_bound(adapter, registry) -> None:
    query = Recording()
    with bind_registry(registry):
        apply_query(query, FOO, adapter, ContextRegistryBinding())
    assert query.seen is registry


def test_class_lookup_goes_through_the_adapter(adapter) -> None:
    assert apply_query(ClassNameMatches("com.example.Foo"), FOO, adapter, FixedBinding())
    assert not apply_query(ClassNameMatches("*Bar"), FOO, adapter, FixedBinding())


def test_other_callbacks_are_refused(adapter) -> None:
    with pytest.raises(UnsupportedOperationError) as excinfo:
        apply_query(AttributeEquals("Count", 3), FOO, adapter, FixedBinding())
    assert excinfo.value.operation == "get_attribute"


def test_unexpected_errors_are_wrapped(adapter) -> None:
    cause = ValueError("boom")
    query = Recording(error=cause)
    with pytest.raises(AdapterError) as excinfo:
        apply_query(query, FOO, adapter, FixedBinding())
    assert excinfo.value.cause is cause
    assert query.registry is None


@pytest.mark.parametrize(
    "error", [InstanceNotFound("app:type=Foo"), RuntimeError("boom"), OSError("down")]
)
def test_passthrough_errors_propagate(adapter, error) -> None:
    with pytest.raises(type(error)) as excinfo:
        apply_query(Recording(error=error), FOO, adapter, FixedBinding())
    assert excinfo.value is error


def test_standin_refuses_everything_but_lookup(adapter) -> None:
    standin = QueryRegistryStandin(adapter)
    assert standin.get_object_instance(FOO).class_name == "com.example.Foo"
    calls = [
        lambda: standin.query_names(),
        lambda: standin.query_instances(),
        lambda: standin.is_registered(FOO),
        lambda: standin.get_mbean_count(),
        lambda: standin.get_attribute(FOO, "Count"),
        lambda: standin.get_attributes(FOO, ["Count"]),
        lambda: standin.set_attribute(FOO, None),
        lambda: standin.set_attributes(FOO, []),
        lambda: standin.invoke(FOO, "reset"),
        lambda: standin.get_domains(),
        lambda: standin.get_default_domain(),
        lambda: standin.get_mbean_info(FOO),
        lambda: standin.is_instance_of(FOO, "x"),
        lambda: standin.create_mbean("x", FOO),
        lambda: standin.unregister_mbean(FOO),
        lambda: standin.add_notification_listener(FOO, None),
        lambda: standin.remove_notification_listener(FOO, None),
        lambda: standin.get_class_loader_for(FOO),
    ]
    for call in calls:
        with pytest.raises(UnsupportedOperationError):
            call()
