import pytest

from jmxbridge.errors import (
    AttributeNotFound,
    InstanceNotFound,
    InvalidStateError,
    MalformedNameError,
    OperationNotFound,
    ProtocolDecodeError,
    UnsupportedOperationError,
)
from jmxbridge.names import ObjectName
from jmxbridge.registry import Attribute, LocalRegistry, ManagedObject


def test_register_and_lookup(registry) -> None:
    instance = registry.get_object_instance("app:id=1,type=Foo")
    assert instance.class_name == "com.example.Foo"
    assert registry.is_registered("app:type=Foo,id=1")
    assert registry.get_mbean_count() == 3
    assert registry.is_instance_of("app:type=Bar,id=1", "com.example.Bar")
    assert not registry.is_instance_of("app:type=Bar,id=1", "com.example")


def test_register_rejects_patterns_and_duplicates(registry) -> None:
    with pytest.raises(MalformedNameError):
        registry.register_mbean("app:type=*", ManagedObject(class_name="x"))
    with pytest.raises(InvalidStateError):
        registry.register_mbean("app:id=1,type=Foo", ManagedObject(class_name="x"))


def test_unregister(registry) -> None:
    registry.unregister_mbean("app:type=Bar,id=1")
    assert not registry.is_registered("app:type=Bar,id=1")
    with pytest.raises(InstanceNotFound):
        registry.unregister_mbean("app:type=Bar,id=1")


def test_names_keep_registration_order(registry) -> None:
    assert [str(n) for n in registry.names()] == [
        "app:id=1,type=Foo",
        "other:type=Foo,x=y",
        "app:id=1,type=Bar",
    ]
    assert registry.get_domains() == ["app", "other"]
    assert registry.get_default_domain() == "app"


def test_default_domain_of_empty_registry() -> None:
    with pytest.raises(InstanceNotFound):
        LocalRegistry().get_default_domain()


def test_query_names_and_instances(registry) -> None:
    assert registry.query_names("*:type=Foo,*") == {
        ObjectName.parse("app:type=Foo,id=1"),
        ObjectName.parse("other:type=Foo,x=y"),
    }
    instances = registry.query_instances("app:*")
    assert {i.class_name for i in instances} == {"com.example.Foo", "com.example.Bar"}


def test_attributes(registry) -> None:
    name = "app:type=Foo,id=1"
    assert registry.get_attribute(name, "Count") == 3
    assert registry.get_all_attributes(name)["Name"] == "alpha"
    values = registry.get_attributes(name, ["Name", "Count"])
    assert [(a.name, a.value) for a in values] == [("Name", "alpha"), ("Count", 3)]

    registry.set_attributes(name, [Attribute(name="Count", value=9)])
    assert registry.get_attribute(name, "Count") == 9

    with pytest.raises(AttributeNotFound):
        registry.get_attribute(name, "Missing")
    with pytest.raises(UnsupportedOperationError):
        registry.set_attribute(name, Attribute(name="Name", value="beta"))
    with pytest.raises(InstanceNotFound):
        registry.get_attribute("app:type=Nope", "Count")


def test_invoke(registry) -> None:
    name = "app:type=Foo,id=1"
    assert registry.invoke(name, "add", [2, 3]) == 5
    assert registry.invoke(name, "reset") == 1
    assert registry.invoke(name, "reset", []) == 2
    with pytest.raises(ProtocolDecodeError):
        registry.invoke(name, "add", [1])
    with pytest.raises(OperationNotFound):
        registry.invoke(name, "explode")


def test_mbean_info(registry) -> None:
    info = registry.get_mbean_info("app:type=Foo,id=1")
    assert info.class_name == "com.example.Foo"
    assert info.description == "Example Foo service"
    assert info.attributes["Count"].writable
    assert not info.attributes["Name"].writable
    assert [p.name for p in info.operations["add"][0].arguments] == ["a", "b"]


def test_unsupported_operations(registry) -> None:
    name = ObjectName.parse("app:type=Foo,id=1")
    with pytest.raises(UnsupportedOperationError):
        registry.create_mbean("com.example.Foo", name)
    with pytest.raises(UnsupportedOperationError):
        registry.add_notification_listener(name, print)
    with pytest.raises(UnsupportedOperationError):
        registry.remove_notification_listener(name, print)
