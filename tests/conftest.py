"""Shared fixtures: a small registry of managed objects."""

import pytest

from jmxbridge.adapter import RemoteRegistryAdapter
from jmxbridge.registry import (
    AttributeSpec,
    LocalRegistry,
    ManagedObject,
    MBeanParameterInfo,
    OperationSpec,
)
from jmxbridge.transports import InMemoryTransport


def _foo(counter: int = 3) -> ManagedObject:
    state = {"resets": 0}

    def reset() -> int:
        state["resets"] += 1
        return state["resets"]

    return ManagedObject(
        class_name="com.example.Foo",
        description="Example Foo service",
        attributes={
            "Count": AttributeSpec(value=counter, type="int"),
            "Name": AttributeSpec(value="alpha", type="java.lang.String", writable=False),
            "Config": AttributeSpec(
                value={"threads": [1, 2, 3], "mode": "fast"}, type="java.util.Map"
            ),
        },
        operations={
            "reset": OperationSpec(handler=reset, parameters=[], return_type="int"),
            "add": OperationSpec(
                handler=lambda a, b: a + b,
                parameters=[
                    MBeanParameterInfo(name="a", type="int"),
                    MBeanParameterInfo(name="b", type="int"),
                ],
                return_type="int",
            ),
        },
    )


@pytest.fixture
def registry() -> LocalRegistry:
    registry = LocalRegistry()
    registry.register_mbean("app:type=Foo,id=1", _foo())
    registry.register_mbean("other:type=Foo,x=y", _foo(counter=7))
    registry.register_mbean(
        "app:type=Bar,id=1",
        ManagedObject(
            class_name="com.example.Bar",
            attributes={"Enabled": AttributeSpec(value=True, type="boolean")},
        ),
    )
    return registry


@pytest.fixture
def transport(registry: LocalRegistry) -> InMemoryTransport:
    return InMemoryTransport(registry)


@pytest.fixture
def adapter(transport: InMemoryTransport) -> RemoteRegistryAdapter:
    return RemoteRegistryAdapter(transport)
