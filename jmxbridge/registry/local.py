"""In-process registry of managed objects."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Sequence, Set

from pydantic import BaseModel, Field

from ..errors import (
    AttributeNotFound,
    InstanceNotFound,
    InvalidStateError,
    MalformedNameError,
    OperationNotFound,
    ProtocolDecodeError,
    UnsupportedOperationError,
)
from ..names import ObjectName
from .base import ManagementRegistry
from .models import (
    Attribute,
    MBeanAttributeInfo,
    MBeanInfo,
    MBeanOperationInfo,
    MBeanParameterInfo,
    ObjectInstance,
)

if TYPE_CHECKING:
    from ..query import QueryExp


class AttributeSpec(BaseModel):
    """Current value and metadata of one attribute."""

    value: Any = None
    type: Optional[str] = None
    writable: bool = True
    description: Optional[str] = None


class OperationSpec(BaseModel):
    """A callable exposed as an operation."""

    handler: Callable[..., Any]
    parameters: Optional[List[MBeanParameterInfo]] = None
    return_type: Optional[str] = None
    description: Optional[str] = None


class ManagedObject(BaseModel):
    """A management object held by a :class:`LocalRegistry`."""

    class_name: str
    description: Optional[str] = None
    attributes: Dict[str, AttributeSpec] = Field(default_factory=dict)
    operations: Dict[str, OperationSpec] = Field(default_factory=dict)

    def info(self) -> MBeanInfo:
        return MBeanInfo(
            class_name=self.class_name,
            description=self.description,
            attributes={
                name: MBeanAttributeInfo(
                    type=spec.type, description=spec.description, writable=spec.writable
                )
                for name, spec in self.attributes.items()
            },
            operations={
                name: [
                    MBeanOperationInfo(
                        arguments=spec.parameters or [],
                        return_type=spec.return_type,
                        description=spec.description,
                    )
                ]
                for name, spec in self.operations.items()
            },
        )


class LocalRegistry(ManagementRegistry):
    """Thread-safe registry living in the current process.

    Names are kept in registration order, which is the order searches and
    domain listings report them in.
    """

    def __init__(self) -> None:
        self._objects: Dict[ObjectName, ManagedObject] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    def register_mbean(self, name: ObjectName | str, obj: ManagedObject) -> ObjectInstance:
        name = ObjectName.of(name)
        if name.is_pattern:
            raise MalformedNameError(f"Cannot register under pattern {name}")
        with self._lock:
            if name in self._objects:
                raise InvalidStateError(f"{name} is already registered")
            self._objects[name] = obj
        return ObjectInstance(object_name=name, class_name=obj.class_name)

    def unregister_mbean(self, name: ObjectName | str) -> None:
        name = ObjectName.of(name)
        with self._lock:
            if self._objects.pop(name, None) is None:
                raise InstanceNotFound(str(name))

    def _lookup(self, name: ObjectName | str) -> ManagedObject:
        name = ObjectName.of(name)
        with self._lock:
            obj = self._objects.get(name)
        if obj is None:
            raise InstanceNotFound(str(name))
        return obj

    def names(self, pattern: Optional[ObjectName] = None) -> List[ObjectName]:
        """Registered names matching ``pattern``, in registration order."""
        with self._lock:
            registered = list(self._objects)
        if pattern is None:
            return registered
        return [name for name in registered if name == pattern or name.matches(pattern)]

    def _filter(
        self, names: Iterable[ObjectName], query: Optional["QueryExp"]
    ) -> List[ObjectName]:
        if query is None:
            return list(names)
        from ..query import bind_registry

        with bind_registry(self):
            return [name for name in names if query.apply(name)]

    # ------------------------------------------------------------------
    def get_object_instance(self, name: ObjectName | str) -> ObjectInstance:
        name = ObjectName.of(name)
        return ObjectInstance(object_name=name, class_name=self._lookup(name).class_name)

    def query_names(
        self, pattern: Optional[ObjectName | str] = None, query: Optional["QueryExp"] = None
    ) -> Set[ObjectName]:
        pattern = None if pattern is None else ObjectName.of(pattern)
        return set(self._filter(self.names(pattern), query))

    def query_instances(
        self, pattern: Optional[ObjectName | str] = None, query: Optional["QueryExp"] = None
    ) -> Set[ObjectInstance]:
        return {self.get_object_instance(name) for name in self.query_names(pattern, query)}

    def is_registered(self, name: ObjectName | str) -> bool:
        with self._lock:
            return ObjectName.of(name) in self._objects

    def get_mbean_count(self) -> int:
        with self._lock:
            return len(self._objects)

    def get_domains(self) -> List[str]:
        domains: List[str] = []
        for name in self.names():
            if name.domain not in domains:
                domains.append(name.domain)
        return domains

    def get_mbean_info(self, name: ObjectName | str) -> MBeanInfo:
        return self._lookup(name).info()

    def is_instance_of(self, name: ObjectName | str, class_name: str) -> bool:
        return self._lookup(name).class_name == class_name

    # ------------------------------------------------------------------
    def _attribute(self, name: ObjectName | str, attribute: str) -> AttributeSpec:
        obj = self._lookup(name)
        spec = obj.attributes.get(attribute)
        if spec is None:
            raise AttributeNotFound(f"No attribute {attribute!r} on {name}")
        return spec

    def get_attribute(self, name: ObjectName | str, attribute: str) -> Any:
        with self._lock:
            return self._attribute(name, attribute).value

    def get_all_attributes(self, name: ObjectName | str) -> Dict[str, Any]:
        with self._lock:
            return {k: spec.value for k, spec in self._lookup(name).attributes.items()}

    def get_attributes(
        self, name: ObjectName | str, attributes: Sequence[str]
    ) -> List[Attribute]:
        with self._lock:
            return [
                Attribute(name=attr, value=self._attribute(name, attr).value)
                for attr in attributes
            ]

    def set_attribute(self, name: ObjectName | str, attribute: Attribute) -> None:
        with self._lock:
            spec = self._attribute(name, attribute.name)
            if not spec.writable:
                raise UnsupportedOperationError(
                    "set_attribute", f"for read-only attribute {attribute.name!r}"
                )
            spec.value = attribute.value

    def set_attributes(
        self, name: ObjectName | str, attributes: Iterable[Attribute]
    ) -> List[Attribute]:
        attributes = list(attributes)
        with self._lock:
            for attribute in attributes:
                self.set_attribute(name, attribute)
        return attributes

    def invoke(
        self,
        name: ObjectName | str,
        operation: str,
        params: Optional[Sequence[Any]] = None,
        signature: Optional[Sequence[str]] = None,
    ) -> Any:
        obj = self._lookup(name)
        spec = obj.operations.get(operation)
        if spec is None:
            raise OperationNotFound(f"No operation {operation!r} on {name}")
        params = list(params or [])
        if spec.parameters is not None and len(params) != len(spec.parameters):
            raise ProtocolDecodeError(
                f"Operation {operation!r} expects {len(spec.parameters)} arguments",
                params,
            )
        return spec.handler(*params)

    # ------------------------------------------------------------------
    def create_mbean(self, class_name: str, name: ObjectName, *args: Any) -> ObjectInstance:
        raise UnsupportedOperationError("create_mbean", "by class name; use register_mbean")

    def add_notification_listener(
        self, name: ObjectName, listener: Any, filter: Any = None, handback: Any = None
    ) -> None:
        raise UnsupportedOperationError("add_notification_listener")

    def remove_notification_listener(
        self, name: ObjectName, listener: Any, filter: Any = None, handback: Any = None
    ) -> None:
        raise UnsupportedOperationError("remove_notification_listener")


__all__ = ["AttributeSpec", "OperationSpec", "ManagedObject", "LocalRegistry"]
