"""Pydantic models describing management objects."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ProtocolDecodeError
from ..names import ObjectName


class ObjectInstance(BaseModel):
    """An object name together with its declared class."""

    model_config = ConfigDict(frozen=True)

    object_name: ObjectName
    class_name: str


class Attribute(BaseModel):
    """Attribute name and value pair used for bulk reads and writes."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: Any = None


class MBeanAttributeInfo(BaseModel):
    type: Optional[str] = None
    description: Optional[str] = Field(default=None, alias="desc")
    writable: bool = Field(default=False, alias="rw")

    model_config = ConfigDict(populate_by_name=True)


class MBeanParameterInfo(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = Field(default=None, alias="desc")

    model_config = ConfigDict(populate_by_name=True)


class MBeanOperationInfo(BaseModel):
    arguments: List[MBeanParameterInfo] = Field(default_factory=list, alias="args")
    return_type: Optional[str] = Field(default=None, alias="ret")
    description: Optional[str] = Field(default=None, alias="desc")

    model_config = ConfigDict(populate_by_name=True)


class MBeanInfo(BaseModel):
    """Introspection metadata of one management object.

    Operations map to a list because a name can carry several overloads.
    """

    class_name: str
    description: Optional[str] = None
    attributes: Dict[str, MBeanAttributeInfo] = Field(default_factory=dict)
    operations: Dict[str, List[MBeanOperationInfo]] = Field(default_factory=dict)
    notifications: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_wire(cls, block: Any) -> "MBeanInfo":
        """Decode an info block (``class``, ``desc``, ``attr``, ``op``, ``not``)."""
        if not isinstance(block, Mapping):
            raise ProtocolDecodeError("MBean info must be an object", block)
        class_name = block.get("class")
        if not isinstance(class_name, str) or not class_name:
            raise ProtocolDecodeError("MBean info carries no class name", block)

        try:
            operations = {
                op_name: op if isinstance(op, list) else [op]
                for op_name, op in (block.get("op") or {}).items()
            }
            return cls(
                class_name=class_name,
                description=block.get("desc"),
                attributes=block.get("attr") or {},
                operations=operations,
                notifications=block.get("not") or {},
            )
        except (ValidationError, AttributeError) as e:
            raise ProtocolDecodeError(f"Invalid MBean info: {e}", block) from e

    def to_wire(self) -> Dict[str, Any]:
        ret: Dict[str, Any] = {"class": self.class_name}
        if self.description is not None:
            ret["desc"] = self.description
        ret["attr"] = {
            name: info.model_dump(by_alias=True, exclude_none=True)
            for name, info in self.attributes.items()
        }
        ret["op"] = {}
        for name, overloads in self.operations.items():
            dumped = [op.model_dump(by_alias=True, exclude_none=True) for op in overloads]
            ret["op"][name] = dumped[0] if len(dumped) == 1 else dumped
        if self.notifications:
            ret["not"] = dict(self.notifications)
        return ret


class MBeanDescriptor(BaseModel):
    """One entry of a list reply."""

    model_config = ConfigDict(frozen=True)

    object_name: ObjectName
    class_name: str
    info: Optional[MBeanInfo] = None

    @property
    def instance(self) -> ObjectInstance:
        return ObjectInstance(object_name=self.object_name, class_name=self.class_name)


__all__ = [
    "ObjectInstance",
    "Attribute",
    "MBeanAttributeInfo",
    "MBeanParameterInfo",
    "MBeanOperationInfo",
    "MBeanInfo",
    "MBeanDescriptor",
]
