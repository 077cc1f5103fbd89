"""Request contracts of the remote management protocol."""

from __future__ import annotations

import json
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import InvalidStateError, ProtocolDecodeError
from .names import ObjectName
from .path import AttributePath


class SingleAttribute(BaseModel):
    """Exactly one attribute; ``name`` may be ``None``."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None


class MultipleAttributes(BaseModel):
    """Any number of attribute names other than one."""

    model_config = ConfigDict(frozen=True)

    names: Tuple[str, ...] = ()


AttributeSelector = Optional[Union[SingleAttribute, MultipleAttributes]]


def select_attributes(value: Any) -> AttributeSelector:
    """Normalize a raw ``attribute`` value into a selector.

    ``None`` means no attribute (fetch all), a string selects one attribute,
    and a collection selects several. A collection holding a single element
    collapses into :class:`SingleAttribute`, so ``[None]`` keeps the
    explicit null name instead of turning into "fetch all".
    """
    if value is None or isinstance(value, (SingleAttribute, MultipleAttributes)):
        return value
    if isinstance(value, str):
        return SingleAttribute(name=value)
    if isinstance(value, (list, tuple)):
        names = list(value)
        if len(names) == 1:
            if names[0] is not None and not isinstance(names[0], str):
                raise ProtocolDecodeError("Attribute names must be strings", value)
            return SingleAttribute(name=names[0])
        if not all(isinstance(name, str) for name in names):
            raise ProtocolDecodeError("Attribute names must be strings", value)
        return MultipleAttributes(names=tuple(names))
    raise ProtocolDecodeError("Attribute must be a string or a list of strings", value)


class BaseRequest(BaseModel):
    """Common behaviour of all protocol requests."""

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        """Render the canonical request map."""
        raise NotImplementedError

    def to_json(self) -> str:
        return json.dumps(self.to_wire())


class ReadRequest(BaseRequest):
    """Read one, several or all attributes of a management object."""

    type: Literal["read"] = "read"
    mbean: ObjectName
    attribute: Optional[Union[SingleAttribute, MultipleAttributes]] = None
    path: Optional[AttributePath] = None
    options: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        if "attribute" in data:
            data["attribute"] = select_attributes(data["attribute"])
        if "config" in data and "options" not in data:
            data["options"] = data.pop("config")
        if data.get("path") is not None:
            path = AttributePath.of(data["path"])
            data["path"] = None if not str(path) else path
        return data

    @property
    def is_multi_attribute(self) -> bool:
        return isinstance(self.attribute, MultipleAttributes)

    @property
    def attribute_name(self) -> Optional[str]:
        """The single attribute name, or ``None`` when no attribute is set.

        Raises:
            InvalidStateError: If the request selects several attributes.
        """
        if self.attribute is None:
            return None
        if isinstance(self.attribute, MultipleAttributes):
            raise InvalidStateError(
                f"Request selects several attributes {list(self.attribute.names)}; "
                "use attribute_names instead"
            )
        return self.attribute.name

    @property
    def attribute_names(self) -> Optional[List[Optional[str]]]:
        if self.attribute is None:
            return None
        if isinstance(self.attribute, MultipleAttributes):
            return list(self.attribute.names)
        return [self.attribute.name]

    def has_attribute(self) -> bool:
        return self.is_multi_attribute or self.attribute_name is not None

    def to_wire(self) -> Dict[str, Any]:
        ret: Dict[str, Any] = {"type": self.type, "mbean": str(self.mbean)}
        if isinstance(self.attribute, SingleAttribute):
            ret["attribute"] = self.attribute.name
        elif isinstance(self.attribute, MultipleAttributes):
            ret["attribute"] = list(self.attribute.names)
        if self.path is not None:
            ret["path"] = str(self.path)
        if self.options is not None:
            ret["config"] = dict(self.options)
        return ret


class WriteRequest(BaseRequest):
    """Set a single attribute to a new value."""

    type: Literal["write"] = "write"
    mbean: ObjectName
    attribute: str
    value: Any = None

    @field_validator("attribute")
    @classmethod
    def _ensure_attribute(cls, v: str) -> str:
        if not v:
            raise ValueError("attribute must be a non-empty string")
        return v

    def to_wire(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "mbean": str(self.mbean),
            "attribute": self.attribute,
            "value": self.value,
        }


class ExecRequest(BaseRequest):
    """Invoke an operation; arguments are matched against the signature remotely."""

    type: Literal["exec"] = "exec"
    mbean: ObjectName
    operation: str
    arguments: Optional[Tuple[Any, ...]] = None

    @field_validator("operation")
    @classmethod
    def _ensure_operation(cls, v: str) -> str:
        if not v:
            raise ValueError("operation must be a non-empty string")
        return v

    def to_wire(self) -> Dict[str, Any]:
        ret: Dict[str, Any] = {
            "type": self.type,
            "mbean": str(self.mbean),
            "operation": self.operation,
        }
        if self.arguments is not None:
            ret["arguments"] = list(self.arguments)
        return ret


class ListRequest(BaseRequest):
    """List instances with their metadata; no name lists the whole registry."""

    type: Literal["list"] = "list"
    mbean: Optional[ObjectName] = None

    def to_wire(self) -> Dict[str, Any]:
        ret: Dict[str, Any] = {"type": self.type}
        if self.mbean is not None:
            ret["mbean"] = str(self.mbean)
        return ret


class SearchRequest(BaseRequest):
    """Find the names matching a pattern."""

    type: Literal["search"] = "search"
    mbean: ObjectName

    def to_wire(self) -> Dict[str, Any]:
        return {"type": self.type, "mbean": str(self.mbean)}


Request = Annotated[
    Union[ReadRequest, WriteRequest, ExecRequest, ListRequest, SearchRequest],
    Field(discriminator="type"),
]

_REQUEST_ADAPTER: TypeAdapter[Any] = TypeAdapter(Request)


def parse_request(data: Any) -> BaseRequest:
    """Build the request variant described by an inbound map.

    Raises:
        ProtocolDecodeError: If ``data`` is not a valid request map.
        MalformedNameError: If the ``mbean`` value is not a valid name.
    """
    if not isinstance(data, Mapping):
        raise ProtocolDecodeError("Request must be a JSON object", data)
    try:
        return _REQUEST_ADAPTER.validate_python(dict(data))
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ProtocolDecodeError(
            f"Invalid request at '{location}': {first.get('msg')}", dict(data)
        ) from e


__all__ = [
    "AttributeSelector",
    "SingleAttribute",
    "MultipleAttributes",
    "select_attributes",
    "BaseRequest",
    "ReadRequest",
    "WriteRequest",
    "ExecRequest",
    "ListRequest",
    "SearchRequest",
    "Request",
    "parse_request",
]
