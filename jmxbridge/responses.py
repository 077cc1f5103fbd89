"""Typed responses decoded from raw protocol replies."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from .contracts import (
    BaseRequest,
    ExecRequest,
    ListRequest,
    ReadRequest,
    SearchRequest,
    WriteRequest,
)
from .errors import (
    InstanceNotFound,
    InvalidStateError,
    MalformedNameError,
    ProtocolDecodeError,
    RemoteError,
)
from .names import ObjectName
from .registry.models import Attribute, MBeanDescriptor, MBeanInfo, ObjectInstance

logger = logging.getLogger(__name__)


class BaseResponse(BaseModel):
    """Fields shared by every successful reply."""

    model_config = ConfigDict(frozen=True)

    status: int = 200
    timestamp: Optional[int] = None


class ReadResponse(BaseResponse):
    request: ReadRequest
    value: Any = None

    def attribute_values(self) -> Dict[str, Any]:
        """Attribute values of a multi-attribute read, in request order."""
        if not self.request.is_multi_attribute:
            raise InvalidStateError("attribute_values() needs a multi-attribute read")
        return {name: self.value[name] for name in self.request.attribute_names or []}

    def attributes(self) -> List[Attribute]:
        """The read values as attribute pairs, whatever the request mode."""
        if self.request.is_multi_attribute:
            return [
                Attribute(name=name, value=value)
                for name, value in self.attribute_values().items()
            ]
        name = self.request.attribute_name
        if name is None:
            return [Attribute(name=k, value=v) for k, v in self.value.items()]
        return [Attribute(name=name, value=self.value)]


class WriteResponse(BaseResponse):
    """Reply to a write; ``value`` holds the previous attribute value."""

    request: WriteRequest
    value: Any = None


class ExecResponse(BaseResponse):
    request: ExecRequest
    value: Any = None


class ListResponse(BaseResponse):
    request: ListRequest
    descriptors: List[MBeanDescriptor]

    @property
    def class_name(self) -> str:
        """Declared class of the first listed instance."""
        if not self.descriptors:
            raise InstanceNotFound(str(self.request.mbean))
        return self.descriptors[0].class_name

    def object_instances(self) -> List[ObjectInstance]:
        return [descriptor.instance for descriptor in self.descriptors]

    def mbean_infos(self) -> List[MBeanInfo]:
        return [d.info for d in self.descriptors if d.info is not None]


class SearchResponse(BaseResponse):
    request: SearchRequest
    object_names: List[ObjectName]


Response = Union[ReadResponse, WriteResponse, ExecResponse, ListResponse, SearchResponse]


# ----------------------------------------------------------------------
# Decoders


def _decode_read(request: ReadRequest, value: Any, **meta: Any) -> ReadResponse:
    if request.is_multi_attribute or not request.has_attribute():
        if not isinstance(value, Mapping):
            raise ProtocolDecodeError("Expected a map of attribute values", value)
    if request.is_multi_attribute:
        missing = [name for name in request.attribute_names or [] if name not in value]
        if missing:
            raise ProtocolDecodeError(f"Reply lacks attributes {missing}", value)
    return ReadResponse(request=request, value=value, **meta)


def _decode_write(request: WriteRequest, value: Any, **meta: Any) -> WriteResponse:
    return WriteResponse(request=request, value=value, **meta)


def _decode_exec(request: ExecRequest, value: Any, **meta: Any) -> ExecResponse:
    return ExecResponse(request=request, value=value, **meta)


def _name_from_reply(text: Any) -> ObjectName:
    try:
        return ObjectName.parse(text)
    except MalformedNameError as e:
        raise ProtocolDecodeError(f"Reply carries an invalid object name: {e}", text) from e


def _decode_list(request: ListRequest, value: Any, **meta: Any) -> ListResponse:
    if not isinstance(value, Mapping):
        raise ProtocolDecodeError("Expected a map for list reply", value)
    name = request.mbean
    concrete = name is not None and not name.is_pattern

    descriptors: List[MBeanDescriptor] = []
    if concrete and isinstance(value.get("class"), str):
        # narrowed reply: the info block of the requested object itself
        info = MBeanInfo.from_wire(value)
        descriptors.append(
            MBeanDescriptor(object_name=name, class_name=info.class_name, info=info)
        )
    else:
        for domain, entries in value.items():
            if not isinstance(entries, Mapping):
                raise ProtocolDecodeError(f"Expected a map for domain {domain!r}", entries)
            for props, block in entries.items():
                object_name = _name_from_reply(f"{domain}:{props}")
                if name is not None and object_name != name and not object_name.matches(name):
                    continue
                info = MBeanInfo.from_wire(block)
                descriptors.append(
                    MBeanDescriptor(
                        object_name=object_name, class_name=info.class_name, info=info
                    )
                )

    if concrete and not descriptors:
        raise InstanceNotFound(str(name))
    return ListResponse(request=request, descriptors=descriptors, **meta)


def _decode_search(request: SearchRequest, value: Any, **meta: Any) -> SearchResponse:
    if not isinstance(value, list):
        raise ProtocolDecodeError("Expected a list of object names", value)
    names: List[ObjectName] = []
    seen = set()
    for entry in value:
        object_name = _name_from_reply(entry)
        if object_name not in seen:
            seen.add(object_name)
            names.append(object_name)
    return SearchResponse(request=request, object_names=names, **meta)


_DECODERS: Dict[str, Callable[..., BaseResponse]] = {
    "read": _decode_read,
    "write": _decode_write,
    "exec": _decode_exec,
    "list": _decode_list,
    "search": _decode_search,
}


def raise_for_error(reply: Mapping[str, Any]) -> None:
    """Raise :class:`RemoteError` when ``reply`` is an error envelope."""
    if not isinstance(reply, Mapping):
        raise ProtocolDecodeError("Reply must be a JSON object", reply)
    status = reply.get("status", 200)
    if not isinstance(status, int):
        raise ProtocolDecodeError("Reply status must be an integer", reply)
    if status != 200:
        error_type = reply.get("error_type")
        message = reply.get("error") or f"Remote request failed with status {status}"
        logger.debug(f"Remote error {status} ({error_type}): {message}")
        raise RemoteError(
            message,
            status=status,
            error_type=error_type,
            stacktrace=reply.get("stacktrace"),
        )


def parse_response(request: BaseRequest, reply: Any) -> Response:
    """Decode ``reply`` into the response matching ``request``.

    Raises:
        RemoteError: If the reply is an error envelope.
        ProtocolDecodeError: If the reply does not have the expected shape.
        InstanceNotFound: If a list of one concrete object came back empty.
    """
    raise_for_error(reply)
    if "value" not in reply:
        raise ProtocolDecodeError("Reply carries no value", reply)
    timestamp = reply.get("timestamp")
    if timestamp is not None and not isinstance(timestamp, int):
        raise ProtocolDecodeError("Reply timestamp must be an integer", reply)
    decoder = _DECODERS[request.type]
    return decoder(
        request, reply["value"], status=reply.get("status", 200), timestamp=timestamp
    )


__all__ = [
    "BaseResponse",
    "ReadResponse",
    "WriteResponse",
    "ExecResponse",
    "ListResponse",
    "SearchResponse",
    "Response",
    "parse_response",
    "raise_for_error",
]
