"""Serving side: run protocol requests against a local registry."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple, Type

from .contracts import (
    ExecRequest,
    ListRequest,
    ReadRequest,
    SearchRequest,
    WriteRequest,
    parse_request,
)
from .errors import (
    AttributeNotFound,
    InstanceNotFound,
    MalformedNameError,
    OperationNotFound,
    ProtocolDecodeError,
    UnsupportedOperationError,
)
from .names import MATCH_ALL
from .path import AttributePath
from .registry.local import LocalRegistry
from .registry.models import Attribute

logger = logging.getLogger(__name__)

_ERROR_STATUS: Tuple[Tuple[Type[Exception], int], ...] = (
    (ProtocolDecodeError, 400),
    (MalformedNameError, 400),
    (InstanceNotFound, 404),
    (AttributeNotFound, 404),
    (OperationNotFound, 404),
    (UnsupportedOperationError, 403),
)


def project(value: Any, path: AttributePath) -> Any:
    """Walk ``path`` into ``value``: map keys or integer list indexes."""
    for segment in path.segments:
        if isinstance(value, Mapping):
            if segment not in value:
                raise AttributeNotFound(f"No key {segment!r} along path '{path}'")
            value = value[segment]
        elif isinstance(value, (list, tuple)):
            try:
                value = value[int(segment)]
            except (ValueError, IndexError):
                raise AttributeNotFound(f"No index {segment!r} along path '{path}'") from None
        else:
            raise AttributeNotFound(f"Cannot descend into a scalar at {segment!r}")
    return value


class RequestDispatcher:
    """Turn inbound request maps into reply envelopes."""

    def __init__(self, registry: LocalRegistry) -> None:
        self.registry = registry
        self._handlers: Dict[str, Callable[[Any], Any]] = {
            "read": self._read,
            "write": self._write,
            "exec": self._exec,
            "list": self._list,
            "search": self._search,
        }

    def dispatch(self, wire: Any) -> Dict[str, Any]:
        """Serve one request map; failures become error envelopes."""
        try:
            request = parse_request(wire)
            value = self._handlers[request.type](request)
        except Exception as e:
            return self._error_reply(wire, e)
        return {
            "request": wire,
            "value": value,
            "status": 200,
            "timestamp": int(time.time()),
        }

    def dispatch_batch(self, wires: Sequence[Any]) -> List[Dict[str, Any]]:
        return [self.dispatch(wire) for wire in wires]

    def _error_reply(self, wire: Any, error: Exception) -> Dict[str, Any]:
        status = next(
            (code for kind, code in _ERROR_STATUS if isinstance(error, kind)), 500
        )
        if status == 500:
            logger.warning(f"Request {wire!r} failed: {error}")
        else:
            logger.debug(f"Request {wire!r} rejected with {status}: {error}")
        error_type = type(error).__name__
        return {
            "request": wire,
            "status": status,
            "error_type": error_type,
            "error": f"{error_type}: {error}",
        }

    # ------------------------------------------------------------------
    def _read(self, request: ReadRequest) -> Any:
        if request.mbean.is_pattern:
            raise ProtocolDecodeError("Read requests need a concrete object name", str(request.mbean))
        if request.is_multi_attribute:
            value: Any = {
                attr.name: attr.value
                for attr in self.registry.get_attributes(
                    request.mbean, request.attribute_names or []
                )
            }
        elif request.attribute_name is None:
            value = self.registry.get_all_attributes(request.mbean)
        else:
            value = self.registry.get_attribute(request.mbean, request.attribute_name)
        if request.path is not None:
            value = project(value, request.path)
        return value

    def _write(self, request: WriteRequest) -> Any:
        previous = self.registry.get_attribute(request.mbean, request.attribute)
        self.registry.set_attribute(
            request.mbean, Attribute(name=request.attribute, value=request.value)
        )
        return previous

    def _exec(self, request: ExecRequest) -> Any:
        return self.registry.invoke(request.mbean, request.operation, request.arguments)

    def _list(self, request: ListRequest) -> Dict[str, Any]:
        name = request.mbean
        if name is not None and not name.is_pattern:
            if not self.registry.is_registered(name):
                return {}
            return self.registry.get_mbean_info(name).to_wire()
        tree: Dict[str, Dict[str, Any]] = {}
        for object_name in self.registry.names(name):
            info = self.registry.get_mbean_info(object_name)
            tree.setdefault(object_name.domain, {})[object_name.key_property_list] = info.to_wire()
        return tree

    def _search(self, request: SearchRequest) -> List[str]:
        pattern = request.mbean if request.mbean != MATCH_ALL else None
        return [str(name) for name in self.registry.names(pattern)]


__all__ = ["RequestDispatcher", "project"]
