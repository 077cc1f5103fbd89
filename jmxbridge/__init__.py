"""jmxbridge: a remote management registry behind a local registry facade."""

from .adapter import RemoteRegistryAdapter
from .contracts import (
    ExecRequest,
    ListRequest,
    ReadRequest,
    SearchRequest,
    WriteRequest,
    parse_request,
)
from .errors import (
    AdapterError,
    InstanceNotFound,
    InvalidStateError,
    MalformedNameError,
    ProtocolDecodeError,
    UnsupportedOperationError,
)
from .names import MATCH_ALL, ObjectName
from .path import AttributePath
from .query import QueryExp, bind_registry
from .registry import Attribute, LocalRegistry, ManagedObject, ObjectInstance
from .responses import parse_response
from .transports import get_transport

__version__ = "0.1.0"
__all__ = [
    "RemoteRegistryAdapter",
    "ReadRequest",
    "WriteRequest",
    "ExecRequest",
    "ListRequest",
    "SearchRequest",
    "parse_request",
    "parse_response",
    "ObjectName",
    "MATCH_ALL",
    "AttributePath",
    "QueryExp",
    "bind_registry",
    "LocalRegistry",
    "ManagedObject",
    "Attribute",
    "ObjectInstance",
    "AdapterError",
    "InstanceNotFound",
    "InvalidStateError",
    "MalformedNameError",
    "ProtocolDecodeError",
    "UnsupportedOperationError",
    "get_transport",
]
