"""Registry facade backed by a remote peer."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, NoReturn, Optional, Sequence, Set

from .contracts import (
    BaseRequest,
    ExecRequest,
    ListRequest,
    ReadRequest,
    SearchRequest,
    WriteRequest,
)
from .errors import (
    PASSTHROUGH_ERRORS,
    AdapterError,
    InstanceNotFound,
    TransportError,
    UnsupportedOperationError,
)
from .names import MATCH_ALL, ObjectName
from .query import ContextRegistryBinding, QueryExp, RegistryBinding
from .registry.base import ManagementRegistry
from .registry.models import Attribute, MBeanInfo, ObjectInstance
from .responses import BaseResponse, ListResponse
from .shim import apply_query
from .transports.base import BaseTransport

logger = logging.getLogger(__name__)

_REASON = "over the remote management protocol"


class RemoteRegistryAdapter(ManagementRegistry):
    """Make a remote registry look like a local one.

    Every operation is expressed as protocol requests sent through the
    injected transport. The adapter holds no state besides its
    collaborators and is safe to share between threads.
    """

    def __init__(
        self,
        transport: BaseTransport,
        binding: Optional[RegistryBinding] = None,
    ) -> None:
        self._transport = transport
        self._binding = binding or ContextRegistryBinding()

    # ------------------------------------------------------------------
    # Transport helpers
    def _execute(self, request: BaseRequest) -> Any:
        logger.debug(f"Executing {request.type} request for {getattr(request, 'mbean', None)}")
        try:
            return self._transport.execute(request)
        except TransportError as e:
            self._unwrap(e)

    def _execute_batch(self, requests: Sequence[BaseRequest]) -> List[BaseResponse]:
        logger.debug(f"Executing batch of {len(requests)} requests")
        try:
            return self._transport.execute_batch(requests)
        except TransportError as e:
            self._unwrap(e)

    @staticmethod
    def _unwrap(error: TransportError) -> NoReturn:
        cause = error.__cause__
        logger.warning(f"Transport failure: {error}")
        if isinstance(cause, PASSTHROUGH_ERRORS):
            raise cause
        raise AdapterError(str(error), cause=error) from error

    def _apply(self, query: Optional[QueryExp], name: ObjectName) -> bool:
        return query is None or apply_query(query, name, self, self._binding)

    def _list(self, name: Optional[ObjectName]) -> ListResponse:
        return self._execute(ListRequest(mbean=name))

    # ------------------------------------------------------------------
    # Lookup
    def get_object_instance(self, name: ObjectName | str) -> ObjectInstance:
        name = ObjectName.of(name)
        response = self._list(name)
        if not response.descriptors:
            raise InstanceNotFound(str(name))
        return ObjectInstance(object_name=name, class_name=response.class_name)

    def query_names(
        self,
        pattern: Optional[ObjectName | str] = None,
        query: Optional[QueryExp] = None,
    ) -> Set[ObjectName]:
        pattern = MATCH_ALL if pattern is None else ObjectName.of(pattern)
        response = self._execute(SearchRequest(mbean=pattern))
        return {name for name in response.object_names if self._apply(query, name)}

    def query_instances(
        self,
        pattern: Optional[ObjectName | str] = None,
        query: Optional[QueryExp] = None,
    ) -> Set[ObjectInstance]:
        pattern = None if pattern is None else ObjectName.of(pattern)
        try:
            response = self._list(pattern)
        except InstanceNotFound:
            return set()
        instances: Dict[ObjectName, ObjectInstance] = {}
        for descriptor in response.descriptors:
            name = descriptor.object_name
            if name not in instances and self._apply(query, name):
                instances[name] = descriptor.instance
        return set(instances.values())

    def is_registered(self, name: ObjectName | str) -> bool:
        return bool(self.query_names(name))

    def get_mbean_count(self) -> int:
        return len(self.query_names())

    def get_domains(self) -> List[str]:
        domains: List[str] = []
        for name in self._execute(SearchRequest(mbean=MATCH_ALL)).object_names:
            if name.domain not in domains:
                domains.append(name.domain)
        return domains

    def get_mbean_info(self, name: ObjectName | str) -> MBeanInfo:
        name = ObjectName.of(name)
        infos = self._list(name).mbean_infos()
        if not infos:
            raise InstanceNotFound(str(name))
        return infos[0]

    def is_instance_of(self, name: ObjectName | str, class_name: str) -> bool:
        return self.get_object_instance(name).class_name == class_name

    # ------------------------------------------------------------------
    # Attributes and operations
    def get_attribute(
        self, name: ObjectName | str, attribute: str, path: Optional[str] = None
    ) -> Any:
        """Read one attribute, optionally projected along an inner ``path``."""
        return self._execute(ReadRequest(mbean=name, attribute=attribute, path=path)).value

    def get_all_attributes(self, name: ObjectName | str) -> Dict[str, Any]:
        """Read every attribute of ``name`` with one fetch-all request."""
        response = self._execute(ReadRequest(mbean=name))
        return {attr.name: attr.value for attr in response.attributes()}

    def get_attributes(
        self, name: ObjectName | str, attributes: Sequence[str]
    ) -> List[Attribute]:
        response = self._execute(ReadRequest(mbean=name, attribute=list(attributes)))
        return response.attributes()

    def set_attribute(self, name: ObjectName | str, attribute: Attribute) -> None:
        self._execute(
            WriteRequest(mbean=name, attribute=attribute.name, value=attribute.value)
        )

    def set_attributes(
        self, name: ObjectName | str, attributes: Iterable[Attribute]
    ) -> List[Attribute]:
        """Write all attributes in one batch; a failed batch fails as a whole."""
        attributes = list(attributes)
        writes = [
            WriteRequest(mbean=name, attribute=attr.name, value=attr.value)
            for attr in attributes
        ]
        if writes:
            self._execute_batch(writes)
        return attributes

    def invoke(
        self,
        name: ObjectName | str,
        operation: str,
        params: Optional[Sequence[Any]] = None,
        signature: Optional[Sequence[str]] = None,
    ) -> Any:
        # the remote side resolves overloads itself; signature is not sent
        request = ExecRequest(
            mbean=name,
            operation=operation,
            arguments=tuple(params) if params is not None else None,
        )
        return self._execute(request).value

    # ------------------------------------------------------------------
    # Unsupported over the protocol
    def create_mbean(self, class_name: str, name: ObjectName, *args: Any) -> ObjectInstance:
        raise UnsupportedOperationError("create_mbean", _REASON)

    def unregister_mbean(self, name: ObjectName) -> None:
        raise UnsupportedOperationError("unregister_mbean", _REASON)

    def add_notification_listener(
        self, name: ObjectName, listener: Any, filter: Any = None, handback: Any = None
    ) -> None:
        raise UnsupportedOperationError("add_notification_listener", _REASON)

    def remove_notification_listener(
        self, name: ObjectName, listener: Any, filter: Any = None, handback: Any = None
    ) -> None:
        raise UnsupportedOperationError("remove_notification_listener", _REASON)


__all__ = ["RemoteRegistryAdapter"]
