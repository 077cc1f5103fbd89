"""Evaluation of filter expressions for registries that live on a remote peer."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import (
    TYPE_CHECKING,
    Any,
    ContextManager,
    Iterable,
    List,
    NoReturn,
    Sequence,
    Set,
)

from .errors import PASSTHROUGH_ERRORS, AdapterError, UnsupportedOperationError
from .names import ObjectName
from .query import QueryExp, RegistryBinding, bind_registry
from .registry.base import ManagementRegistry
from .registry.models import Attribute, MBeanInfo, ObjectInstance

if TYPE_CHECKING:
    from .adapter import RemoteRegistryAdapter

logger = logging.getLogger(__name__)

_REASON = "by the query evaluation stand-in registry"


def _refuse(operation: str) -> NoReturn:
    raise UnsupportedOperationError(operation, _REASON)


class QueryRegistryStandin(ManagementRegistry):
    """Registry handed to a filter expression while it is applied.

    Only instance lookup is forwarded to the remote adapter; every other
    callback fails with :class:`UnsupportedOperationError`.
    """

    def __init__(self, adapter: "RemoteRegistryAdapter") -> None:
        self._adapter = adapter

    def get_object_instance(self, name: ObjectName) -> ObjectInstance:
        return self._adapter.get_object_instance(name)

    def query_names(self, pattern=None, query=None) -> Set[ObjectName]:
        _refuse("query_names")

    def query_instances(self, pattern=None, query=None) -> Set[ObjectInstance]:
        _refuse("query_instances")

    def is_registered(self, name: ObjectName) -> bool:
        _refuse("is_registered")

    def get_mbean_count(self) -> int:
        _refuse("get_mbean_count")

    def get_attribute(self, name: ObjectName, attribute: str) -> Any:
        _refuse("get_attribute")

    def get_attributes(self, name: ObjectName, attributes: Sequence[str]) -> List[Attribute]:
        _refuse("get_attributes")

    def set_attribute(self, name: ObjectName, attribute: Attribute) -> None:
        _refuse("set_attribute")

    def set_attributes(self, name: ObjectName, attributes: Iterable[Attribute]) -> List[Attribute]:
        _refuse("set_attributes")

    def invoke(self, name, operation, params=None, signature=None) -> Any:
        _refuse("invoke")

    def get_domains(self) -> List[str]:
        _refuse("get_domains")

    def get_default_domain(self) -> str:
        _refuse("get_default_domain")

    def get_mbean_info(self, name: ObjectName) -> MBeanInfo:
        _refuse("get_mbean_info")

    def is_instance_of(self, name: ObjectName, class_name: str) -> bool:
        _refuse("is_instance_of")

    def create_mbean(self, class_name: str, name: ObjectName, *args: Any) -> ObjectInstance:
        _refuse("create_mbean")

    def unregister_mbean(self, name: ObjectName) -> None:
        _refuse("unregister_mbean")

    def add_notification_listener(self, name, listener, filter=None, handback=None) -> None:
        _refuse("add_notification_listener")

    def remove_notification_listener(self, name, listener, filter=None, handback=None) -> None:
        _refuse("remove_notification_listener")

    def __getattr__(self, item: str) -> NoReturn:
        # callbacks outside the registry contract
        if item.startswith("__"):
            raise AttributeError(item)
        _refuse(item)


def apply_query(
    query: QueryExp,
    name: ObjectName,
    adapter: "RemoteRegistryAdapter",
    binding: RegistryBinding,
) -> bool:
    """Apply ``query`` to ``name``, installing a stand-in registry if needed.

    The stand-in is bound to the current context only when ``binding``
    reports no live registry; ``query`` itself is never modified, so one
    query may be applied from several threads at once.
    """
    if binding.current() is None:
        scope: ContextManager[Any] = bind_registry(QueryRegistryStandin(adapter))
    else:
        scope = nullcontext()
    try:
        with scope:
            return bool(query.apply(name))
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        logger.debug(f"Query evaluation failed for {name}: {e}")
        raise AdapterError(f"Query evaluation failed for {name}: {e}", cause=e) from e


__all__ = ["QueryRegistryStandin", "apply_query"]
