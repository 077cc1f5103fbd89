"""The management-registry contract shared by local and remote registries."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Set

from ..errors import InstanceNotFound
from ..names import ObjectName
from .models import Attribute, MBeanInfo, ObjectInstance

if TYPE_CHECKING:
    from ..query import QueryExp


class ManagementRegistry(metaclass=abc.ABCMeta):
    """Abstract registry of named, introspectable management objects."""

    @abc.abstractmethod
    def get_object_instance(self, name: ObjectName) -> ObjectInstance:
        """Return the instance registered as ``name``.

        Raises:
            InstanceNotFound: If nothing is registered under ``name``.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def query_names(
        self, pattern: Optional[ObjectName] = None, query: Optional["QueryExp"] = None
    ) -> Set[ObjectName]:
        """Names matching ``pattern`` (everything when ``None``) and ``query``."""
        raise NotImplementedError

    @abc.abstractmethod
    def query_instances(
        self, pattern: Optional[ObjectName] = None, query: Optional["QueryExp"] = None
    ) -> Set[ObjectInstance]:
        """Like :meth:`query_names` but returning instances."""
        raise NotImplementedError

    @abc.abstractmethod
    def is_registered(self, name: ObjectName) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def get_mbean_count(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def get_attribute(self, name: ObjectName, attribute: str) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    def get_attributes(self, name: ObjectName, attributes: Sequence[str]) -> List[Attribute]:
        raise NotImplementedError

    @abc.abstractmethod
    def set_attribute(self, name: ObjectName, attribute: Attribute) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def set_attributes(
        self, name: ObjectName, attributes: Iterable[Attribute]
    ) -> List[Attribute]:
        raise NotImplementedError

    @abc.abstractmethod
    def invoke(
        self,
        name: ObjectName,
        operation: str,
        params: Optional[Sequence[Any]] = None,
        signature: Optional[Sequence[str]] = None,
    ) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    def get_domains(self) -> List[str]:
        """Distinct domains in first-seen order."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_mbean_info(self, name: ObjectName) -> MBeanInfo:
        raise NotImplementedError

    @abc.abstractmethod
    def is_instance_of(self, name: ObjectName, class_name: str) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def create_mbean(self, class_name: str, name: ObjectName, *args: Any) -> ObjectInstance:
        raise NotImplementedError

    @abc.abstractmethod
    def unregister_mbean(self, name: ObjectName) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def add_notification_listener(
        self, name: ObjectName, listener: Any, filter: Any = None, handback: Any = None
    ) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def remove_notification_listener(
        self, name: ObjectName, listener: Any, filter: Any = None, handback: Any = None
    ) -> None:
        raise NotImplementedError

    def get_default_domain(self) -> str:
        """First domain reported by :meth:`get_domains`."""
        domains = self.get_domains()
        if not domains:
            raise InstanceNotFound("Registry holds no domains")
        return domains[0]
