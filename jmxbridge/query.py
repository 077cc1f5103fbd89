"""Boolean filter expressions evaluated against object names.

Expressions may call back into a registry while they are applied, for
example to look up the declared class of a candidate. The registry comes
from :meth:`QueryExp.set_registry` or, failing that, from the registry
bound for the current context with :func:`bind_registry`.
"""

from __future__ import annotations

import abc
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional, Protocol

from .errors import AttributeNotFound, InvalidStateError
from .names import ObjectName, wildcard_match
from .registry.base import ManagementRegistry

_bound_registry: ContextVar[Optional[ManagementRegistry]] = ContextVar(
    "jmxbridge_bound_registry", default=None
)


class RegistryBinding(Protocol):
    """Tells whether a live registry is already bound for query evaluation."""

    def current(self) -> Optional[ManagementRegistry]:
        ...


class ContextRegistryBinding:
    """Binding backed by the context-local slot set by :func:`bind_registry`."""

    def current(self) -> Optional[ManagementRegistry]:
        return _bound_registry.get()


@contextmanager
def bind_registry(registry: ManagementRegistry) -> Iterator[ManagementRegistry]:
    """Bind ``registry`` for query evaluation within the ``with`` block."""
    token = _bound_registry.set(registry)
    try:
        yield registry
    finally:
        _bound_registry.reset(token)


class QueryExp(metaclass=abc.ABCMeta):
    """Abstract filter applied to one candidate name at a time."""

    def __init__(self) -> None:
        self._registry: Optional[ManagementRegistry] = None

    @property
    def registry(self) -> Optional[ManagementRegistry]:
        return self._registry

    def set_registry(self, registry: Optional[ManagementRegistry]) -> None:
        self._registry = registry

    def get_registry(self) -> ManagementRegistry:
        registry = self._registry if self._registry is not None else _bound_registry.get()
        if registry is None:
            raise InvalidStateError("No registry available to evaluate the query")
        return registry

    @abc.abstractmethod
    def apply(self, name: ObjectName) -> bool:
        raise NotImplementedError

    def __and__(self, other: "QueryExp") -> "QueryExp":
        return And(self, other)

    def __or__(self, other: "QueryExp") -> "QueryExp":
        return Or(self, other)

    def __invert__(self) -> "QueryExp":
        return Not(self)


class _Composite(QueryExp):
    def __init__(self, *operands: QueryExp) -> None:
        super().__init__()
        if not operands:
            raise InvalidStateError(f"{type(self).__name__} needs at least one operand")
        self.operands = operands

    def set_registry(self, registry: Optional[ManagementRegistry]) -> None:
        super().set_registry(registry)
        for operand in self.operands:
            operand.set_registry(registry)


class And(_Composite):
    def apply(self, name: ObjectName) -> bool:
        return all(operand.apply(name) for operand in self.operands)


class Or(_Composite):
    def apply(self, name: ObjectName) -> bool:
        return any(operand.apply(name) for operand in self.operands)


class Not(_Composite):
    def __init__(self, operand: QueryExp) -> None:
        super().__init__(operand)

    def apply(self, name: ObjectName) -> bool:
        return not self.operands[0].apply(name)


class NameMatches(QueryExp):
    """Pure name test; never touches the registry."""

    def __init__(self, pattern: ObjectName | str) -> None:
        super().__init__()
        self.pattern = ObjectName.of(pattern)

    def apply(self, name: ObjectName) -> bool:
        return name.matches(self.pattern)


class ClassNameMatches(QueryExp):
    """Glob-match the declared class of the candidate."""

    def __init__(self, pattern: str) -> None:
        super().__init__()
        self.pattern = pattern

    def apply(self, name: ObjectName) -> bool:
        instance = self.get_registry().get_object_instance(name)
        return wildcard_match(self.pattern, instance.class_name)


class AttributeEquals(QueryExp):
    """Compare the current value of an attribute; objects without it never match."""

    def __init__(self, attribute: str, value: Any) -> None:
        super().__init__()
        self.attribute = attribute
        self.value = value

    def apply(self, name: ObjectName) -> bool:
        try:
            current = self.get_registry().get_attribute(name, self.attribute)
        except AttributeNotFound:
            return False
        return current == self.value


__all__ = [
    "RegistryBinding",
    "ContextRegistryBinding",
    "bind_registry",
    "QueryExp",
    "And",
    "Or",
    "Not",
    "NameMatches",
    "ClassNameMatches",
    "AttributeEquals",
]
