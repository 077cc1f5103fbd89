"""Registry contract, models and the in-process registry."""

from __future__ import annotations

from .base import ManagementRegistry
from .local import AttributeSpec, LocalRegistry, ManagedObject, OperationSpec
from .models import (
    Attribute,
    MBeanAttributeInfo,
    MBeanDescriptor,
    MBeanInfo,
    MBeanOperationInfo,
    MBeanParameterInfo,
    ObjectInstance,
)

__all__ = [
    "ManagementRegistry",
    "LocalRegistry",
    "ManagedObject",
    "AttributeSpec",
    "OperationSpec",
    "Attribute",
    "ObjectInstance",
    "MBeanInfo",
    "MBeanAttributeInfo",
    "MBeanOperationInfo",
    "MBeanParameterInfo",
    "MBeanDescriptor",
]
