"""Error types raised by jmxbridge."""

from __future__ import annotations

from typing import Any, Optional


class ManagementError(Exception):
    """Base class for registry, codec and adapter failures."""


class MalformedNameError(ManagementError):
    """An object name or pattern could not be parsed."""


class InvalidStateError(ManagementError):
    """An accessor was used in a state where it has no meaning."""


class ProtocolDecodeError(ManagementError):
    """A request or reply did not have the expected shape."""

    def __init__(self, message: str, fragment: Any = None) -> None:
        super().__init__(message)
        self.fragment = fragment

    def __str__(self) -> str:
        base = super().__str__()
        if self.fragment is None:
            return base
        return f"{base} (got {self.fragment!r})"


class InstanceNotFound(ManagementError):
    """No management object matched where exactly one was expected."""


class AttributeNotFound(ManagementError):
    """The object has no attribute (or attribute path) of that name."""


class OperationNotFound(ManagementError):
    """The object exposes no operation of that name."""


class UnsupportedOperationError(ManagementError):
    """The registry operation is deliberately not implemented."""

    def __init__(self, operation: str, reason: str = "") -> None:
        message = f"{operation} is not supported"
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.operation = operation


class AdapterError(ManagementError):
    """Wraps an opaque failure raised while talking to a remote registry."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class TransportError(Exception):
    """Raised by transports; the underlying failure is chained as ``__cause__``."""


class RemoteError(TransportError):
    """The remote peer answered with an error reply."""

    def __init__(
        self,
        message: str,
        status: int,
        error_type: Optional[str] = None,
        stacktrace: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.error_type = error_type
        self.stacktrace = stacktrace


# Failures that travel through the adapter and the query shim unchanged.
PASSTHROUGH_ERRORS = (ManagementError, OSError, RuntimeError)


__all__ = [
    "ManagementError",
    "MalformedNameError",
    "InvalidStateError",
    "ProtocolDecodeError",
    "InstanceNotFound",
    "AttributeNotFound",
    "OperationNotFound",
    "UnsupportedOperationError",
    "AdapterError",
    "TransportError",
    "RemoteError",
    "PASSTHROUGH_ERRORS",
]
