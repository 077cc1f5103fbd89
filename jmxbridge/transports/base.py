"""Base transport interface for the remote management protocol."""

from __future__ import annotations

import abc
import json
from typing import List, Sequence, Union

from ..contracts import BaseRequest
from ..errors import TransportError
from ..responses import Response


def encode_requests(requests: Union[BaseRequest, Sequence[BaseRequest]]) -> str:
    """Render one request, or a batch as a JSON array, for the wire.

    Raises:
        TransportError: If a request carries a value JSON cannot represent.
    """
    try:
        if isinstance(requests, BaseRequest):
            return requests.to_json()
        return json.dumps([request.to_wire() for request in requests])
    except (TypeError, ValueError) as e:
        raise TransportError(f"Cannot encode request payload: {e}") from e


class BaseTransport(metaclass=abc.ABCMeta):
    """Abstract request/response channel to a remote registry.

    Implementations raise :class:`~jmxbridge.errors.TransportError` for
    failures of the channel itself, chaining the underlying exception.
    """

    #: Whether :meth:`execute_batch` sends all requests in one round trip.
    supports_batching: bool = False

    def connect(self) -> None:
        """Open the channel (no-op by default)."""
        pass

    def disconnect(self) -> None:
        """Close the channel (no-op by default)."""
        pass

    @abc.abstractmethod
    def execute(self, request: BaseRequest) -> Response:
        """Send one request and return its decoded response."""
        raise NotImplementedError

    def execute_batch(self, requests: Sequence[BaseRequest]) -> List[Response]:
        """Send several requests, returning responses in request order.

        The default sends them one at a time and stops at the first failure.
        """
        return [self.execute(request) for request in requests]
