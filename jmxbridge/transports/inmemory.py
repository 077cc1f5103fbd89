"""In-memory transport serving requests from a local registry."""

from __future__ import annotations

import json
from typing import Any, List, Optional, Sequence

from ..contracts import BaseRequest
from ..dispatch import RequestDispatcher
from ..errors import ProtocolDecodeError, TransportError
from ..registry.local import LocalRegistry
from ..responses import Response, parse_response, raise_for_error
from .base import BaseTransport, encode_requests


class InMemoryTransport(BaseTransport):
    """Loop requests through JSON into a :class:`RequestDispatcher`.

    Useful for tests and for exposing an in-process registry through the
    remote adapter.
    """

    supports_batching = True

    def __init__(self, registry: Optional[LocalRegistry] = None) -> None:
        self.registry = registry if registry is not None else LocalRegistry()
        self._dispatcher = RequestDispatcher(self.registry)

    @staticmethod
    def _encode_reply(reply: Any) -> Any:
        try:
            return json.loads(json.dumps(reply))
        except (TypeError, ValueError) as e:
            raise TransportError(f"Cannot encode reply: {e}") from e

    def execute(self, request: BaseRequest) -> Response:
        """Serve a single request."""
        wire = json.loads(encode_requests(request))
        reply = self._encode_reply(self._dispatcher.dispatch(wire))
        return parse_response(request, reply)

    def execute_batch(self, requests: Sequence[BaseRequest]) -> List[Response]:
        """Serve all requests in one dispatch; any error reply fails the batch."""
        wires = json.loads(encode_requests(requests))
        replies = self._encode_reply(self._dispatcher.dispatch_batch(wires))
        if len(replies) != len(requests):
            raise ProtocolDecodeError("Batch reply has the wrong length", replies)
        for reply in replies:
            raise_for_error(reply)
        return [parse_response(req, reply) for req, reply in zip(requests, replies)]
