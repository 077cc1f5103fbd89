"""HTTP transport posting protocol requests to a remote agent."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import requests

from ..contracts import BaseRequest
from ..errors import ProtocolDecodeError, TransportError
from ..responses import Response, parse_response, raise_for_error
from ..utils.retry import sleep_before_retry
from .base import BaseTransport, encode_requests

logger = logging.getLogger(__name__)


class HttpTransport(BaseTransport):
    """POST JSON requests to an agent URL; batches go out as one JSON array."""

    supports_batching = True

    def __init__(
        self,
        url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
        max_retries: int = 0,
        session: Optional[Any] = None,
    ) -> None:
        self.url = url
        self.user = user
        self.password = password
        self.timeout = timeout
        self.max_retries = max_retries
        self._session = session

    def connect(self) -> None:
        """Create the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            if self.user:
                self._session.auth = (self.user, self.password or "")

    def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def _post(self, body: str) -> Any:
        if self._session is None:
            self.connect()
        attempt = 0
        while True:
            try:
                resp = self._session.post(
                    self.url,
                    data=body,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                break
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt >= self.max_retries:
                    raise TransportError(f"POST {self.url} failed: {e}") from e
                attempt += 1
                logger.warning(
                    f"POST {self.url} failed: {e}; retry {attempt} of {self.max_retries}"
                )
                sleep_before_retry(attempt)
            except requests.RequestException as e:
                raise TransportError(f"POST {self.url} failed: {e}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise ProtocolDecodeError("Reply body is not JSON", resp.text) from e

    def execute(self, request: BaseRequest) -> Response:
        """Send one request."""
        return parse_response(request, self._post(encode_requests(request)))

    def execute_batch(self, batch: Sequence[BaseRequest]) -> List[Response]:
        """Send all requests in one POST; any error reply fails the batch."""
        replies = self._post(encode_requests(batch))
        if not isinstance(replies, list) or len(replies) != len(batch):
            raise ProtocolDecodeError("Batch reply does not match the request list", replies)
        for reply in replies:
            raise_for_error(reply)
        return [parse_response(req, reply) for req, reply in zip(batch, replies)]
