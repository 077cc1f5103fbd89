"""Transport tests."""

import json

import pytest
import requests

from jmxbridge.contracts import ReadRequest, WriteRequest
from jmxbridge.errors import ProtocolDecodeError, RemoteError, TransportError
from jmxbridge.transports import get_transport
from jmxbridge.transports.http import HttpTransport
from jmxbridge.transports.inmemory import InMemoryTransport
from jmxbridge.utils.retry import compute_backoff


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Replays queued responses or exceptions for successive posts."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.posts = []
        self.bodies = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.bodies.append(data)
        self.posts.append({"url": url, "body": json.loads(data), "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


def _ok(value):
    return {"status": 200, "value": value, "timestamp": 1}


READ = ReadRequest(mbean="app:type=Foo,id=1", attribute="Count")


def test_inmemory_transport_basic(transport):
    """Test a request served by the in-memory transport."""
    assert transport.supports_batching
    response = transport.execute(READ)
    assert response.value == 3
    assert response.request == READ


def test_inmemory_transport_error_reply(transport):
    with pytest.raises(RemoteError) as excinfo:
        transport.execute(ReadRequest(mbean="app:type=Nope", attribute="Count"))
    assert excinfo.value.status == 404


def test_inmemory_batch_fails_as_a_whole(transport, registry):
    batch = [
        WriteRequest(mbean="app:type=Foo,id=1", attribute="Count", value=5),
        WriteRequest(mbean="app:type=Foo,id=1", attribute="Name", value="beta"),
    ]
    with pytest.raises(RemoteError) as excinfo:
        transport.execute_batch(batch)
    assert excinfo.value.status == 403


def test_inmemory_unencodable_value(transport):
    circular = []
    circular.append(circular)
    with pytest.raises(TransportError):
        transport.execute(
            WriteRequest(mbean="app:type=Foo,id=1", attribute="Count", value=circular)
        )


def test_inmemory_rejects_unencodable_values(transport, registry):
    request = WriteRequest(mbean="app:type=Foo,id=1", attribute="Count", value=object())
    with pytest.raises(TransportError):
        transport.execute(request)
    with pytest.raises(TransportError):
        transport.execute_batch([request])
    assert registry.get_attribute("app:type=Foo,id=1", "Count") == 3


def test_http_transport_posts_json():
    session = FakeSession(FakeResponse(_ok(3)))
    transport = HttpTransport("http://agent/jolokia", timeout=3.0, session=session)
    response = transport.execute(READ)
    assert response.value == 3
    assert session.posts == [
        {"url": "http://agent/jolokia", "body": READ.to_wire(), "timeout": 3.0}
    ]
    assert session.bodies == [READ.to_json()]


def test_http_transport_rejects_unencodable_values():
    session = FakeSession()
    transport = HttpTransport("http://agent/jolokia", session=session)
    request = WriteRequest(mbean="app:type=Foo,id=1", attribute="Count", value=object())
    with pytest.raises(TransportError) as excinfo:
        transport.execute(request)
    assert isinstance(excinfo.value.__cause__, TypeError)
    assert session.posts == []


def test_http_transport_batch():
    session = FakeSession(FakeResponse([_ok(3), _ok("alpha")]))
    transport = HttpTransport("http://agent/jolokia", session=session)
    name_read = ReadRequest(mbean="app:type=Foo,id=1", attribute="Name")
    responses = transport.execute_batch([READ, name_read])
    assert [r.value for r in responses] == [3, "alpha"]
    assert session.posts[0]["body"] == [READ.to_wire(), name_read.to_wire()]


def test_http_transport_batch_length_mismatch():
    session = FakeSession(FakeResponse([_ok(3)]))
    transport = HttpTransport("http://agent/jolokia", session=session)
    with pytest.raises(ProtocolDecodeError):
        transport.execute_batch([READ, READ])


def test_http_transport_batch_error_reply():
    error = {"status": 404, "error_type": "InstanceNotFound", "error": "gone"}
    session = FakeSession(FakeResponse([_ok(3), error]))
    transport = HttpTransport("http://agent/jolokia", session=session)
    with pytest.raises(RemoteError):
        transport.execute_batch([READ, READ])


def test_http_transport_retries_connection_errors(monkeypatch):
    sleeps = []
    monkeypatch.setattr(
        "jmxbridge.transports.http.sleep_before_retry", lambda attempt: sleeps.append(attempt)
    )
    session = FakeSession(
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        FakeResponse(_ok(3)),
    )
    transport = HttpTransport("http://agent/jolokia", max_retries=2, session=session)
    assert transport.execute(READ).value == 3
    assert sleeps == [1, 2]


def test_http_transport_gives_up_after_retries(monkeypatch):
    monkeypatch.setattr("jmxbridge.transports.http.sleep_before_retry", lambda attempt: None)
    session = FakeSession(requests.ConnectionError("refused"), requests.ConnectionError("again"))
    transport = HttpTransport("http://agent/jolokia", max_retries=1, session=session)
    with pytest.raises(TransportError) as excinfo:
        transport.execute(READ)
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_http_status_error_is_not_retried():
    session = FakeSession(FakeResponse(status_code=500, text="oops"))
    transport = HttpTransport("http://agent/jolokia", max_retries=3, session=session)
    with pytest.raises(TransportError) as excinfo:
        transport.execute(READ)
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)
    assert len(session.posts) == 1


def test_http_non_json_body():
    session = FakeSession(FakeResponse(text="<html>"))
    transport = HttpTransport("http://agent/jolokia", session=session)
    with pytest.raises(ProtocolDecodeError):
        transport.execute(READ)


def test_http_connect_and_disconnect():
    transport = HttpTransport("http://agent/jolokia", user="admin", password="secret")
    transport.connect()
    assert transport._session.auth == ("admin", "secret")
    transport.disconnect()
    assert transport._session is None


def test_get_transport_rejects_unknown_backend():
    with pytest.raises(ValueError):
        get_transport("carrier-pigeon")


def test_inmemory_from_factory():
    transport = get_transport("inmemory")
    assert isinstance(transport, InMemoryTransport)
    assert transport.registry.get_mbean_count() == 0


def test_compute_backoff_grows():
    assert 1.5 <= compute_backoff(1) <= 2.0
    assert 2.25 <= compute_backoff(2) <= 2.75
