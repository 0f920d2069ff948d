"""Tests for the httpx-backed transport."""

from __future__ import annotations

import httpx
import pytest

from jsonfetch.exceptions import RequestError, TransportError
from jsonfetch.models import PreparedRequest
from jsonfetch.transport import HttpxTransport, Transport


def _transport(handler) -> HttpxTransport:
    return HttpxTransport(httpx.Client(transport=httpx.MockTransport(handler)))


def _request(**kwargs) -> PreparedRequest:
    defaults = {"method": "GET", "url": "https://api.example.com/x"}
    defaults.update(kwargs)
    return PreparedRequest(**defaults)


class TestHttpxTransport:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(_transport(lambda r: httpx.Response(200)), Transport)

    def test_sends_method_headers_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, headers={"X-Id": "7"}, content=b'{"a":1}')

        response = _transport(handler).send(
            _request(method="PUT", headers=[("X-One", "1"), ("Content-type", "text/plain")], body=b"hello")
        )
        assert seen[0].method == "PUT"
        assert seen[0].headers["x-one"] == "1"
        assert seen[0].content == b"hello"
        assert response.status_code == 200
        assert response.content == b'{"a":1}'
        assert "x-id: 7" in [line.lower() for line in response.headers]

    def test_http_errors_returned_when_ignored(self) -> None:
        response = _transport(lambda r: httpx.Response(503, content=b"{}")).send(_request())
        assert response.status_code == 503

    def test_http_errors_raised_when_not_ignored(self) -> None:
        transport = _transport(lambda r: httpx.Response(404, content=b"{}"))
        with pytest.raises(RequestError, match="HTTP 404"):
            transport.send(_request(ignore_http_errors=False))

    def test_connect_error_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known")

        with pytest.raises(TransportError, match="Name or service not known"):
            _transport(handler).send(_request())

    def test_empty_exception_message_falls_back_to_type(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("")

        with pytest.raises(TransportError, match="ConnectTimeout"):
            _transport(handler).send(_request())

    def test_redirect_loop_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": str(request.url)})

        transport = HttpxTransport(transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="redirects"):
            transport.send(_request())

    def test_bad_content_encoding_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

        with pytest.raises(TransportError):
            _transport(handler).send(_request())

    def test_timeout_passed_per_request(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        _transport(handler).send(_request(timeout=2.5))
        assert seen[0].extensions["timeout"]["read"] == 2.5

    def test_close_only_owned_client(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        HttpxTransport(client).close()
        assert not client.is_closed

        owned = HttpxTransport()
        owned.close()
        assert owned._client.is_closed
