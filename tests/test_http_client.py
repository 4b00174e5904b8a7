"""
Tests for the outbound request client.

URL and query encoding are tested directly. Sending is tested with
httpx.AsyncClient patched out, so no network calls are made.
"""

import gzip
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from pmg_http_transport.domain.errors import (
    ForbiddenError,
    InvalidMessageError,
    RequestError,
    ResponseProcessingError,
    ValidationError,
)
from pmg_http_transport.infrastructure.http_client import (
    OutboundClient,
    build_url,
    to_query,
)
from pmg_http_transport.interfaces.schemas import RequestOptions

ASYNC_CLIENT = "pmg_http_transport.infrastructure.http_client.httpx.AsyncClient"


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "http://peer/x"), **kwargs)


def _patched_client(MockClient, result=None, side_effect=None) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.request = AsyncMock(return_value=result, side_effect=side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    MockClient.return_value = mock_client
    return mock_client


class TestBuildUrl:
    """Tests for target URL construction."""

    def test_host_and_port(self) -> None:
        assert build_url("steve", "localhost", 3000) == "http://localhost:3000/steve"

    def test_host_without_port(self) -> None:
        assert build_url("a/b", "peer.internal") == "http://peer.internal/a/b"

    def test_protocol(self) -> None:
        assert build_url("a", "peer", 443, "https") == "https://peer:443/a"

    def test_topic_names_host(self) -> None:
        assert build_url("localhost/play_game") == "http://localhost/play_game"

    def test_topic_names_host_with_port(self) -> None:
        assert build_url("localhost/play_game", port=3000) == "http://localhost:3000/play_game"

    def test_topic_is_only_a_host(self) -> None:
        assert build_url("localhost", port=8080) == "http://localhost:8080"


class TestToQuery:
    """Tests for query-string encoding of messages."""

    def test_none(self) -> None:
        assert to_query(None) == []

    def test_scalars(self) -> None:
        assert to_query({"a": "x", "b": 5, "c": True, "d": None, "e": 1.5}) == [
            ("a", "x"),
            ("b", "5"),
            ("c", "true"),
            ("d", ""),
            ("e", "1.5"),
        ]

    def test_lists_repeat_keys(self) -> None:
        assert to_query({"tag": ["a", "b"]}) == [("tag", "a"), ("tag", "b")]

    def test_nested_objects_become_json(self) -> None:
        assert to_query({"filter": {"x": 1}}) == [("filter", '{"x": 1}')]

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(ValidationError):
            to_query(["not", "a", "mapping"])


class TestSend:
    """Tests for OutboundClient.send."""

    @pytest.mark.asyncio
    async def test_get_sends_query_and_trace_headers(self) -> None:
        client = OutboundClient(send_gzip=True, timeout=5.0)
        options = RequestOptions(host="localhost", port=3000, initiator="tester")

        with patch(ASYNC_CLIENT) as MockClient:
            mock_client = _patched_client(MockClient, _response(200, json={"ok": True}))
            result = await client.send("bob", {"testParam": 5}, options, "cid-1")

        assert result == {"ok": True}
        MockClient.assert_called_once_with(timeout=5.0)
        args, kwargs = mock_client.request.call_args
        assert args == ("GET", "http://localhost:3000/bob")
        assert kwargs["params"] == [("testParam", "5")]
        assert kwargs["content"] is None
        assert kwargs["headers"]["x-pmg-correlationid"] == "cid-1"
        assert kwargs["headers"]["x-pmg-initiator"] == "tester"
        assert kwargs["headers"]["accept-encoding"] == "gzip"

    @pytest.mark.asyncio
    async def test_post_sends_gzipped_json(self) -> None:
        client = OutboundClient(send_gzip=True)
        options = RequestOptions(host="peer", method="post")

        with patch(ASYNC_CLIENT) as MockClient:
            mock_client = _patched_client(MockClient, _response(200, json={}))
            await client.send("bob", {"a": 1}, options, "cid")

        kwargs = mock_client.request.call_args.kwargs
        assert kwargs["params"] == []
        assert kwargs["headers"]["content-encoding"] == "gzip"
        assert kwargs["headers"]["content-type"] == "application/json"
        assert json.loads(gzip.decompress(kwargs["content"])) == {"a": 1}

    @pytest.mark.asyncio
    async def test_post_without_gzip(self) -> None:
        client = OutboundClient(send_gzip=False)
        options = RequestOptions(host="peer", method="PUT")

        with patch(ASYNC_CLIENT) as MockClient:
            mock_client = _patched_client(MockClient, _response(200, json={}))
            await client.send("bob", None, options, "cid")

        kwargs = mock_client.request.call_args.kwargs
        assert kwargs["content"] == b"{}"
        assert "content-encoding" not in kwargs["headers"]
        assert kwargs["headers"]["accept-encoding"] == "identity"

    @pytest.mark.asyncio
    async def test_initiator_header_omitted_when_unset(self) -> None:
        client = OutboundClient()
        with patch(ASYNC_CLIENT) as MockClient:
            mock_client = _patched_client(MockClient, _response(200, json={}))
            await client.send("bob", {}, RequestOptions(host="peer"), "cid")

        assert "x-pmg-initiator" not in mock_client.request.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_caller_headers_are_sent(self) -> None:
        client = OutboundClient()
        options = RequestOptions(host="peer", headers={"x-tenant": "acme"})
        with patch(ASYNC_CLIENT) as MockClient:
            mock_client = _patched_client(MockClient, _response(200, json={}))
            await client.send("bob", {}, options, "cid")

        assert mock_client.request.call_args.kwargs["headers"]["x-tenant"] == "acme"

    @pytest.mark.asyncio
    async def test_empty_success_body_is_none(self) -> None:
        client = OutboundClient()
        with patch(ASYNC_CLIENT) as MockClient:
            _patched_client(MockClient, _response(200, content=b""))
            assert await client.send("bob", {}, RequestOptions(host="peer"), "cid") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error_type"),
        [(400, InvalidMessageError), (403, ForbiddenError), (503, ResponseProcessingError)],
    )
    async def test_failure_status_becomes_typed_error(self, status, error_type) -> None:
        client = OutboundClient()
        body = {"message": "Steve says no", "detail": 1}
        with patch(ASYNC_CLIENT) as MockClient:
            _patched_client(MockClient, _response(status, json=body))
            with pytest.raises(error_type) as info:
                await client.send("steve", {}, RequestOptions(host="peer"), "cid")

        assert info.value.message == "Steve says no"
        assert info.value.response == body

    @pytest.mark.asyncio
    async def test_non_json_failure_body(self) -> None:
        client = OutboundClient()
        with patch(ASYNC_CLIENT) as MockClient:
            _patched_client(MockClient, _response(502, text="Bad Gateway from proxy"))
            with pytest.raises(ResponseProcessingError) as info:
                await client.send("steve", {}, RequestOptions(host="peer"), "cid")

        assert info.value.message == "Bad Gateway"
        assert info.value.response == "Bad Gateway from proxy"

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_request_error(self) -> None:
        client = OutboundClient()
        failure = httpx.ConnectError("connection refused")
        with patch(ASYNC_CLIENT) as MockClient:
            _patched_client(MockClient, side_effect=failure)
            with pytest.raises(RequestError) as info:
                await client.send("bob", {}, RequestOptions(host="peer"), "cid")

        assert info.value.cause is failure

    @pytest.mark.asyncio
    async def test_timeout_becomes_request_error(self) -> None:
        client = OutboundClient()
        with patch(ASYNC_CLIENT) as MockClient:
            _patched_client(MockClient, side_effect=httpx.ReadTimeout("slow"))
            with pytest.raises(RequestError):
                await client.send("bob", {}, RequestOptions(host="peer"), "cid")

    @pytest.mark.asyncio
    async def test_malformed_success_body_becomes_request_error(self) -> None:
        client = OutboundClient()
        with patch(ASYNC_CLIENT) as MockClient:
            _patched_client(MockClient, _response(200, content=b"<html>"))
            with pytest.raises(RequestError):
                await client.send("bob", {}, RequestOptions(host="peer"), "cid")

    @pytest.mark.asyncio
    async def test_unserializable_message_rejected(self) -> None:
        client = OutboundClient()
        with patch(ASYNC_CLIENT) as MockClient:
            mock_client = _patched_client(MockClient, _response(200, json={}))
            with pytest.raises(ValidationError):
                await client.send(
                    "bob", {"x": object()}, RequestOptions(host="peer", method="POST"), "cid"
                )

        mock_client.request.assert_not_called()
