"""
Tests for the network operation handler.

urlopen is patched; no real network traffic.
  - GET with JSON response is parsed
  - POST serializes the body as JSON
  - 4xx/5xx responses are results, not errors
  - malformed JSON falls back to raw text
  - transport failures raise NetworkError
  - missing / non-http URLs rejected before any request

Run: python -m pytest tests/test_network_ops.py -v
"""

import io
import json
import socket
from email.message import Message
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest


def _response(status=200, body="", headers=None):
    resp = MagicMock()
    resp.status = status
    resp.headers = headers or {}
    resp.read.return_value = body.encode("utf-8")
    return resp


def _http_error(url, code, reason, body, content_type=None):
    hdrs = Message()
    if content_type:
        hdrs["Content-Type"] = content_type
    return HTTPError(url, code, reason, hdrs, io.BytesIO(body.encode("utf-8")))


class TestNetworkHandler:

    def setup_method(self):
        from hostops.operations.network import NetworkHandler
        self.handler = NetworkHandler(timeout_s=5, user_agent="hostops-test")

    @pytest.mark.asyncio
    async def test_get_json(self):
        resp = _response(200, '{ "data": "success" }', {"Content-Type": "application/json"})
        with patch("hostops.operations.network.urlopen", return_value=resp) as mock_open:
            result = await self.handler.execute({"url": "https://example.com/api", "method": "GET"})

        assert result == {
            "status": 200,
            "headers": {"content-type": "application/json"},
            "body": {"data": "success"},
        }
        req = mock_open.call_args[0][0]
        assert req.full_url == "https://example.com/api"
        assert req.get_method() == "GET"
        assert req.data is None
        assert req.get_header("User-agent") == "hostops-test"
        assert mock_open.call_args[1]["timeout"] == 5
        resp.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_method_defaults_to_get(self):
        with patch("hostops.operations.network.urlopen", return_value=_response(204)) as mock_open:
            await self.handler.execute({"url": "http://example.com"})
        assert mock_open.call_args[0][0].get_method() == "GET"

    @pytest.mark.asyncio
    async def test_post_with_body(self):
        resp = _response(201, "Created")
        with patch("hostops.operations.network.urlopen", return_value=resp) as mock_open:
            result = await self.handler.execute({
                "url": "https://example.com/api/create",
                "method": "post",
                "headers": {"X-Test": "true"},
                "body": {"name": "test"},
            })

        assert result["status"] == 201
        assert result["body"] == "Created"
        req = mock_open.call_args[0][0]
        assert req.get_method() == "POST"
        assert json.loads(req.data.decode("utf-8")) == {"name": "test"}
        assert req.get_header("X-test") == "true"
        assert req.get_header("Content-type") == "application/json"

    @pytest.mark.asyncio
    async def test_caller_content_type_kept(self):
        with patch("hostops.operations.network.urlopen", return_value=_response(200)) as mock_open:
            await self.handler.execute({
                "url": "https://example.com",
                "method": "PUT",
                "headers": {"Content-Type": "application/vnd.api+json"},
                "body": [1, 2],
            })
        req = mock_open.call_args[0][0]
        assert req.get_header("Content-type") == "application/vnd.api+json"

    @pytest.mark.asyncio
    async def test_not_found_is_a_result(self):
        err = _http_error("https://example.com/api/nonexistent", 404, "Not Found",
                          "The requested resource was not found.")
        with patch("hostops.operations.network.urlopen", side_effect=err):
            result = await self.handler.execute({"url": "https://example.com/api/nonexistent"})
        assert result["status"] == 404
        assert result["body"] == "The requested resource was not found."

    @pytest.mark.asyncio
    async def test_server_error_json_is_parsed(self):
        err = _http_error("https://example.com", 503, "Unavailable",
                          '{"error": "down"}', content_type="application/json; charset=utf-8")
        with patch("hostops.operations.network.urlopen", side_effect=err):
            result = await self.handler.execute({"url": "https://example.com"})
        assert result["status"] == 503
        assert result["body"] == {"error": "down"}
        assert result["headers"]["content-type"] == "application/json; charset=utf-8"

    @pytest.mark.asyncio
    async def test_malformed_json_falls_back_to_text(self):
        resp = _response(200, "{not json", {"Content-Type": "application/json"})
        with patch("hostops.operations.network.urlopen", return_value=resp):
            result = await self.handler.execute({"url": "https://example.com"})
        assert result["body"] == "{not json"

    @pytest.mark.asyncio
    async def test_json_text_without_json_content_type_stays_text(self):
        resp = _response(200, '{"a": 1}', {"Content-Type": "text/plain"})
        with patch("hostops.operations.network.urlopen", return_value=resp):
            result = await self.handler.execute({"url": "https://example.com"})
        assert result["body"] == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        from hostops.operations.errors import NetworkError

        with patch("hostops.operations.network.urlopen", side_effect=URLError("Name or service not known")):
            with pytest.raises(NetworkError, match="Name or service not known"):
                await self.handler.execute({"url": "https://no-such-host.invalid"})

    @pytest.mark.asyncio
    async def test_timeout(self):
        from hostops.operations.errors import NetworkError

        with patch("hostops.operations.network.urlopen", side_effect=socket.timeout("timed out")):
            with pytest.raises(NetworkError, match="timed out"):
                await self.handler.execute({"url": "https://slow.example.com"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{1, 2}, b"raw", {"when": object()}])
    async def test_unserializable_body(self, body):
        from hostops.operations.errors import InvalidArgumentError

        with patch("hostops.operations.network.urlopen") as mock_open:
            with pytest.raises(InvalidArgumentError, match="must be JSON-serializable"):
                await self.handler.execute({"url": "http://127.0.0.1:9/", "body": body})
        mock_open.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_url(self):
        from hostops.operations.errors import InvalidArgumentError

        with patch("hostops.operations.network.urlopen") as mock_open:
            with pytest.raises(InvalidArgumentError, match="requires a URL"):
                await self.handler.execute({})
        mock_open.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["file:///etc/passwd", "ftp://example.com/x", "not a url", 12])
    async def test_invalid_url(self, url):
        from hostops.operations.errors import InvalidArgumentError

        with patch("hostops.operations.network.urlopen") as mock_open:
            with pytest.raises(InvalidArgumentError, match="Invalid URL"):
                await self.handler.execute({"url": url})
        mock_open.assert_not_called()


class TestHeaderNormalization:

    def test_repeated_headers_joined(self):
        from hostops.operations.network import _normalize_headers

        msg = Message()
        msg["Set-Cookie"] = "a=1"
        msg["Set-Cookie"] = "b=2"
        msg["X-Id"] = "7"
        assert _normalize_headers(msg) == {"set-cookie": "a=1, b=2", "x-id": "7"}

    def test_decode_body(self):
        from hostops.operations.network import decode_body

        assert decode_body('{"a": 1}', "Application/JSON") == {"a": 1}
        assert decode_body("plain", None) == "plain"
