"""Network operation — outbound HTTP request with a normalized response.

Any HTTP status, including 4xx/5xx, is returned as a result; callers inspect
``status`` themselves. Only transport failures raise NetworkError.
"""

from __future__ import annotations

import asyncio
import json
import socket
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from hostops.operations.errors import InvalidArgumentError, NetworkError
from hostops.operations.types import OperationType

DEFAULT_TIMEOUT_S = 30.0
DEFAULT_USER_AGENT = "hostops"


def _normalize_headers(raw_headers: Any) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if raw_headers is None:
        return headers
    for name, value in raw_headers.items():
        key = name.lower()
        headers[key] = f"{headers[key]}, {value}" if key in headers else value
    return headers


def decode_body(text: str, content_type: Optional[str]) -> Any:
    """Parse JSON bodies when the content type says so; fall back to raw text."""
    if content_type and "application/json" in content_type.lower():
        try:
            return json.loads(text)
        except ValueError:
            return text
    return text


class NetworkHandler:
    operation_type = OperationType.Network

    def __init__(self, timeout_s: float = DEFAULT_TIMEOUT_S, user_agent: str = DEFAULT_USER_AGENT):
        self._timeout_s = timeout_s
        self._user_agent = user_agent

    def _build_request(self, details: Mapping[str, Any]) -> Request:
        url = details.get("url")
        if not url:
            raise InvalidArgumentError("Network operation requires a URL.")
        if not isinstance(url, str):
            raise InvalidArgumentError(f"Invalid URL: {url!r}")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidArgumentError(f"Invalid URL: {url}")

        method = str(details.get("method") or "GET").upper()
        headers = details.get("headers") or {}
        if not isinstance(headers, Mapping):
            raise InvalidArgumentError("Network operation headers must be an object.")
        req_headers = {str(k): str(v) for k, v in headers.items()}
        lower_names = {k.lower() for k in req_headers}
        if "user-agent" not in lower_names:
            req_headers["User-Agent"] = self._user_agent

        data = None
        body = details.get("body")
        if body is not None:
            try:
                data = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(f"Network operation body must be JSON-serializable: {e}") from e
            if "content-type" not in lower_names:
                req_headers["Content-Type"] = "application/json"

        return Request(url, data=data, headers=req_headers, method=method)

    def _send(self, req: Request) -> Tuple[int, Dict[str, str], str]:
        try:
            resp = urlopen(req, timeout=self._timeout_s)
        except HTTPError as e:
            # Non-2xx responses still carry a full response.
            resp = e
        try:
            status = resp.status if getattr(resp, "status", None) is not None else resp.code
            headers = _normalize_headers(resp.headers)
            body = resp.read().decode("utf-8", errors="replace")
        finally:
            resp.close()
        return status, headers, body

    async def execute(self, details: Mapping[str, Any]) -> Dict[str, Any]:
        req = self._build_request(details)
        loop = asyncio.get_running_loop()
        try:
            status, headers, text = await loop.run_in_executor(None, self._send, req)
        except URLError as e:
            raise NetworkError(f"Network request failed: {e.reason}") from e
        except (socket.timeout, TimeoutError) as e:
            raise NetworkError(f"Network request timed out after {self._timeout_s}s: {req.full_url}") from e
        except (OSError, ValueError) as e:
            raise NetworkError(f"Network request failed: {e}") from e

        return {
            "status": status,
            "headers": headers,
            "body": decode_body(text, headers.get("content-type")),
        }
