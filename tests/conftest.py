import json
import pathlib
import sys
import threading
from http.client import HTTPMessage
from io import BytesIO
from urllib.error import HTTPError
from urllib.parse import parse_qsl, urlsplit

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from oae_rest.core import RequestExecutor  # noqa: E402


def make_headers(content_type=None, cookies=(), extra=None):
    msg = HTTPMessage()
    if content_type:
        msg["Content-Type"] = content_type
    for cookie in cookies:
        msg["Set-Cookie"] = cookie
    for k, v in (extra or {}).items():
        msg[k] = v
    return msg


class FakeResponse:
    def __init__(self, status, headers, body, url):
        self.status = status
        self.headers = headers
        self._body = body
        self._url = url

    def read(self):
        return self._body

    def geturl(self):
        return self._url

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeServer:
    """Stand-in for ``urlopen`` that records requests and serves canned replies."""

    def __init__(self):
        self.requests = []
        self.routes = {}
        self.timeouts = []
        self._lock = threading.Lock()

    def route(self, method, path, status=200, body=None, content_type=None, cookies=(), handler=None, headers=None):
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode("utf-8")
            content_type = content_type or "application/json; charset=utf-8"
        elif isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[(method, path)] = (status, body or b"", content_type, cookies, handler, headers)

    def calls(self, method=None, path=None):
        return [
            r for r in self.requests
            if (method is None or r["method"] == method) and (path is None or r["path"] == path)
        ]

    def __call__(self, req, **kwargs):
        data = req.data
        if data is not None and not isinstance(data, (bytes, bytearray)):
            data = b"".join(data)
        parts = urlsplit(req.full_url)
        record = {
            "method": req.get_method(),
            "url": req.full_url,
            "path": parts.path,
            "query": parts.query,
            "params": parse_qsl(parts.query, keep_blank_values=True),
            "headers": {k.lower(): v for k, v in req.header_items()},
            "body": data,
        }
        with self._lock:
            self.requests.append(record)
            self.timeouts.append(kwargs.get("timeout"))
        route = self.routes.get((record["method"], record["path"]))
        if route is None:
            raise HTTPError(req.full_url, 404, "Not Found", make_headers("text/plain"), BytesIO(b"Not Found"))
        status, body, content_type, cookies, handler, extra = route
        if handler is not None:
            handler(record)
        headers = make_headers(content_type, cookies, extra)
        if status >= 300:
            raise HTTPError(req.full_url, status, "error", headers, BytesIO(body))
        return FakeResponse(status, headers, body, req.full_url)


@pytest.fixture
def server(monkeypatch):
    fake = FakeServer()
    monkeypatch.setattr("oae_rest.core.http.urlopen", fake)
    return fake


@pytest.fixture
def executor():
    ex = RequestExecutor(max_workers=4)
    yield ex
    ex.shutdown()
