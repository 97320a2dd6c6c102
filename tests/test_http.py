import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from io import BytesIO
from urllib.error import HTTPError, URLError

import pytest

from oae_rest.core import (
    FileUpload,
    ParseError,
    RequestContext,
    RequestError,
    RequestExecutor,
    Session,
    TransportError,
    UsernamePassword,
)
from oae_rest.core.http import decode_body, server_message

HOST = "https://example.org"


def test_anonymous_401_is_delivered_as_request_error(server, executor):
    server.route("GET", "/api/me", status=401, body={"code": 401, "msg": "Anonymous user"})
    ctx = RequestContext(HOST)

    err, body, response = executor.request(ctx, "GET", "/api/me", {})

    assert isinstance(err, RequestError)
    assert err == RequestError(401, "Anonymous user")
    assert body == {"code": 401, "msg": "Anonymous user"}
    assert response.status_code == 401
    assert "cookie" not in server.requests[0]["headers"]


def test_callback_invoked_once_with_triple(server, executor):
    server.route("GET", "/api/me", body={"id": "u:t:1"})
    delivered = []
    done = threading.Event()

    def callback(err, body, response):
        delivered.append((err, body, response.status_code))
        done.set()

    future = executor.execute(RequestContext(HOST), "GET", "/api/me", callback=callback)
    assert future.result().ok
    assert done.wait(5)
    time.sleep(0.05)
    assert delivered == [(None, {"id": "u:t:1"}, 200)]


def test_forbidden_with_unknown_content_type(monkeypatch, executor):
    def fake_urlopen(req, timeout=60):
        body = b'{"ok":false,"error":"Unauthorized"}'
        raise HTTPError(req.full_url, 403, "Forbidden", None, BytesIO(body))

    monkeypatch.setattr("oae_rest.core.http.urlopen", fake_urlopen)
    err, body, response = executor.request(RequestContext(HOST), "GET", "/api/folder/managed")
    assert isinstance(err, RequestError)
    assert err.status_code == 403
    assert "Unauthorized" in err.server_message
    assert response.status_code == 403
    assert body == b'{"ok":false,"error":"Unauthorized"}'


def test_transparent_login_then_replay(server, executor):
    server.route("POST", "/api/auth/login", body={"id": "u:t:alice"}, cookies=["connect.sid=s%3Aabc; Path=/; HttpOnly"])
    server.route("GET", "/api/me", body={"id": "u:t:alice"})
    ctx = RequestContext(HOST, UsernamePassword("alice", "secret"))

    result = executor.request(ctx, "GET", "/api/me", {})

    assert result.ok
    assert [(r["method"], r["path"]) for r in server.requests] == [
        ("POST", "/api/auth/login"),
        ("GET", "/api/me"),
    ]
    login = server.requests[0]
    assert login["body"] == b"password=secret&username=alice"
    assert login["headers"]["content-type"] == "application/x-www-form-urlencoded"
    assert "cookie" not in login["headers"]
    assert server.requests[1]["headers"]["cookie"] == "connect.sid=s%3Aabc"
    assert ctx.session == "connect.sid=s%3Aabc"

    executor.request(ctx, "GET", "/api/me", {})
    assert len(server.calls("POST", "/api/auth/login")) == 1
    assert len(server.calls("GET", "/api/me")) == 2


def test_failed_login_is_delivered_and_not_replayed(server, executor):
    server.route("POST", "/api/auth/login", status=401, body="Invalid credentials", content_type="text/plain")
    server.route("GET", "/api/me", body={"id": "u:t:alice"})
    ctx = RequestContext(HOST, UsernamePassword("alice", "wrong"))

    err, body, response = executor.request(ctx, "GET", "/api/me")

    assert err == RequestError(401, "Invalid credentials")
    assert body == "Invalid credentials"
    assert response.status_code == 401
    assert server.calls("GET", "/api/me") == []
    assert ctx.session is None

    # the guard is cleared so the next call tries again
    executor.request(ctx, "GET", "/api/me")
    assert len(server.calls("POST", "/api/auth/login")) == 2


def test_login_without_cookie_is_an_error(server, executor):
    server.route("POST", "/api/auth/login", body={"id": "u:t:alice"})
    ctx = RequestContext(HOST, UsernamePassword("alice", "secret"))
    err, _, response = executor.request(ctx, "GET", "/api/me")
    assert isinstance(err, RequestError)
    assert err.status_code == 200
    assert ctx.session is None


def test_concurrent_calls_share_one_login(server):
    release = threading.Event()
    server.route(
        "POST", "/api/auth/login", body={}, cookies=["connect.sid=one"],
        handler=lambda record: release.wait(5),
    )
    server.route("GET", "/api/me", body={"id": "u:t:alice"})
    ctx = RequestContext(HOST, UsernamePassword("alice", "secret"))

    with RequestExecutor(max_workers=4) as ex:
        futures = [ex.execute(ctx, "GET", "/api/me") for _ in range(4)]
        time.sleep(0.2)
        release.set()
        results = [f.result(timeout=5) for f in futures]

    assert all(r.ok for r in results)
    assert len(server.calls("POST", "/api/auth/login")) == 1
    assert len(server.calls("GET", "/api/me")) == 4
    assert all(r["headers"]["cookie"] == "connect.sid=one" for r in server.calls("GET", "/api/me"))


def test_concurrent_failed_login_reaches_every_caller(server):
    release = threading.Event()
    server.route(
        "POST", "/api/auth/login", status=401, body={"code": 401, "msg": "Invalid credentials"},
        handler=lambda record: release.wait(5),
    )
    server.route("GET", "/api/me", body={"id": "u:t:alice"})
    ctx = RequestContext(HOST, UsernamePassword("alice", "wrong"))

    with RequestExecutor(max_workers=4) as ex:
        futures = [ex.execute(ctx, "GET", "/api/me") for _ in range(4)]
        time.sleep(0.2)
        release.set()
        results = [f.result(timeout=5) for f in futures]

    assert all(r.error == RequestError(401, "Invalid credentials") for r in results)
    assert len(server.calls("POST", "/api/auth/login")) == 1
    assert server.calls("GET", "/api/me") == []
    assert not ctx.is_authenticated


def test_session_mode_attaches_cookie(server, executor):
    server.route("GET", "/api/me", body={"id": "u:t:bob"})
    ctx = RequestContext(HOST, Session("connect.sid=xyz"))
    assert executor.request(ctx, "GET", "/api/me").ok
    assert server.calls("POST", "/api/auth/login") == []
    assert server.requests[0]["headers"]["cookie"] == "connect.sid=xyz"


def test_headers_and_referer(server, executor):
    server.route("GET", "/api/me", body={})
    ctx = RequestContext(HOST, additional_headers={"X-Client-Id": "abc"})
    executor.request(ctx, "GET", "/api/me")
    executor.request(ctx.with_header("X-Client-Id", "def"), "GET", "/api/me")
    executor.request(RequestContext(HOST, referer_override="https://other.org/"), "GET", "/api/me")

    first, second, third = server.requests
    assert first["headers"]["referer"] == "https://example.org/"
    assert first["headers"]["x-client-id"] == "abc"
    assert second["headers"]["x-client-id"] == "def"
    assert third["headers"]["referer"] == "https://other.org/"


def test_post_body_omits_absent_parameters(server, executor):
    server.route("POST", "/api/folder", status=201, body={"id": "f:t:1"})
    result = executor.request(
        RequestContext(HOST), "POST", "/api/folder",
        {"displayName": "Docs", "visibility": "private", "managers": None},
    )
    assert result.ok
    assert result.body == {"id": "f:t:1"}
    sent = server.requests[0]
    assert sent["body"] == b"displayName=Docs&visibility=private"
    assert b"managers" not in sent["body"]


def test_get_parameters_go_to_query_string(server, executor):
    server.route("GET", "/api/folder/f%3At%3A1/members", body={"results": []})
    executor.request(RequestContext(HOST), "GET", "/api/folder/f%3At%3A1/members", {"start": None, "limit": 10, "a": "x y"})
    sent = server.requests[0]
    assert sent["query"] == "a=x%20y&limit=10"
    assert sent["body"] is None


def test_delete_parameters_go_to_query_string(server, executor):
    server.route("DELETE", "/api/folder/f1/library", body={})
    executor.request(RequestContext(HOST), "DELETE", "/api/folder/f1/library", {"contentIds": ["c1", "c2"]})
    assert server.requests[0]["params"] == [("contentIds", "c1"), ("contentIds", "c2")]


def test_each_call_is_a_round_trip(server, executor):
    server.route("GET", "/api/me", body={})
    ctx = RequestContext(HOST)
    futures = [executor.execute(ctx, "GET", "/api/me") for _ in range(5)]
    for f in futures:
        f.result()
    assert len(server.requests) == 5


def test_transport_failure(monkeypatch, executor):
    def fake_urlopen(req, **kwargs):
        raise URLError("connection refused")

    monkeypatch.setattr("oae_rest.core.http.urlopen", fake_urlopen)
    err, body, response = executor.request(RequestContext(HOST), "GET", "/api/me")
    assert isinstance(err, TransportError)
    assert "connection refused" in str(err)
    assert body is None
    assert response is None


def test_invalid_json_is_a_parse_error(server, executor):
    server.route("GET", "/api/me", body="{not json", content_type="application/json")
    err, body, response = executor.request(RequestContext(HOST), "GET", "/api/me")
    assert isinstance(err, ParseError)
    assert body == "{not json"
    assert err.raw == "{not json"
    assert response.status_code == 200


def test_error_status_wins_over_parse_error(server, executor):
    server.route("GET", "/api/me", status=500, body="<html>oops</html>", content_type="application/json")
    err, body, _ = executor.request(RequestContext(HOST), "GET", "/api/me")
    assert isinstance(err, RequestError)
    assert err.status_code == 500
    assert body == "<html>oops</html>"


def test_timeout_only_passed_when_configured(server):
    server.route("GET", "/api/me", body={})
    with RequestExecutor() as ex:
        ex.request(RequestContext(HOST), "GET", "/api/me")
    with RequestExecutor(timeout=2.5) as ex:
        ex.request(RequestContext(HOST), "GET", "/api/me")
    assert server.timeouts == [None, 2.5]


def test_unsupported_method(executor):
    with pytest.raises(ValueError):
        executor.execute(RequestContext(HOST), "PATCH", "/api/me")


def test_unsupported_parameter_value_raises(server, executor):
    with pytest.raises(TypeError):
        executor.execute(RequestContext(HOST), "POST", "/api/folder", {"bad": {"x": 1}})
    with pytest.raises(TypeError):
        executor.execute(RequestContext(HOST), "GET", "/api/me", {"file": FileUpload("a.txt", BytesIO(b"a"))})
    assert server.requests == []


def test_redirect_is_returned_not_followed(server, executor):
    server.route(
        "POST", "/api/auth/twitter", status=302, body="Found. Redirecting",
        content_type="text/plain", headers={"Location": "https://api.twitter.com/oauth/authenticate?t=1"},
    )
    ctx = RequestContext(HOST, Session("connect.sid=abc"))

    err, body, response = executor.request(ctx, "POST", "/api/auth/twitter")

    assert err is None
    assert body == "Found. Redirecting"
    assert response.status_code == 302
    assert response.header("Location") == "https://api.twitter.com/oauth/authenticate?t=1"
    assert len(server.requests) == 1


class _Recorder(BaseHTTPRequestHandler):
    def log_message(self, *args):
        pass

    def _reply(self):
        self.server.hits.append((self.command, self.path, self.headers.get("Cookie")))
        length = int(self.headers.get("Content-Length") or 0)
        if length:
            self.rfile.read(length)
        self.send_response(self.server.status)
        for name, value in self.server.extra_headers.items():
            self.send_header(name, value)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", "0")
        self.end_headers()

    do_GET = do_POST = _reply


@pytest.fixture
def http_servers(monkeypatch):
    monkeypatch.setenv("no_proxy", "127.0.0.1")
    monkeypatch.setenv("NO_PROXY", "127.0.0.1")
    started = []

    def start(status=200, headers=None):
        srv = ThreadingHTTPServer(("127.0.0.1", 0), _Recorder)
        srv.hits = []
        srv.status = status
        srv.extra_headers = headers or {}
        threading.Thread(target=srv.serve_forever, daemon=True).start()
        started.append(srv)
        return srv, f"http://127.0.0.1:{srv.server_address[1]}"

    yield start
    for srv in started:
        srv.shutdown()
        srv.server_close()


def test_session_cookie_does_not_follow_redirect_to_other_host(http_servers, executor):
    external, external_url = http_servers()
    tenant, tenant_url = http_servers(302, {"Location": external_url + "/oauth/authenticate"})
    ctx = RequestContext(tenant_url, Session("connect.sid=SECRET"))

    err, _, response = executor.request(ctx, "POST", "/api/auth/twitter")

    assert err is None
    assert response.status_code == 302
    assert response.header("Location") == external_url + "/oauth/authenticate"
    assert tenant.hits == [("POST", "/api/auth/twitter", "connect.sid=SECRET")]
    assert external.hits == []


def test_decode_body_by_content_type():
    assert decode_body("application/json", b'{"a": 1}') == ({"a": 1}, None)
    assert decode_body("application/vnd.api+json", b"[1]") == ([1], None)
    assert decode_body("application/json", b"") == (None, None)
    assert decode_body("text/plain; charset=latin-1", "é".encode("latin-1")) == ("é", None)
    assert decode_body("application/octet-stream", b"\x00\x01") == (b"\x00\x01", None)
    assert decode_body("", b"raw") == (b"raw", None)


def test_server_message():
    assert server_message({"code": 400, "msg": "Missing displayName"}) == "Missing displayName"
    assert server_message({"error": "Unauthorized"}) == "Unauthorized"
    assert server_message(" plain text \n") == "plain text"
    assert server_message(b"bytes") == "bytes"
    assert server_message(None) == ""


def test_file_upload_is_sent_as_multipart(server, executor):
    server.route("POST", "/api/content/create", status=201, body={"id": "c:t:1"})
    upload = FileUpload("notes.txt", BytesIO(b"hello world"))
    result = executor.request(
        RequestContext(HOST), "POST", "/api/content/create",
        {"resourceSubType": "file", "file": upload, "viewers": None},
    )
    assert result.ok
    sent = server.requests[0]
    assert sent["headers"]["content-type"].startswith("multipart/form-data; boundary=")
    assert b'filename="notes.txt"' in sent["body"]
    assert b"hello world" in sent["body"]
    assert b'name="viewers"' not in sent["body"]
