"""Request execution on top of :mod:`urllib`.

:class:`RequestExecutor` performs exactly one HTTP call per
:meth:`~RequestExecutor.execute` on a small thread pool and hands back a
:class:`concurrent.futures.Future`.  The outcome is always a
:class:`RestResult` triple ``(error, body, response)``: failures are never
raised from the future, they arrive in the ``error`` slot so callers can
treat network problems, HTTP errors and unparsable bodies the same way.

Contexts created with a username and password are logged in lazily the
first time they are used.  Only one login runs per context at a time; any
request that arrives while it is in flight waits for it.
"""

from __future__ import annotations

import codecs
import http.client
import json
import logging
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from http.cookies import CookieError, SimpleCookie
from typing import Any, Callable, Dict, Iterable, Mapping, NamedTuple, Optional, Union
from urllib.error import HTTPError, URLError
from urllib.request import HTTPRedirectHandler, Request, build_opener

from .context import RequestContext, UsernamePassword
from .errors import ParseError, RequestError, TransportError
from .params import build_url, encode_body, encode_query

logger = logging.getLogger(__name__)

METHODS = ("GET", "POST", "PUT", "DELETE")
LOGIN_PATH = "/api/auth/login"
LOGOUT_PATH = "/api/auth/logout"
DEFAULT_USER_AGENT = "oae-rest/0.1"
DEFAULT_WORKERS = 8

Callback = Callable[[Optional[BaseException], Any, Optional["RawResponse"]], None]


class _NoRedirect(HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, hdrs, newurl):
        return None


_opener = build_opener(_NoRedirect)


def urlopen(req, **kwargs):
    """Open ``req`` without following redirects.

    A 3xx surfaces as :class:`HTTPError` carrying the redirect's status,
    headers and body, so each request is exactly one round trip.
    """
    return _opener.open(req, **kwargs)


@dataclass(frozen=True)
class RawResponse:
    """Transport level metadata of a response."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""
    cookies: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str, default: str | None = None) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return default


class RestResult(NamedTuple):
    error: Optional[BaseException]
    body: Any
    response: Optional[RawResponse]

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class _Prepared:
    method: str
    url: str
    content_type: Optional[str]
    data: Union[bytes, Iterable[bytes], None]


def _charset(content_type: str) -> str:
    for param in content_type.split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.lower() == "charset" and value:
            name = value.strip().strip('"')
            try:
                codecs.lookup(name)
            except LookupError:
                break
            return name
    return "utf-8"


def _is_structured(mime: str) -> bool:
    return mime in ("application/json", "text/json") or mime.endswith("+json")


def decode_body(content_type: str, raw: bytes):
    """Return ``(body, parse_error)`` for a response payload.

    JSON media types are parsed, ``text/*`` is decoded to ``str`` and
    anything else is returned as ``bytes``.
    """
    mime = content_type.split(";")[0].strip().lower()
    if _is_structured(mime):
        text = raw.decode(_charset(content_type), errors="replace")
        if not text.strip():
            return None, None
        try:
            return json.loads(text), None
        except ValueError as exc:
            return text, ParseError(f"Invalid JSON in {mime} response: {exc}", text, exc)
    if mime.startswith("text/"):
        return raw.decode(_charset(content_type), errors="replace"), None
    return raw, None


def server_message(body: Any) -> str:
    """Extract the human readable message from an error body."""
    if isinstance(body, dict):
        for key in ("msg", "error", "message"):
            if body.get(key):
                return str(body[key])
        return ""
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="ignore")
    if isinstance(body, str):
        return body.strip()
    return ""


def _collect_headers(headers) -> tuple[Dict[str, str], Dict[str, str]]:
    if headers is None:
        return {}, {}
    plain = {k: v for k, v in headers.items()}
    cookies: Dict[str, str] = {}
    get_all = getattr(headers, "get_all", None)
    raw_cookies = get_all("Set-Cookie") if get_all else [v for k, v in headers.items() if k.lower() == "set-cookie"]
    for raw in raw_cookies or []:
        jar = SimpleCookie()
        try:
            jar.load(raw)
        except CookieError:
            logger.debug("Ignoring malformed Set-Cookie header")
            continue
        for name, morsel in jar.items():
            cookies[name] = morsel.value
    return plain, cookies


class RequestExecutor:
    """Execute REST requests against a :class:`RequestContext`.

    ``timeout`` is handed to the transport as is; ``None`` keeps the
    transport's own default.  Nothing is retried.
    """

    def __init__(
        self,
        timeout: float | None = None,
        max_workers: int = DEFAULT_WORKERS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._pool = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="oae-rest")

    def __enter__(self) -> "RequestExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def execute(
        self,
        rest_ctx: RequestContext,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> "Future[RestResult]":
        """Schedule one request and return a future for its :class:`RestResult`.

        ``callback``, if given, is called exactly once with
        ``(error, body, response)`` on the worker thread.

        An unsupported method raises :class:`ValueError` and an unsupported
        parameter value raises :class:`TypeError` here, before anything is
        scheduled; these are programming errors, not request outcomes.
        """
        prepared = self._prepare(rest_ctx, method, path, params)
        future = self._pool.submit(self._run, rest_ctx, prepared)
        if callback is not None:
            future.add_done_callback(lambda f: _deliver(f, callback))
        return future

    def request(
        self,
        rest_ctx: RequestContext,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> RestResult:
        """Blocking variant of :meth:`execute`."""
        return self.execute(rest_ctx, method, path, params).result()

    # -- internals -------------------------------------------------------

    def _prepare(self, rest_ctx: RequestContext, method: str, path: str, params) -> _Prepared:
        method = (method or "").upper()
        if method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {method!r}")
        if method in ("GET", "DELETE"):
            url = build_url(rest_ctx.host, path, encode_query(params))
            return _Prepared(method, url, None, None)
        content_type, data = encode_body(params)
        return _Prepared(method, build_url(rest_ctx.host, path), content_type, data)

    def _run(self, rest_ctx: RequestContext, prepared: _Prepared) -> RestResult:
        if isinstance(rest_ctx.auth, UsernamePassword) and not rest_ctx.is_authenticated:
            failed = self._ensure_session(rest_ctx)
            if failed is not None:
                return failed
        return self._send(rest_ctx, prepared)

    def _ensure_session(self, rest_ctx: RequestContext) -> Optional[RestResult]:
        """Log in once for ``rest_ctx``; return the failed login result, if any."""
        pending, owner = rest_ctx.claim_login()
        if not owner:
            logger.debug("Waiting for in-flight login on %s", rest_ctx.host)
            return pending.result()
        try:
            failed = None if rest_ctx.is_authenticated else self._login(rest_ctx)
            pending.set_result(failed)
        except BaseException as exc:
            pending.set_exception(exc)
            raise
        finally:
            rest_ctx.release_login(pending)
        return failed

    def _login(self, rest_ctx: RequestContext) -> Optional[RestResult]:
        creds = rest_ctx.auth
        logger.info("Logging in to %s as %s", rest_ctx.host, creds.username)
        prepared = self._prepare(
            rest_ctx, "POST", LOGIN_PATH, {"username": creds.username, "password": creds.password}
        )
        result = self._send(rest_ctx, prepared, use_session=False)
        if result.error is not None:
            logger.info("Login to %s failed: %s", rest_ctx.host, result.error)
            return result
        cookies = result.response.cookies
        if not cookies:
            return RestResult(
                RequestError(result.response.status_code, "Login response did not establish a session"),
                result.body,
                result.response,
            )
        rest_ctx.adopt_session("; ".join(f"{name}={value}" for name, value in cookies.items()))
        logger.debug("Session established on %s", rest_ctx.host)
        return None

    def _headers(self, rest_ctx: RequestContext, prepared: _Prepared, use_session: bool) -> Dict[str, str]:
        headers = {
            "Accept": "application/json, text/plain, */*",
            "User-Agent": self.user_agent,
            "Referer": rest_ctx.referer,
        }
        headers.update(rest_ctx.additional_headers)
        if use_session and rest_ctx.session:
            headers["Cookie"] = rest_ctx.session
        if prepared.content_type:
            headers["Content-Type"] = prepared.content_type
        return headers

    def _send(self, rest_ctx: RequestContext, prepared: _Prepared, *, use_session: bool = True) -> RestResult:
        req = Request(
            url=prepared.url,
            method=prepared.method,
            headers=self._headers(rest_ctx, prepared, use_session),
            data=prepared.data,
        )
        kwargs = {} if self.timeout is None else {"timeout": self.timeout}
        logger.debug("%s %s", prepared.method, prepared.url)
        try:
            with urlopen(req, **kwargs) as resp:
                return self._normalize(resp.status, resp.headers, resp.geturl() or prepared.url, resp.read())
        except HTTPError as e:
            raw = b""
            if e.fp is not None:
                try:
                    raw = e.read()
                finally:
                    e.close()
            return self._normalize(e.code, e.headers, prepared.url, raw)
        except (URLError, http.client.HTTPException, OSError) as e:
            reason = getattr(e, "reason", e)
            logger.warning("%s %s failed: %s", prepared.method, prepared.url, reason)
            return RestResult(TransportError(f"Network error: {reason}", e), None, None)

    def _normalize(self, status: int, headers, url: str, raw: bytes) -> RestResult:
        plain, cookies = _collect_headers(headers)
        response = RawResponse(status, plain, url, cookies)
        body, parse_error = decode_body(response.header("Content-Type") or "", raw or b"")
        logger.debug("%s -> %s", url, status)
        if status >= 400:
            return RestResult(RequestError(status, server_message(body)), body, response)
        return RestResult(parse_error, body, response)


def _deliver(future: Future, callback: Callback) -> None:
    if future.cancelled():
        callback(CancelledError(), None, None)
        return
    exc = future.exception()
    if exc is not None:
        callback(exc, None, None)
        return
    callback(*future.result())


__all__ = [
    "METHODS",
    "LOGIN_PATH",
    "LOGOUT_PATH",
    "RawResponse",
    "RestResult",
    "RequestExecutor",
    "decode_body",
    "server_message",
]
