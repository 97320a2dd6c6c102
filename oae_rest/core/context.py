"""Request context: which tenant to talk to and as whom.

A :class:`RequestContext` is built once per logical user and handed to every
request.  It never changes after construction, with one exception: the
session slot, which is filled in after a successful login (or up front when
the context is created from an existing session) and then reused by all
later requests made with the same context.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from .errors import ConfigurationError


@dataclass(frozen=True)
class Anonymous:
    """No credentials are sent."""


@dataclass(frozen=True)
class UsernamePassword:
    """Log in lazily with these credentials before the first request."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"UsernamePassword(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class Session:
    """Reuse a session established elsewhere.

    ``token`` is sent verbatim as the ``Cookie`` header, e.g.
    ``"connect.sid=s%3Aabc"``.
    """

    token: str

    def __repr__(self) -> str:
        return "Session(token='***')"


AuthMode = Union[Anonymous, UsernamePassword, Session]


def _normalize_host(host: str) -> str:
    if not host or not isinstance(host, str) or not host.strip():
        raise ConfigurationError("host must be a non-empty base URL")
    host = host.strip()
    parts = urlsplit(host)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"host is not a valid http(s) base URL: {host!r}")
    if parts.query or parts.fragment:
        raise ConfigurationError(f"host must not carry a query or fragment: {host!r}")
    return host.rstrip("/")


class RequestContext:
    """Target host, authentication mode and extra headers for one user."""

    def __init__(
        self,
        host: str,
        auth: AuthMode | None = None,
        additional_headers: Mapping[str, str] | None = None,
        referer_override: str | None = None,
    ) -> None:
        auth = Anonymous() if auth is None else auth
        if not isinstance(auth, (Anonymous, UsernamePassword, Session)):
            raise ConfigurationError(f"unsupported authentication mode: {auth!r}")
        self._host = _normalize_host(host)
        self._auth = auth
        self._headers: Dict[str, str] = {}
        for name, value in (additional_headers or {}).items():
            self._set_header(name, value)
        self._referer_override = referer_override
        self._session: Optional[str] = auth.token if isinstance(auth, Session) else None
        self._login_lock = threading.Lock()
        self._login: Optional[Future] = None

    def __repr__(self) -> str:
        return f"RequestContext(host={self._host!r}, auth={self._auth!r})"

    @property
    def host(self) -> str:
        return self._host

    @property
    def auth(self) -> AuthMode:
        return self._auth

    @property
    def additional_headers(self) -> Dict[str, str]:
        return dict(self._headers)

    @property
    def referer_override(self) -> Optional[str]:
        return self._referer_override

    @property
    def default_referer(self) -> str:
        return self._host + "/"

    @property
    def referer(self) -> str:
        return self._referer_override or self.default_referer

    @property
    def session(self) -> Optional[str]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def _set_header(self, name: str, value: str) -> None:
        # header names are case-insensitive; keep the latest spelling
        for existing in list(self._headers):
            if existing.lower() == name.lower():
                del self._headers[existing]
        self._headers[name] = str(value)

    def with_header(self, name: str, value: str) -> "RequestContext":
        """Return a copy of this context with ``name: value`` merged in."""
        clone = RequestContext(
            self._host,
            self._auth,
            additional_headers=self._headers,
            referer_override=self._referer_override,
        )
        clone._set_header(name, value)
        clone._session = self._session
        return clone

    def adopt_session(self, token: str) -> None:
        """Use ``token`` for every later request made with this context.

        There is no guard against overwriting an existing session: the last
        call wins.
        """
        self._session = token

    def claim_login(self) -> Tuple[Future, bool]:
        """Return the in-flight login future and whether the caller owns it.

        The first caller gets a fresh future and ``True`` and must perform the
        login, then resolve the future and call :meth:`release_login`.  Every
        other caller gets the same future and ``False`` and waits on it.
        """
        with self._login_lock:
            if self._login is None:
                self._login = Future()
                return self._login, True
            return self._login, False

    def release_login(self, pending: Future) -> None:
        with self._login_lock:
            if self._login is pending:
                self._login = None


__all__ = [
    "Anonymous",
    "UsernamePassword",
    "Session",
    "AuthMode",
    "RequestContext",
]
