"""Configuration helpers for the oae CLI."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .context import Anonymous, RequestContext, Session, UsernamePassword
from .errors import ConfigurationError
from .http import DEFAULT_WORKERS, RequestExecutor

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(os.path.expanduser("~")) / ".oae-rest.json"
# Page size used when walking library and member listings
DEFAULT_PAGE_LIMIT = 25

_ENV = {
    "OAE_HOST": "host",
    "OAE_USERNAME": "username",
    "OAE_PASSWORD": "password",
    "OAE_SESSION": "session",
    "OAE_TIMEOUT": "timeout",
    "OAE_WORKERS": "workers",
}


def load_config() -> Dict[str, Any]:
    """Load configuration from disk and environment."""
    cfg: Dict[str, Any] = {}
    if CONFIG_PATH.exists():
        try:
            cfg = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable config file %s", CONFIG_PATH)
            cfg = {}
    for var, key in _ENV.items():
        if os.getenv(var):
            cfg[key] = os.getenv(var)
    return cfg


def save_config(
    host: str | None = None,
    username: str | None = None,
    password: str | None = None,
    session: str | None = None,
) -> Path:
    """Persist the given values to CONFIG_PATH.

    Credentials and a session are mutually exclusive: saving one drops the
    other so the stored authentication mode is never ambiguous.
    """
    cfg: Dict[str, Any] = {}
    if CONFIG_PATH.exists():
        try:
            cfg = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except ValueError:
            cfg = {}
    if host is not None:
        cfg["host"] = host.rstrip("/")
    if username is not None:
        cfg["username"] = username
        cfg["password"] = password or ""
        cfg.pop("session", None)
    if session is not None:
        cfg["session"] = session
        cfg.pop("username", None)
        cfg.pop("password", None)
    CONFIG_PATH.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), encoding="utf-8")
    return CONFIG_PATH


def build_context(cfg: Dict[str, Any] | None = None) -> RequestContext:
    """Return a :class:`RequestContext` for the configured tenant.

    A stored session takes precedence over a username and password.
    """
    cfg = load_config() if cfg is None else cfg
    host = cfg.get("host")
    if not host:
        raise ConfigurationError("Missing host. Run: oae auth set --host <URL>")
    if cfg.get("session"):
        auth = Session(cfg["session"])
    elif cfg.get("username"):
        auth = UsernamePassword(cfg["username"], cfg.get("password") or "")
    else:
        auth = Anonymous()
    return RequestContext(host, auth)


def build_executor(cfg: Dict[str, Any] | None = None) -> RequestExecutor:
    cfg = load_config() if cfg is None else cfg
    try:
        timeout = float(cfg["timeout"]) if cfg.get("timeout") not in (None, "") else None
        workers = int(cfg.get("workers") or DEFAULT_WORKERS)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timeout or workers setting: {exc}") from exc
    return RequestExecutor(timeout=timeout, max_workers=workers)


__all__ = [
    "CONFIG_PATH",
    "DEFAULT_PAGE_LIMIT",
    "load_config",
    "save_config",
    "build_context",
    "build_executor",
]
