"""Error types delivered through a request's error slot."""

from __future__ import annotations


class RestError(Exception):
    """Base class for every error produced by the client."""


class ConfigurationError(RestError, ValueError):
    """A context or the CLI configuration is invalid."""


class TransportError(RestError):
    """The request never reached the server or no response came back."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ParseError(RestError):
    """A structured response body could not be parsed.

    ``raw`` holds the undecoded text so callers can still inspect it.
    """

    def __init__(self, message: str, raw: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.raw = raw
        self.cause = cause


class RequestError(RestError):
    """The server answered with a 4xx or 5xx status."""

    def __init__(self, status_code: int, server_message: str | None = None) -> None:
        self.status_code = status_code
        self.server_message = server_message or ""
        super().__init__(f"[HTTP {status_code}] {self.server_message}".rstrip())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RequestError):
            return NotImplemented
        return (self.status_code, self.server_message) == (other.status_code, other.server_message)

    def __hash__(self) -> int:
        return hash((self.status_code, self.server_message))


__all__ = [
    "RestError",
    "ConfigurationError",
    "TransportError",
    "ParseError",
    "RequestError",
]
