"""Python client for the OAE REST API."""

from .core import (
    Anonymous,
    ConfigurationError,
    FileUpload,
    ParseError,
    RawResponse,
    RequestContext,
    RequestError,
    RequestExecutor,
    RestError,
    RestResult,
    Session,
    TransportError,
    UsernamePassword,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Anonymous",
    "ConfigurationError",
    "FileUpload",
    "ParseError",
    "RawResponse",
    "RequestContext",
    "RequestError",
    "RequestExecutor",
    "RestError",
    "RestResult",
    "Session",
    "TransportError",
    "UsernamePassword",
]
