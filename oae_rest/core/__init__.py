"""Core request model for the OAE REST client."""

from .errors import ConfigurationError, ParseError, RequestError, RestError, TransportError
from .context import Anonymous, AuthMode, RequestContext, Session, UsernamePassword
from .params import FileUpload, encode_body, encode_query, encode_uri_component
from .http import LOGIN_PATH, LOGOUT_PATH, RawResponse, RequestExecutor, RestResult
from .config import CONFIG_PATH, DEFAULT_PAGE_LIMIT, build_context, build_executor, load_config, save_config
from .utils import PagingError, fetch_all_pages, format_rows, get_context_and_executor, print_json, unwrap

__all__ = [
    "RestError", "ConfigurationError", "ParseError", "RequestError", "TransportError",
    "Anonymous", "AuthMode", "RequestContext", "Session", "UsernamePassword",
    "FileUpload", "encode_body", "encode_query", "encode_uri_component",
    "LOGIN_PATH", "LOGOUT_PATH", "RawResponse", "RequestExecutor", "RestResult",
    "CONFIG_PATH", "DEFAULT_PAGE_LIMIT", "build_context", "build_executor", "load_config", "save_config",
    "PagingError", "fetch_all_pages", "format_rows", "get_context_and_executor", "print_json", "unwrap",
]
