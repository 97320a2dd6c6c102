"""Parameter encoding for query strings and form bodies.

Parameters arrive as a plain mapping.  :func:`classify` turns that mapping
into a sorted list of :class:`ScalarField`, :class:`ArrayField` and
:class:`FileField` values once, and the encoders below only ever look at
those.  ``None`` values are dropped there, so they never show up as empty
strings in a query or body.
"""

from __future__ import annotations

import mimetypes
import uuid
from dataclasses import dataclass
from typing import IO, Any, Iterator, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote, urlencode

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class FileUpload:
    """A named byte stream to send as a multipart file part."""

    filename: str
    stream: IO
    content_type: Optional[str] = None


@dataclass(frozen=True)
class ScalarField:
    name: str
    value: str


@dataclass(frozen=True)
class ArrayField:
    name: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class FileField:
    name: str
    upload: FileUpload


Field = Union[ScalarField, ArrayField, FileField]


def encode_scalar(value: Any) -> str:
    """Return the wire representation of a scalar value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"unsupported parameter value: {value!r}")


def classify(params: Mapping[str, Any] | None) -> List[Field]:
    """Return the non-absent parameters as fields, sorted by name."""
    fields: List[Field] = []
    for name in sorted(params or {}):
        value = params[name]
        if value is None:
            continue
        if isinstance(value, FileUpload):
            fields.append(FileField(name, value))
        elif isinstance(value, (list, tuple)):
            values = tuple(encode_scalar(v) for v in value if v is not None)
            if values:
                fields.append(ArrayField(name, values))
        else:
            fields.append(ScalarField(name, encode_scalar(value)))
    return fields


def _pairs(fields: Sequence[Field]) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for field in fields:
        if isinstance(field, ScalarField):
            pairs.append((field.name, field.value))
        elif isinstance(field, ArrayField):
            pairs.extend((field.name, v) for v in field.values)
        else:
            raise TypeError(f"file upload {field.name!r} needs a POST or PUT body")
    return pairs


def encode_query(params: Mapping[str, Any] | None) -> str:
    """Percent-encode ``params`` as a query string, keys ascending."""
    return urlencode(_pairs(classify(params)), quote_via=quote)


def build_url(host: str, path: str, query: str = "") -> str:
    url = host + path
    if not query:
        return url
    return url + ("&" if "?" in path else "?") + query


def encode_body(params: Mapping[str, Any] | None) -> Tuple[Optional[str], Union[bytes, Iterator[bytes], None]]:
    """Return ``(content_type, data)`` for a POST or PUT body.

    The body is multipart when any field is a file upload and url-encoded
    otherwise.  Multipart data is a generator so files are read in chunks
    while the request is being sent.
    """
    fields = classify(params)
    if any(isinstance(f, FileField) for f in fields):
        boundary = f"----oaerest{uuid.uuid4().hex}"
        return f"multipart/form-data; boundary={boundary}", iter_multipart(fields, boundary)
    if not fields:
        return None, None
    body = urlencode(_pairs(fields), quote_via=quote).encode("utf-8")
    return "application/x-www-form-urlencoded", body


def _disposition(name: str, filename: str | None = None) -> bytes:
    header = f'Content-Disposition: form-data; name="{_quote_header(name)}"'
    if filename is not None:
        header += f'; filename="{_quote_header(filename)}"'
    return (header + "\r\n").encode("utf-8")


def _quote_header(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")


def iter_multipart(fields: Sequence[Field], boundary: str) -> Iterator[bytes]:
    """Yield a multipart/form-data body part by part."""
    delimiter = f"--{boundary}\r\n".encode()
    for field in fields:
        if isinstance(field, FileField):
            upload = field.upload
            ctype = upload.content_type or mimetypes.guess_type(upload.filename)[0] or "application/octet-stream"
            yield delimiter
            yield _disposition(field.name, upload.filename)
            yield f"Content-Type: {ctype}\r\n\r\n".encode()
            while True:
                chunk = upload.stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk if isinstance(chunk, (bytes, bytearray)) else chunk.encode("utf-8")
            yield b"\r\n"
            continue
        values = (field.value,) if isinstance(field, ScalarField) else field.values
        for value in values:
            yield delimiter
            yield _disposition(field.name)
            yield b"\r\n"
            yield value.encode("utf-8")
            yield b"\r\n"
    yield f"--{boundary}--\r\n".encode()


def encode_uri_component(value: Any) -> str:
    """Percent-encode a single path segment."""
    return quote(str(value), safe="-_.!~*'()")


__all__ = [
    "FileUpload",
    "ScalarField",
    "ArrayField",
    "FileField",
    "Field",
    "classify",
    "encode_scalar",
    "encode_query",
    "encode_body",
    "build_url",
    "iter_multipart",
    "encode_uri_component",
]
