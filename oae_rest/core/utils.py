"""Utility functions shared by the API modules and the CLI."""

from __future__ import annotations

import json
import sys
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Tuple

from tqdm import tqdm

from .config import DEFAULT_PAGE_LIMIT, build_context, build_executor, load_config
from .context import RequestContext
from .errors import ConfigurationError, ParseError, RequestError, TransportError
from .http import RequestExecutor, RestResult

__all__ = [
    "PagingError",
    "fetch_all_pages",
    "get_context_and_executor",
    "unwrap",
    "format_rows",
    "print_json",
]


class PagingError(Exception):
    """A page request failed while walking a listing."""

    def __init__(self, result: RestResult) -> None:
        super().__init__(str(result.error))
        self.result = result


def fetch_all_pages(
    fetch_page: Callable[[Any, int], "Future[RestResult]"],
    *,
    limit: int = DEFAULT_PAGE_LIMIT,
    desc: str | None = "Loading",
) -> List[Any]:
    """Follow ``nextToken`` through a paged listing and return all results.

    Pages are requested one after another because each page's ``start``
    comes from the previous response.  ``fetch_page(start, limit)`` returns
    the future of one listing call, for example
    ``lambda start, limit: folders.get_folders_library(ex, ctx, pid, start, limit)``.
    A failed page raises :class:`PagingError` carrying that page's result.
    """
    results: List[Any] = []
    start = None
    with tqdm(total=None, unit="pg", desc=desc, disable=desc is None) as bar:
        while True:
            page = fetch_page(start, limit).result()
            if page.error is not None:
                raise PagingError(page)
            body = page.body if isinstance(page.body, dict) else {}
            items = body.get("results") or []
            results.extend(items)
            bar.update(1)
            start = body.get("nextToken")
            if not start or not items:
                break
    return results


def get_context_and_executor() -> Tuple[RequestContext, RequestExecutor]:
    """Return the configured context and executor or exit if misconfigured."""
    cfg = load_config()
    try:
        return build_context(cfg), build_executor(cfg)
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        sys.exit(2)


def unwrap(result: RestResult) -> Any:
    """Return the body of a successful result, otherwise report and exit."""
    if result.error is not None:
        _handle_error(result.error)
    return result.body


def _handle_error(err: BaseException) -> None:
    if isinstance(err, RequestError):
        if err.status_code == 401:
            print(f"Authentication failed: {err.server_message}", file=sys.stderr)
        elif err.status_code == 403:
            print(f"Forbidden: {err.server_message} (do you manage this item?)", file=sys.stderr)
        else:
            print(f"[HTTP {err.status_code}] {err.server_message}", file=sys.stderr)
    elif isinstance(err, TransportError):
        print(str(err), file=sys.stderr)
    elif isinstance(err, ParseError):
        print(f"Unexpected response: {err}", file=sys.stderr)
    else:
        print(f"Request failed: {err}", file=sys.stderr)
    sys.exit(2)


def format_rows(rows: List[Dict[str, Any]], fields: List[str]) -> None:
    if not rows:
        print("(no data)")
        return
    widths = [max(len(str(r.get(f, ""))) for r in rows + [dict(zip(fields, fields))]) for f in fields]
    header = " | ".join(f.ljust(w) for f, w in zip(fields, widths))
    sep = "-+-".join("-" * w for w in widths)
    print(header)
    print(sep)
    for r in rows:
        print(" | ".join(str(r.get(f, "")).ljust(w) for f, w in zip(fields, widths)))


def print_json(data: Any) -> None:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")
    if isinstance(data, str):
        print(data)
        return
    print(json.dumps(data, ensure_ascii=False, indent=2))
