"""Implementation of the generic ``oae request`` command."""

from __future__ import annotations

import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Dict, List

from ..core import FileUpload, get_context_and_executor, print_json, unwrap


def parse_pairs(pairs: List[str]) -> Dict[str, Any]:
    """Turn ``key=value`` arguments into a parameter mapping.

    A key given more than once becomes a list, in the order given.
    """
    params: Dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            print(f"Expected key=value, got: {pair}", file=sys.stderr)
            sys.exit(2)
        if key in params:
            existing = params[key]
            params[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            params[key] = value
    return params


def cmd_request(args):
    params = parse_pairs(args.params)
    rest_ctx, executor = get_context_and_executor()
    with ExitStack() as stack:
        for spec in args.file or []:
            key, sep, filename = spec.partition("=")
            path = Path(filename)
            if not sep or not path.is_file():
                print(f"Expected key=path to an existing file, got: {spec}", file=sys.stderr)
                sys.exit(2)
            params[key] = FileUpload(path.name, stack.enter_context(path.open("rb")))
        stack.enter_context(executor)
        result = executor.execute(rest_ctx, args.method, args.path, params).result()
    print_json(unwrap(result))
