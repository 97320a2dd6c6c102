"""Folder commands."""

from __future__ import annotations

import sys
from functools import partial

from InquirerPy import inquirer

from ..api import folders
from ..core import (
    PagingError,
    fetch_all_pages,
    format_rows,
    get_context_and_executor,
    print_json,
    unwrap,
)
from .principals import resolve_principal


def _paged(listing, *args, desc: str):
    try:
        return fetch_all_pages(partial(listing, *args), desc=desc)
    except PagingError as e:
        unwrap(e.result)


def cmd_folders_get(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = folders.get_folder(executor, rest_ctx, args.folder).result()
    print_json(unwrap(result))


def cmd_folders_create(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = folders.create_folder(
            executor,
            rest_ctx,
            args.name,
            args.description,
            args.visibility,
            args.manager,
            args.viewer,
        ).result()
    data = unwrap(result)
    print(f"created {data.get('id') if isinstance(data, dict) else args.name}")


def cmd_folders_delete(args):
    if not args.yes:
        try:
            confirmed = inquirer.confirm(message=f"Delete folder {args.folder}?", default=False).execute()
        except KeyboardInterrupt:
            confirmed = False
        if not confirmed:
            print("Cancelled by user", file=sys.stderr)
            return 1
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = folders.delete_folder(executor, rest_ctx, args.folder).result()
    unwrap(result)
    print(f"deleted {args.folder}")


def cmd_folders_library(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        principal = resolve_principal(executor, rest_ctx, args.principal)
        rows = _paged(folders.get_folders_library, executor, rest_ctx, principal, desc="Fetch folders")
    format_rows(rows, ["id", "displayName", "visibility"])


def cmd_folders_managed(_args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = folders.get_managed_folders(executor, rest_ctx).result()
    data = unwrap(result)
    rows = data.get("results", []) if isinstance(data, dict) else data
    format_rows(rows or [], ["id", "displayName", "visibility"])


def cmd_folders_contents(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        rows = _paged(folders.get_folder_content_library, executor, rest_ctx, args.folder, desc="Fetch content")
    format_rows(rows, ["id", "displayName", "resourceSubType"])


def cmd_folders_add(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = folders.add_content_items_to_folder(executor, rest_ctx, args.folder, args.content_ids).result()
    unwrap(result)
    for content_id in args.content_ids:
        print(f"added {content_id}")


def cmd_folders_remove(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = folders.remove_content_items_from_folder(executor, rest_ctx, args.folder, args.content_ids).result()
    unwrap(result)
    for content_id in args.content_ids:
        print(f"removed {content_id}")
