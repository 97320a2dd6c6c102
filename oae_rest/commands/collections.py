"""Collection commands."""

from __future__ import annotations

from functools import partial

from ..api import collections
from ..core import (
    PagingError,
    fetch_all_pages,
    format_rows,
    get_context_and_executor,
    print_json,
    unwrap,
)
from .principals import member_rows, resolve_principal


def cmd_collections_get(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = collections.get_collection(executor, rest_ctx, args.collection).result()
    print_json(unwrap(result))


def cmd_collections_create(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = collections.create_collection(
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


def cmd_collections_library(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        principal = resolve_principal(executor, rest_ctx, args.principal)
        try:
            rows = fetch_all_pages(
                partial(collections.get_collections_library, executor, rest_ctx, principal),
                desc="Fetch collections",
            )
        except PagingError as e:
            unwrap(e.result)
    format_rows(rows, ["id", "displayName", "visibility"])


def cmd_collections_members(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        try:
            members = fetch_all_pages(
                partial(collections.get_collection_members, executor, rest_ctx, args.collection),
                desc="Fetch members",
            )
        except PagingError as e:
            unwrap(e.result)
    format_rows(member_rows(members), ["id", "displayName", "role"])


def cmd_collections_add(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = collections.add_content_items_to_collection(
            executor, rest_ctx, args.collection, args.content_ids
        ).result()
    unwrap(result)
    for content_id in args.content_ids:
        print(f"added {content_id}")


def cmd_collections_share(args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = collections.share_collection(executor, rest_ctx, args.collection, args.principals).result()
    unwrap(result)
    print(f"shared {args.collection} with {len(args.principals)} principal(s)")
