"""Collection endpoints."""

from __future__ import annotations

from ..core import encode_uri_component as enc


def get_collection(executor, rest_ctx, collection_id, *, callback=None):
    return executor.execute(rest_ctx, "GET", f"/api/collection/{enc(collection_id)}", None, callback)


def create_collection(executor, rest_ctx, display_name, description, visibility, managers, viewers, *, callback=None):
    """Create a collection.

    ``managers`` and ``viewers`` are lists of principal ids; ``None`` leaves
    them out of the request.
    """
    params = {
        "displayName": display_name,
        "description": description,
        "visibility": visibility,
        "managers": managers,
        "viewers": viewers,
    }
    return executor.execute(rest_ctx, "POST", "/api/collection", params, callback)


def share_collection(executor, rest_ctx, collection_id, principal_ids, *, callback=None):
    path = f"/api/collection/{enc(collection_id)}/share"
    return executor.execute(rest_ctx, "POST", path, {"viewers": principal_ids}, callback)


def update_collection_members(executor, rest_ctx, collection_id, member_updates, *, callback=None):
    """Change member roles; map a principal id to ``False`` to remove it."""
    path = f"/api/collection/{enc(collection_id)}/members"
    return executor.execute(rest_ctx, "POST", path, member_updates, callback)


def get_collection_members(executor, rest_ctx, collection_id, start=None, limit=None, *, callback=None):
    path = f"/api/collection/{enc(collection_id)}/members"
    return executor.execute(rest_ctx, "GET", path, {"start": start, "limit": limit}, callback)


def get_collections_library(executor, rest_ctx, principal_id, start=None, limit=None, *, callback=None):
    path = f"/api/collection/library/{enc(principal_id)}"
    return executor.execute(rest_ctx, "GET", path, {"start": start, "limit": limit}, callback)


def add_content_items_to_collection(executor, rest_ctx, collection_id, content_ids, *, callback=None):
    path = f"/api/collection/{enc(collection_id)}/library"
    return executor.execute(rest_ctx, "POST", path, {"contentIds": content_ids}, callback)


def get_collection_content_library(executor, rest_ctx, collection_id, start=None, limit=None, *, callback=None):
    path = f"/api/collection/{enc(collection_id)}/library"
    return executor.execute(rest_ctx, "GET", path, {"start": start, "limit": limit}, callback)


__all__ = [
    "get_collection",
    "create_collection",
    "share_collection",
    "update_collection_members",
    "get_collection_members",
    "get_collections_library",
    "add_content_items_to_collection",
    "get_collection_content_library",
]
