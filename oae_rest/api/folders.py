"""Folder endpoints.

Listing functions accept ``start`` (the id to continue after, exclusive) and
``limit``.  Their responses hold ``results`` and a ``nextToken`` to pass as
``start`` for the following page.
"""

from __future__ import annotations

from ..core import encode_uri_component as enc


def get_folder(executor, rest_ctx, folder_id, *, callback=None):
    return executor.execute(rest_ctx, "GET", f"/api/folder/{enc(folder_id)}", None, callback)


def create_folder(executor, rest_ctx, display_name, description, visibility, managers, viewers, *, callback=None):
    params = {
        "displayName": display_name,
        "description": description,
        "visibility": visibility,
        "managers": managers,
        "viewers": viewers,
    }
    return executor.execute(rest_ctx, "POST", "/api/folder", params, callback)


def update_folder(executor, rest_ctx, folder_id, updates, *, callback=None):
    """Update a folder.

    ``updates`` may hold ``displayName``, ``description``, ``visibility`` and
    ``applyVisibilityOn`` (``folder`` or ``folderAndContent``).
    """
    return executor.execute(rest_ctx, "POST", f"/api/folder/{enc(folder_id)}", updates, callback)


def delete_folder(executor, rest_ctx, folder_id, *, callback=None):
    return executor.execute(rest_ctx, "DELETE", f"/api/folder/{enc(folder_id)}", None, callback)


def share_folder(executor, rest_ctx, folder_id, principal_ids, *, callback=None):
    path = f"/api/folder/{enc(folder_id)}/share"
    return executor.execute(rest_ctx, "POST", path, {"viewers": principal_ids}, callback)


def update_folder_members(executor, rest_ctx, folder_id, member_updates, *, callback=None):
    """Change member roles; map a principal id to ``False`` to remove it."""
    path = f"/api/folder/{enc(folder_id)}/members"
    return executor.execute(rest_ctx, "POST", path, member_updates, callback)


def get_folder_members(executor, rest_ctx, folder_id, start=None, limit=None, *, callback=None):
    path = f"/api/folder/{enc(folder_id)}/members"
    return executor.execute(rest_ctx, "GET", path, {"start": start, "limit": limit}, callback)


def get_folders_library(executor, rest_ctx, principal_id, start=None, limit=None, *, callback=None):
    path = f"/api/folder/library/{enc(principal_id)}"
    return executor.execute(rest_ctx, "GET", path, {"start": start, "limit": limit}, callback)


def get_managed_folders(executor, rest_ctx, *, callback=None):
    return executor.execute(rest_ctx, "GET", "/api/folder/managed", None, callback)


def remove_folder_from_library(executor, rest_ctx, principal_id, folder_id, *, callback=None):
    path = f"/api/folder/library/{enc(principal_id)}/{enc(folder_id)}"
    return executor.execute(rest_ctx, "DELETE", path, None, callback)


def add_content_items_to_folder(executor, rest_ctx, folder_id, content_ids, *, callback=None):
    path = f"/api/folder/{enc(folder_id)}/library"
    return executor.execute(rest_ctx, "POST", path, {"contentIds": content_ids}, callback)


def remove_content_items_from_folder(executor, rest_ctx, folder_id, content_ids, *, callback=None):
    # DELETE carries the ids in the query string
    path = f"/api/folder/{enc(folder_id)}/library"
    return executor.execute(rest_ctx, "DELETE", path, {"contentIds": content_ids}, callback)


def get_folder_content_library(executor, rest_ctx, folder_id, start=None, limit=None, *, callback=None):
    path = f"/api/folder/{enc(folder_id)}/library"
    return executor.execute(rest_ctx, "GET", path, {"start": start, "limit": limit}, callback)


__all__ = [
    "get_folder",
    "create_folder",
    "update_folder",
    "delete_folder",
    "share_folder",
    "update_folder_members",
    "get_folder_members",
    "get_folders_library",
    "get_managed_folders",
    "remove_folder_from_library",
    "add_content_items_to_folder",
    "remove_content_items_from_folder",
    "get_folder_content_library",
]
