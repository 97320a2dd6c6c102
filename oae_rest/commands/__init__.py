"""Command handlers for the oae CLI."""

from .auth import cmd_auth_set, cmd_auth_me, cmd_auth_logout
from .request import cmd_request
from .collections import (
    cmd_collections_get,
    cmd_collections_create,
    cmd_collections_library,
    cmd_collections_members,
    cmd_collections_add,
    cmd_collections_share,
)
from .folders import (
    cmd_folders_get,
    cmd_folders_create,
    cmd_folders_delete,
    cmd_folders_library,
    cmd_folders_managed,
    cmd_folders_contents,
    cmd_folders_add,
    cmd_folders_remove,
)

__all__ = [
    "cmd_auth_set",
    "cmd_auth_me",
    "cmd_auth_logout",
    "cmd_request",
    "cmd_collections_get",
    "cmd_collections_create",
    "cmd_collections_library",
    "cmd_collections_members",
    "cmd_collections_add",
    "cmd_collections_share",
    "cmd_folders_get",
    "cmd_folders_create",
    "cmd_folders_delete",
    "cmd_folders_library",
    "cmd_folders_managed",
    "cmd_folders_contents",
    "cmd_folders_add",
    "cmd_folders_remove",
]
