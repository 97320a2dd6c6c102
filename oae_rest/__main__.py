"""Command line entry point for the oae CLI."""

from __future__ import annotations

import argparse
import logging
import sys

from oae_rest.core import CONFIG_PATH
from oae_rest.core.http import METHODS
from oae_rest.commands import (
    cmd_auth_set,
    cmd_auth_me,
    cmd_auth_logout,
    cmd_request,
    cmd_collections_get,
    cmd_collections_create,
    cmd_collections_library,
    cmd_collections_members,
    cmd_collections_add,
    cmd_collections_share,
    cmd_folders_get,
    cmd_folders_create,
    cmd_folders_delete,
    cmd_folders_library,
    cmd_folders_managed,
    cmd_folders_contents,
    cmd_folders_add,
    cmd_folders_remove,
)

VISIBILITIES = ["public", "loggedin", "private"]


def _add_create_args(p):
    p.add_argument("name", help="Display name")
    p.add_argument("--description")
    p.add_argument("--visibility", choices=VISIBILITIES)
    p.add_argument("--manager", action="append", help="Principal id of a manager (repeatable)")
    p.add_argument("--viewer", action="append", help="Principal id of a viewer (repeatable)")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="oae", description="OAE REST client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests to stderr")
    sub = parser.add_subparsers(dest="cmd")

    # auth
    p_auth = sub.add_parser("auth", help="Authentication")
    sub_auth = p_auth.add_subparsers(dest="auth_cmd")

    p_auth_set = sub_auth.add_parser("set", help=f"Save tenant host and credentials to {CONFIG_PATH.name}")
    p_auth_set.add_argument("--host", help="Tenant base URL, e.g. https://tenant.example.org")
    p_auth_set.add_argument("--username", help="Login id (password is prompted when omitted)")
    p_auth_set.add_argument("--password")
    p_auth_set.add_argument("--session", help="Existing session cookie, e.g. connect.sid=...")
    p_auth_set.set_defaults(func=cmd_auth_set)

    p_auth_me = sub_auth.add_parser("me", help="Show the current user")
    p_auth_me.set_defaults(func=cmd_auth_me)

    p_auth_logout = sub_auth.add_parser("logout", help="End the current session")
    p_auth_logout.set_defaults(func=cmd_auth_logout)

    # raw request
    p_req = sub.add_parser("request", help="Send an arbitrary API request")
    p_req.add_argument("method", type=str.upper, choices=METHODS)
    p_req.add_argument("path", help="Tenant relative path, e.g. /api/me")
    p_req.add_argument("params", nargs="*", metavar="key=value", help="Request parameters")
    p_req.add_argument("--file", action="append", metavar="key=path", help="Upload a file (repeatable)")
    p_req.set_defaults(func=cmd_request)

    # collections
    p_col = sub.add_parser("collections", help="Manage collections")
    sub_col = p_col.add_subparsers(dest="collections_cmd")

    p_col_get = sub_col.add_parser("get", help="Show a collection")
    p_col_get.add_argument("collection")
    p_col_get.set_defaults(func=cmd_collections_get)

    p_col_create = sub_col.add_parser("create", help="Create a collection")
    _add_create_args(p_col_create)
    p_col_create.set_defaults(func=cmd_collections_create)

    p_col_library = sub_col.add_parser("library", help="List the collections of a principal")
    p_col_library.add_argument("principal", nargs="?", help="Principal id (default: current user)")
    p_col_library.set_defaults(func=cmd_collections_library)

    p_col_members = sub_col.add_parser("members", help="List collection members")
    p_col_members.add_argument("collection")
    p_col_members.set_defaults(func=cmd_collections_members)

    p_col_add = sub_col.add_parser("add", help="Add content items to a collection")
    p_col_add.add_argument("collection")
    p_col_add.add_argument("content_ids", nargs="+")
    p_col_add.set_defaults(func=cmd_collections_add)

    p_col_share = sub_col.add_parser("share", help="Share a collection with principals")
    p_col_share.add_argument("collection")
    p_col_share.add_argument("principals", nargs="+")
    p_col_share.set_defaults(func=cmd_collections_share)

    # folders
    p_fold = sub.add_parser("folders", help="Manage folders")
    sub_fold = p_fold.add_subparsers(dest="folders_cmd")

    p_fold_get = sub_fold.add_parser("get", help="Show a folder")
    p_fold_get.add_argument("folder")
    p_fold_get.set_defaults(func=cmd_folders_get)

    p_fold_create = sub_fold.add_parser("create", help="Create a folder")
    _add_create_args(p_fold_create)
    p_fold_create.set_defaults(func=cmd_folders_create)

    p_fold_delete = sub_fold.add_parser("delete", help="Delete a folder")
    p_fold_delete.add_argument("folder")
    p_fold_delete.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p_fold_delete.set_defaults(func=cmd_folders_delete)

    p_fold_library = sub_fold.add_parser("library", help="List the folders of a principal")
    p_fold_library.add_argument("principal", nargs="?", help="Principal id (default: current user)")
    p_fold_library.set_defaults(func=cmd_folders_library)

    p_fold_managed = sub_fold.add_parser("managed", help="List folders the current user manages")
    p_fold_managed.set_defaults(func=cmd_folders_managed)

    p_fold_contents = sub_fold.add_parser("contents", help="List the content items of a folder")
    p_fold_contents.add_argument("folder")
    p_fold_contents.set_defaults(func=cmd_folders_contents)

    p_fold_add = sub_fold.add_parser("add", help="Add content items to a folder")
    p_fold_add.add_argument("folder")
    p_fold_add.add_argument("content_ids", nargs="+")
    p_fold_add.set_defaults(func=cmd_folders_add)

    p_fold_remove = sub_fold.add_parser("remove", help="Remove content items from a folder")
    p_fold_remove.add_argument("folder")
    p_fold_remove.add_argument("content_ids", nargs="+")
    p_fold_remove.set_defaults(func=cmd_folders_remove)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.cmd:
        parser.print_help()
        return 0
    if args.cmd == "auth" and not getattr(args, "auth_cmd", None):
        p_auth.print_help()
        return 0
    if args.cmd == "collections" and not getattr(args, "collections_cmd", None):
        p_col.print_help()
        return 0
    if args.cmd == "folders" and not getattr(args, "folders_cmd", None):
        p_fold.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
