"""Authentication related commands."""

from __future__ import annotations

import sys

from InquirerPy import inquirer

from ..api import authentication
from ..core import get_context_and_executor, print_json, save_config, unwrap


def _execute(prompt):
    """Execute a prompt and handle ``Ctrl-C`` gracefully."""
    try:
        return prompt.execute()
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        sys.exit(1)


def cmd_auth_set(args):
    password = args.password
    if args.username and password is None and not args.session:
        password = _execute(inquirer.secret(message=f"Password for {args.username}:"))
    path = save_config(args.host, args.username, password, args.session)
    print(f"Saved config to {path}")


def cmd_auth_me(_args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = authentication.get_me(executor, rest_ctx).result()
    print_json(unwrap(result))


def cmd_auth_logout(_args):
    rest_ctx, executor = get_context_and_executor()
    with executor:
        result = authentication.logout(executor, rest_ctx).result()
    unwrap(result)
    print("Logged out")
