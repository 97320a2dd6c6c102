"""Helpers shared by the collection and folder commands."""

from __future__ import annotations

import sys
from typing import Any, Dict, List

from ..api import authentication
from ..core import unwrap


def resolve_principal(executor, rest_ctx, principal: str | None) -> str:
    """Return ``principal`` or, when omitted, the id of the current user."""
    if principal:
        return principal
    me = unwrap(authentication.get_me(executor, rest_ctx).result())
    if not isinstance(me, dict) or not me.get("id") or me.get("anon"):
        print("Not logged in; pass a principal id or run: oae auth set --username ...", file=sys.stderr)
        sys.exit(2)
    return me["id"]


def member_rows(members: List[Any]) -> List[Dict[str, Any]]:
    """Flatten ``{profile, role}`` member entries for :func:`format_rows`."""
    rows = []
    for m in members:
        profile = m.get("profile") or {}
        rows.append({
            "id": profile.get("id", ""),
            "displayName": profile.get("displayName", ""),
            "role": m.get("role", ""),
        })
    return rows
