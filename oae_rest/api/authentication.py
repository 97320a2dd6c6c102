"""Authentication endpoints."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..core import LOGIN_PATH, LOGOUT_PATH, encode_uri_component as enc


def login(executor, rest_ctx, username: str, password: str, *, callback=None):
    """Log a user in.

    ``rest_ctx`` should be anonymous; this only posts the credentials and
    does not adopt the returned session into the context.
    """
    return executor.execute(rest_ctx, "POST", LOGIN_PATH, {"username": username, "password": password}, callback)


def logout(executor, rest_ctx, *, callback=None):
    return executor.execute(rest_ctx, "POST", LOGOUT_PATH, None, callback)


def get_me(executor, rest_ctx, *, callback=None):
    """Return the profile of the user the context is acting as."""
    return executor.execute(rest_ctx, "GET", "/api/me", None, callback)


def _admin_params(username: str, password: str, display_name: str, opts: Mapping[str, Any] | None) -> Dict[str, Any]:
    params = dict(opts or {})
    params.update({"username": username, "password": password, "displayName": display_name})
    return params


def create_global_admin_user(executor, rest_ctx, username, password, display_name, opts=None, *, callback=None):
    """Create a global administrator with local credentials.

    ``rest_ctx`` must be a global administrator on the global admin tenant.
    ``opts`` holds optional profile fields.
    """
    params = _admin_params(username, password, display_name, opts)
    return executor.execute(rest_ctx, "POST", "/api/auth/createGlobalAdminUser", params, callback)


def create_tenant_admin_user(executor, rest_ctx, username, password, display_name, opts=None, *, callback=None):
    """Create a tenant administrator on the tenant of ``rest_ctx``."""
    return _create_tenant_admin_user(executor, rest_ctx, None, username, password, display_name, opts, callback)


def create_tenant_admin_user_on_tenant(
    executor, rest_ctx, tenant_alias, username, password, display_name, opts=None, *, callback=None
):
    """Create a tenant administrator on ``tenant_alias`` (global admins only)."""
    return _create_tenant_admin_user(executor, rest_ctx, tenant_alias, username, password, display_name, opts, callback)


def _create_tenant_admin_user(executor, rest_ctx, tenant_alias, username, password, display_name, opts, callback):
    params = _admin_params(username, password, display_name, opts)
    if tenant_alias:
        path = f"/api/auth/{enc(tenant_alias)}/createTenantAdminUser"
    else:
        path = "/api/auth/createTenantAdminUser"
    return executor.execute(rest_ctx, "POST", path, params, callback)


def change_password(executor, rest_ctx, user_id, old_password, new_password, *, callback=None):
    params = {"oldPassword": old_password, "newPassword": new_password}
    return executor.execute(rest_ctx, "POST", f"/api/user/{enc(user_id)}/password", params, callback)


def exists(executor, rest_ctx, username, *, callback=None):
    """Check whether a login id exists on the current tenant.

    ``username`` is the login id (e.g. ``nm417``), not the user id.
    """
    return executor.execute(rest_ctx, "GET", f"/api/auth/exists/{enc(username)}", None, callback)


def exists_on_tenant(executor, rest_ctx, tenant_alias, username, *, callback=None):
    path = f"/api/auth/{enc(tenant_alias)}/exists/{enc(username)}"
    return executor.execute(rest_ctx, "GET", path, None, callback)


# --- external authentication strategies ---


def _redirect(strategy: str):
    def redirect(executor, rest_ctx, *, callback=None):
        return executor.execute(rest_ctx, "POST", f"/api/auth/{strategy}", None, callback)

    redirect.__name__ = f"{strategy}_redirect"
    redirect.__doc__ = f"Start the {strategy} authentication flow."
    return redirect


def _callback(strategy: str):
    def strategy_callback(executor, rest_ctx, params: Mapping[str, Any] | None = None, *, callback=None):
        return executor.execute(rest_ctx, "GET", f"/api/auth/{strategy}/callback", params, callback)

    strategy_callback.__name__ = f"{strategy}_callback"
    strategy_callback.__doc__ = f"Hit the {strategy} callback endpoint with the given OAuth/CAS parameters."
    return strategy_callback


twitter_redirect = _redirect("twitter")
twitter_callback = _callback("twitter")
facebook_redirect = _redirect("facebook")
facebook_callback = _callback("facebook")
google_redirect = _redirect("google")
google_callback = _callback("google")
cas_redirect = _redirect("cas")
cas_callback = _callback("cas")


def ldap_login(executor, rest_ctx, username: str, password: str, *, callback=None):
    return executor.execute(rest_ctx, "POST", "/api/auth/ldap", {"username": username, "password": password}, callback)


__all__ = [
    "login",
    "logout",
    "get_me",
    "create_global_admin_user",
    "create_tenant_admin_user",
    "create_tenant_admin_user_on_tenant",
    "change_password",
    "exists",
    "exists_on_tenant",
    "twitter_redirect",
    "twitter_callback",
    "facebook_redirect",
    "facebook_callback",
    "google_redirect",
    "google_callback",
    "cas_redirect",
    "cas_callback",
    "ldap_login",
]
