"""Endpoint bindings over :class:`~oae_rest.core.RequestExecutor`.

Every function takes the executor and a request context first and returns
the executor's future.
"""

from . import authentication, collections, folders

__all__ = ["authentication", "collections", "folders"]
