"""Auth-related shared utilities."""

from .constants import AUTH_TOKEN_SCOPES, AuthTokenScope, BEARER_PREFIX

__all__ = [
    "AUTH_TOKEN_SCOPES",
    "AuthTokenScope",
    "BEARER_PREFIX",
]
