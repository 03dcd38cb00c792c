"""Centralized constants for authentication flows."""

from __future__ import annotations

from typing import FrozenSet, Literal

AuthTokenScope = Literal["access"]

AUTH_TOKEN_SCOPES: FrozenSet[AuthTokenScope] = frozenset(["access"])
BEARER_PREFIX = "bearer "

__all__ = [
    "AUTH_TOKEN_SCOPES",
    "AuthTokenScope",
    "BEARER_PREFIX",
]
