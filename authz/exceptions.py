"""Exceptions raised by the authorization package.

Strategies report expected outcomes through their boolean return value;
exceptions are reserved for misconfiguration.
"""

from __future__ import annotations

from typing import Optional


class AuthorizationError(Exception):
    """Base error for authorization failures."""


class UnsupportedSigningMethod(AuthorizationError):
    """Raised when an OAuth1 signature method has no hash implementation."""

    def __init__(self, method: Optional[str]):
        super().__init__(f"Unsupported OAuth1 signature method: {method!r}")
        self.method = method


class ConfigurationError(AuthorizationError):
    """Raised when a credential configuration entry cannot be turned into a strategy."""
