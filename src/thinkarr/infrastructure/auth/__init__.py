"""Authentication infrastructure."""

from thinkarr.infrastructure.auth.dev import DevAuthProvider
from thinkarr.infrastructure.auth.provider import AuthProvider, AuthUser
from thinkarr.infrastructure.auth.session import SessionAuthProvider

__all__ = [
    "AuthProvider",
    "AuthUser",
    "DevAuthProvider",
    "SessionAuthProvider",
]
