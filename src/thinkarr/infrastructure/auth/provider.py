"""Abstract authentication provider interface.

Login (Plex OAuth) happens elsewhere and leaves a row in the ``sessions``
table; providers only turn a presented token back into a user.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthUser:
    """Authenticated user as seen by the API layer."""

    id: int
    username: str
    is_admin: bool = False


class AuthProvider(ABC):
    """Abstract authentication provider.

    Implementations:
    - SessionAuthProvider: opaque session tokens stored in the database
    - DevAuthProvider: fixed local admin for development
    """

    @abstractmethod
    async def verify_token(self, token: str) -> AuthUser:
        """Verify a session token and return the authenticated user.

        Raises:
            AuthenticationError: If the token is unknown or expired
        """

    @abstractmethod
    async def get_user(self, user_id: int) -> AuthUser | None:
        """Get user by ID, None when it does not exist."""

    async def close(self) -> None:
        """Release provider resources."""
