"""
Mock authentication provider for local development.

Any non-empty token is accepted and used as the user ID, so a client can
act as a given user with `Authorization: Bearer <user id>`.
"""

from llynx.interfaces.auth_provider import IAuthProvider, User


class MockAuthProvider(IAuthProvider):
    """Mock auth provider: token == user ID."""

    def __init__(self, enabled: bool = True):
        """
        Args:
            enabled: When False every caller is a guest
        """
        self._enabled = enabled

    async def verify_token(self, token: str) -> User:
        user_id = token.strip()
        if not user_id:
            raise ValueError("Empty token")
        email = user_id if "@" in user_id else None
        return User(id=user_id, email=email, display_name=user_id)

    def is_enabled(self) -> bool:
        return self._enabled
