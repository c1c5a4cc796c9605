"""
Local session-token authentication provider.

Session tokens are issued elsewhere (the login flow is not part of this
service); this provider only checks them.
"""

from __future__ import annotations

from jose import jwt

from llynx.core.config import Settings
from llynx.interfaces.auth_provider import IAuthProvider, User


class LocalAuthProvider(IAuthProvider):
    """Validates HS256 session tokens signed with the local secret."""

    def __init__(self, settings: Settings, leeway_seconds: int = 30):
        if not settings.LOCAL_JWT_SECRET:
            raise ValueError("LOCAL_JWT_SECRET must be set for local auth")
        self._secret = settings.LOCAL_JWT_SECRET
        self._issuer = settings.LOCAL_JWT_ISSUER or None
        self._leeway = leeway_seconds

    async def verify_token(self, token: str) -> User:
        """
        Decode and check a session token.

        Raises:
            JWTError: bad signature, wrong issuer, expired, or no subject
        """
        claims = jwt.decode(
            token,
            self._secret,
            algorithms=["HS256"],
            issuer=self._issuer,
            options={
                "verify_iss": self._issuer is not None,
                "require_exp": True,
                "require_sub": True,
                "leeway": self._leeway,
            },
        )
        email = claims.get("email") or None
        return User(
            id=str(claims["sub"]),
            email=email,
            display_name=claims.get("name") or email,
        )

    def is_enabled(self) -> bool:
        return True
