# recipehub/core/tokens.py
"""
Access-token validation shared by the HTTP auth dependency and the WebSocket gateway.
"""
from dataclasses import dataclass, field

import jwt  # PyJWT

from recipehub.core.errors import AuthenticationFailure
from recipehub.core.revocation import RevocationStore
from recipehub.core.security import decode_access_token


@dataclass(frozen=True)
class VerifiedToken:
    """An access token whose signature, expiry, identity and revocation status were checked."""
    token: str
    user_id: str
    exp: int
    claims: dict = field(default_factory=dict, compare=False)


class TokenValidator:
    """
    Verify a signed access token, then consult the revocation store.

    The signature is checked first so that garbage tokens never cost a
    round-trip to Redis.
    """

    def __init__(self, revocation: RevocationStore):
        self.revocation = revocation

    async def validate(self, token: str | None) -> VerifiedToken:
        """
        Args:
            token: Raw bearer token (may be None or empty)

        Returns:
            VerifiedToken for the token's user

        Raises:
            AuthenticationFailure: missing / invalid / expired / revoked token,
                a token without a "sub" claim, or one issued before the
                user's last "log out from all devices"
        """
        if not token:
            raise AuthenticationFailure("Missing token", code="AUTH_REQUIRED")
        try:
            claims = decode_access_token(token)
        except jwt.PyJWTError:
            raise AuthenticationFailure("Invalid or expired token", code="AUTH_INVALID_TOKEN")

        user_id = claims.get("sub")
        if user_id is None or str(user_id).strip() == "":
            raise AuthenticationFailure("Token missing user identity", code="AUTH_INVALID_TOKEN")

        if await self.revocation.is_revoked(token):
            raise AuthenticationFailure("Token has been revoked", code="AUTH_TOKEN_REVOKED")
        cutoff = await self.revocation.user_revoked_before(user_id)
        if cutoff is not None and float(claims.get("iat") or 0) < cutoff:
            # Issued before the user logged out from all devices
            raise AuthenticationFailure("Token has been revoked", code="AUTH_TOKEN_REVOKED")

        return VerifiedToken(token=token, user_id=str(user_id), exp=int(claims["exp"]), claims=claims)
