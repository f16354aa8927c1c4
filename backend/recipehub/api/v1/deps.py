# recipehub/api/v1/deps.py
from fastapi import Depends, Header, HTTPException, Request, status

from recipehub.core.errors import AuthenticationFailure
from recipehub.core.revocation import RevocationStore
from recipehub.core.tokens import TokenValidator, VerifiedToken
from recipehub.models.user import User
from recipehub.realtime.notifier import Notifier


def get_validator(request: Request) -> TokenValidator:
    return request.app.state.validator


def get_revocation(request: Request) -> RevocationStore:
    return request.app.state.revocation


def get_notifier(request: Request) -> Notifier:
    return request.app.state.realtime.notifier


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an "Authorization: Bearer xxx" header value."""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


async def get_access_token(
    request: Request,
    authorization: str | None = Header(default=None),
    validator: TokenValidator = Depends(get_validator),
) -> VerifiedToken:
    """
    FastAPI dependency returning the caller's verified access token.

    The token is taken from:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    Raises:
        HTTPException (401): AUTH_REQUIRED, AUTH_INVALID_TOKEN or AUTH_TOKEN_REVOKED
    """
    token = bearer_token(authorization) or request.cookies.get("accessToken")
    try:
        return await validator.validate(token)
    except AuthenticationFailure as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.code)


async def get_current_user(verified: VerifiedToken = Depends(get_access_token)) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Raises:
        HTTPException (401): If the token is rejected (see get_access_token)
        HTTPException (401): If user not found in database (AUTH_USER_NOT_FOUND)

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    user = None
    if verified.user_id.isdigit():
        user = await User.get_or_none(id=int(verified.user_id))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_USER_NOT_FOUND")
    return user
