# recipehub/api/v1/routers/auth.py
import datetime as dt
import logging

import jwt  # PyJWT
from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from tortoise.transactions import in_transaction

from recipehub.api.v1.deps import bearer_token, get_access_token, get_current_user, get_notifier, get_revocation
from recipehub.core.revocation import RevocationStore
from recipehub.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    refresh_token_expiry,
    verify_password,
)
from recipehub.core.tokens import VerifiedToken
from recipehub.models.user import Session, User
from recipehub.realtime.notifier import Notifier
from recipehub.schemas.auth import AccessTokenOut, LoginIn, LogoutIn, RefreshIn, RegisterIn, TokenPairOut, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("uvicorn.error")


def _user_out(user: User) -> dict:
    return UserOut(id=user.id, name=user.name, email=user.email, preferences=user.preferences or []).model_dump()


async def _open_session(user: User) -> dict:
    """Issue a token pair and persist the refresh token as a new device session."""
    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)
    await Session.create(user=user, refresh_token=refresh_token, expires_at=refresh_token_expiry())
    return TokenPairOut(accessToken=access_token, refreshToken=refresh_token).model_dump()


@router.post("/register")
async def register(body: RegisterIn, response: Response):
    """
    Register a new user account and sign it in.

    Returns:
        dict: Success response with the token pair, or error response:
            - success: bool
            - data: dict with user, accessToken, refreshToken (if success)
            - error: dict with error code and message (if failure)

    Error codes:
        - EMAIL_EXISTS: Email already registered
    """
    email = body.email.strip().lower()
    if await User.get_or_none(email=email):
        return {"success": False, "error": {"code": "EMAIL_EXISTS", "message": "Email already in use"}}
    async with in_transaction():
        user = await User.create(
            name=body.name,
            email=email,
            password_hash=hash_password(body.password),
            preferences=body.preferences,
        )
        tokens = await _open_session(user)
    response.set_cookie("accessToken", tokens["accessToken"], httponly=True, secure=False, samesite="lax")
    return {"success": True, "data": {"user": _user_out(user), **tokens}}


@router.post("/login")
async def login(body: LoginIn, response: Response):
    """
    Authenticate with email and password.

    Every successful login opens a new session, so one account can stay signed
    in on several devices at once. The access token is also set as an HttpOnly
    cookie for browser-based clients.

    Raises:
        HTTPException (401): If credentials are invalid
    """
    user = await User.get_or_none(email=body.email.strip().lower())
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail={"code": "AUTH_INVALID_CREDENTIALS", "message": "Invalid credentials"})
    tokens = await _open_session(user)
    response.set_cookie("accessToken", tokens["accessToken"], httponly=True, secure=False, samesite="lax")
    return {"success": True, "data": {"user": _user_out(user), **tokens}}


@router.post("/refresh-token")
async def refresh_access_token(
    body: RefreshIn,
    response: Response,
    authorization: str | None = Header(default=None),
    revocation: RevocationStore = Depends(get_revocation),
):
    """
    Exchange a refresh token for a new access token.

    The refresh token must verify and still belong to an open session. When the
    previous access token is sent as a bearer header it is revoked for the rest
    of its lifetime, so only the new token keeps working.

    Raises:
        HTTPException (403): REFRESH_INVALID
    """
    try:
        claims = decode_refresh_token(body.refreshToken)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="REFRESH_INVALID")
    session = await Session.get_or_none(refresh_token=body.refreshToken)
    if not session or str(session.user_id) != claims.get("sub"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="REFRESH_INVALID")

    previous = bearer_token(authorization)
    if previous:
        try:
            old_claims = decode_access_token(previous)
        except jwt.PyJWTError:
            old_claims = None
        if old_claims and old_claims.get("sub") == claims.get("sub"):
            await revocation.revoke_until(previous, old_claims["exp"])

    access_token = create_access_token(session.user_id)
    response.set_cookie("accessToken", access_token, httponly=True, secure=False, samesite="lax")
    return {"success": True, "data": AccessTokenOut(accessToken=access_token).model_dump()}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Return the profile of the currently authenticated user."""
    return {"success": True, "data": _user_out(user)}


@router.post("/logout")
async def logout(
    body: LogoutIn,
    response: Response,
    user: User = Depends(get_current_user),
    verified: VerifiedToken = Depends(get_access_token),
    revocation: RevocationStore = Depends(get_revocation),
):
    """
    Log out the current device.

    Deletes the session holding the given refresh token and revokes the access
    token used for this request, effective immediately for HTTP and WebSocket.
    """
    await Session.filter(user=user, refresh_token=body.refreshToken).delete()
    await revocation.revoke_until(verified.token, verified.exp)
    response.delete_cookie("accessToken")
    return {"success": True, "data": {"message": "Logged out"}}


@router.post("/logout-all")
async def logout_all(
    response: Response,
    user: User = Depends(get_current_user),
    verified: VerifiedToken = Depends(get_access_token),
    revocation: RevocationStore = Depends(get_revocation),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Log out every device of the current user.

    All sessions are deleted and every access token issued to the user so far
    is revoked, so other devices can neither call the API nor re-open /ws.
    Every open WebSocket of the user then receives a force_logout frame before
    the response is returned (best effort).
    """
    deleted = await Session.filter(user=user).delete()
    await revocation.revoke_until(verified.token, verified.exp)
    await revocation.revoke_user_tokens(
        user.id, dt.datetime.now(dt.timezone.utc).timestamp(), ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    delivered = await notifier.force_logout(user.id, "Logged out from all devices")
    logger.info("[auth] user %s logged out everywhere: %d session(s), %d socket(s) notified",
                user.id, deleted, delivered)
    response.delete_cookie("accessToken")
    return {"success": True, "data": {"sessionsClosed": deleted, "socketsNotified": delivered}}
