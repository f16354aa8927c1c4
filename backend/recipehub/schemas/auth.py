# recipehub/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request/response models for registration, login, token refresh and logout.
"""
from pydantic import BaseModel, Field


class RegisterIn(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=256)
    password: str = Field(min_length=1)
    preferences: list[str] = []


class LoginIn(BaseModel):
    email: str
    password: str  # Plain text, verified against the stored hash


class RefreshIn(BaseModel):
    refreshToken: str


class LogoutIn(BaseModel):
    refreshToken: str


class TokenPairOut(BaseModel):
    """Returned by register and login."""
    accessToken: str
    refreshToken: str


class AccessTokenOut(BaseModel):
    accessToken: str


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    preferences: list[str] = []
