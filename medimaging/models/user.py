"""
User-related models for the MedImaging application.

This module provides models for users, login payloads and token claims.
"""

from pydantic import Field

from .base import BaseModel


class UserBase(BaseModel):
    """Public user attributes."""

    id: int
    username: str
    email: str
    role: str
    first_name: str
    last_name: str


class User(UserBase):
    """User as stored in the user table, including the password hash."""

    hashed_password: str


class UserRead(UserBase):
    """Pydantic model for reading user data without sensitive fields."""

    pass


class UserSeed(UserBase):
    """Seed entry with a plaintext password, hashed when the table is built."""

    password: str


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint."""

    username: str = Field(min_length=1, description="Username is required")
    password: str = Field(min_length=3, description="Password must be at least 3 characters")


class TokenClaims(BaseModel):
    """Claims embedded in a session token."""

    id: int
    username: str
    role: str
    exp: int | None = None


class LoginResponse(BaseModel):
    """Successful login payload."""

    user: UserRead
    token: str
    expires_in: str
