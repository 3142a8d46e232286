"""
Authentication request/response schemas.
Pydantic models for sign-up, sign-in, magic links, and token management.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRegisterRequest(BaseModel):
    """Request schema for user registration."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="User password (min 6 characters)")
    full_name: str = Field(..., min_length=1, max_length=255, description="Display name")

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name is required")
        return v


class UserLoginRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class MagicLinkRequest(BaseModel):
    """Request schema for a passwordless sign-in link."""

    email: EmailStr = Field(..., description="Address the link is sent to")


class MagicLinkVerifyRequest(BaseModel):
    """Request schema for exchanging a magic link token for a session."""

    token: str = Field(..., min_length=1, description="Token from the magic link")


class MagicLinkResponse(BaseModel):
    message: str = Field(default="Check your email! We've sent you a magic link to sign in.")


class UserResponse(BaseModel):
    """Safe user response schema (no password or sensitive data)."""

    id: UUID = Field(..., description="User unique identifier")
    email: str = Field(..., description="User email address")
    full_name: Optional[str] = Field(None, description="Display name")
    created_at: datetime = Field(..., description="Account creation timestamp")
    is_active: bool = Field(..., description="Whether account is active")
    last_login: Optional[datetime] = Field(None, description="Last login timestamp")
    roles: List[str] = Field(default_factory=list, description="Roles held by the user")


class TokenResponse(BaseModel):
    """Response schema for token issuance."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: Optional[str] = Field(None, description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    user: Optional[UserResponse] = Field(None, description="User information")


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: dict = Field(..., description="Error message, type, and details")
