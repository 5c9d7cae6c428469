"""
Authentication schemas for request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.core.enums import UserRole

from .base import CamelModel


class RegisterRequest(CamelModel):
    """Schema for user registration."""
    name: str = Field(min_length=1)
    email: EmailStr
    password: str
    employee_id: str = Field(min_length=1)
    department: str = Field(min_length=1)
    role: UserRole = UserRole.FACULTY
    institute: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


class LoginRequest(CamelModel):
    """Schema for login request."""
    email: EmailStr
    password: str


class UserRead(CamelModel):
    """Schema for user response."""
    id: int
    name: str
    email: str
    employee_id: str
    department: str
    role: UserRole
    institute: Optional[str] = None
    created_at: datetime


class Token(CamelModel):
    """Schema for token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthResult(CamelModel):
    token: Token
    user: UserRead
