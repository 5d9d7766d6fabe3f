"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    model_config = ConfigDict(validate_default=True)

    username: str = ""
    email: str = ""
    password: str = ""

    @field_validator("username")
    @classmethod
    def _username_length(cls, value: str) -> str:
        value = value.strip()
        if not 3 <= len(value) <= 50:
            raise ValueError("Username must be between 3 and 50 characters.")
        return value

    @field_validator("email")
    @classmethod
    def _email_format(cls, value: str) -> str:
        value = value.strip()
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError("A valid email address is required.") from exc
        return value

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters long.")
        return value


class LoginRequest(BaseModel):
    model_config = ConfigDict(validate_default=True, populate_by_name=True)

    username_or_email: str = Field(default="", alias="usernameOrEmail")
    password: str = ""

    @field_validator("username_or_email")
    @classmethod
    def _identifier_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username or email is required.")
        return value

    @field_validator("password")
    @classmethod
    def _password_present(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required.")
        return value


class UserResponse(BaseModel):
    uid: int
    username: str
    email: str
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse
    token: str
