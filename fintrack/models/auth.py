from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from .base import ApiModel, RequestModel


class RegisterPayload(RequestModel):
    email: EmailStr
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginPayload(RequestModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserProfile(ApiModel):
    """Public profile; never carries the password hash."""

    id: str
    email: str
    username: str


class ProfileDetail(UserProfile):
    created_at: datetime


class ProfileUpdatePayload(RequestModel):
    username: str = Field(..., min_length=1)


class ProfileUpdateResponse(ApiModel):
    id: str
    username: str


class LoginResponse(ApiModel):
    token: str
    user: UserProfile
