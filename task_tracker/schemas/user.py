import re
from typing import Optional
import uuid

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .base import APIModel, UTCDateTime
from ..models.user import USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH, PASSWORD_MIN_LENGTH

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid email")
    return value


class UserCreate(APIModel):
    username: str = Field(min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH)
    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class UserLogin(APIModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        # Lookup only; the shape is not re-validated so any miss is "Invalid credentials"
        return v.strip().lower()


class UserRead(APIModel):
    id: uuid.UUID = Field(validation_alias=AliasChoices("id", "_id"), serialization_alias="_id")
    username: str
    email: str
    created_at: UTCDateTime


class AuthData(APIModel):
    user: UserRead
    token: str


class AuthResponse(APIModel):
    status: str = "success"
    message: str
    data: AuthData


class LoginResponse(APIModel):
    status: str = "success"
    data: AuthData


class UserData(APIModel):
    user: UserRead


class UserResponse(APIModel):
    status: str = "success"
    data: UserData


class Identity(BaseModel):
    """The authenticated caller, as proven by a verified bearer token."""

    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
