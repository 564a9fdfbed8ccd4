"""Pydantic schemas for users, sessions and auth payloads."""

from __future__ import annotations

import unicodedata
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from helpdesk_client.core.sanitize import clean_email, clean_single_line
from helpdesk_client.models.enums import UserRole
from helpdesk_client.schemas.common import WireModel

MAX_NAME_LEN = 80


class User(WireModel):
    id: str = Field(alias="_id")
    name: str = ""
    email: str = ""
    role: UserRole


class Session(BaseModel):
    """Identity and role flags of the current viewer.

    The flags are display hints only; the API re-checks every request.
    """

    model_config = ConfigDict(frozen=True)

    identity: str
    name: str = ""
    email: str = ""
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "Session":
        return cls(identity=user.id, name=user.name, email=user.email, role=user.role)

    @property
    def is_admin(self) -> bool:
        return self.role in {UserRole.admin, UserRole.super_admin}

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.super_admin

    def has_role(self, role: UserRole | str) -> bool:
        return self.role == UserRole(role)


def _validate_password(value: str) -> str:
    if any(unicodedata.category(ch) == "Cc" for ch in value):
        raise ValueError("password_contains_control_chars")
    if not value.strip():
        raise ValueError("password_required")
    return value


class LoginData(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return clean_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _validate_password(value)


class RegisterData(LoginData):
    name: str = Field(min_length=2, max_length=MAX_NAME_LEN)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return clean_single_line(value)


class UsersResponse(WireModel):
    users: list[User] = Field(default_factory=list)

    @field_validator("users", mode="before")
    @classmethod
    def require_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []


class PromotedUser(WireModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    email: str = ""
    role: UserRole


class PromoteRoleResponse(WireModel):
    message: str = ""
    user: PromotedUser | None = None


class LoginResponse(WireModel):
    message: str = ""
    token: str | None = None
