"""Pydantic schemas for tickets, comments and the ticket creation form."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator, model_validator

from helpdesk_client.core.sanitize import clean_email, clean_multiline, clean_single_line
from helpdesk_client.models.enums import (
    ACCOMMODATION_LOCATIONS,
    STAFF_LOCATIONS,
    SUB_CATEGORIES,
    Department,
    SenderType,
    TicketCategory,
    TicketStatus,
    UserRole,
)
from helpdesk_client.schemas.common import WireModel, parse_timestamp

MAX_TITLE_LEN = 200
MAX_DESCRIPTION_LEN = 4000
MAX_COMMENT_LEN = 4000


class CommentSender(WireModel):
    id: str | None = Field(default=None, alias="_id")
    name: str = ""
    email: str | None = None
    role: UserRole | None = None


class TicketComment(WireModel):
    id: str | None = Field(default=None, alias="_id")
    sender_type: SenderType | None = Field(
        default=None, validation_alias=AliasChoices("senderType", "sender_type")
    )
    sender: CommentSender | None = None
    message: str = ""
    created_at: dt.datetime | None = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    @field_validator("created_at", mode="before")
    @classmethod
    def normalize_created_at(cls, value: Any) -> dt.datetime | None:
        return parse_timestamp(value)


class CommentResponse(BaseModel):
    """Envelope for the comment endpoints.

    The API answers either ``{"comment": {...}}`` or the bare comment. A JSON
    object whose ``comment`` field is an object unwraps to that field; any
    other object is taken to be the comment itself.
    """

    comment: TicketComment

    @model_validator(mode="before")
    @classmethod
    def unwrap(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("comment_response_must_be_object")
        nested = data.get("comment")
        if isinstance(nested, dict):
            return {"comment": nested}
        return {"comment": data}


class AssignedUser(WireModel):
    id: str = Field(alias="_id")
    name: str = ""
    email: str | None = None
    role: UserRole | None = None


class Ticket(WireModel):
    id: str = Field(alias="_id")
    title: str = ""
    description: str = ""
    created_at: dt.datetime | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )
    updated_at: dt.datetime | None = Field(
        default=None, validation_alias=AliasChoices("updated_at", "updatedAt")
    )
    department: Department
    status: TicketStatus
    category: str | None = None
    sub_category: str | None = Field(
        default=None, validation_alias=AliasChoices("subCategory", "sub_category")
    )
    location: str | None = None
    full_name: str | None = Field(default=None, validation_alias=AliasChoices("fullName", "full_name"))
    email: str | None = None
    phone: str | None = None
    created_by: str | None = None
    assigned_to: AssignedUser | None = Field(
        default=None, validation_alias=AliasChoices("assignedTo", "assigned_to")
    )
    image: str | None = None
    comments: list[TicketComment] = Field(default_factory=list)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, value: Any) -> dt.datetime | None:
        return parse_timestamp(value)

    @field_validator("comments", mode="before")
    @classmethod
    def normalize_comments(cls, value: Any) -> Any:
        return value or []

    @property
    def assignee_id(self) -> str | None:
        return self.assigned_to.id if self.assigned_to else None

    def image_url(self, api_url: str) -> str:
        if not self.image:
            return ""
        return f"{api_url.rstrip('/')}/{self.image.lstrip('/')}"


class CommentCreate(BaseModel):
    message: str = Field(min_length=1, max_length=MAX_COMMENT_LEN)

    @field_validator("message", mode="before")
    @classmethod
    def normalize_message(cls, value: str) -> str:
        return clean_multiline(value)


class TicketCreate(BaseModel):
    """Ticket submission form.

    Accommodation tickets take their location and sub-category from the
    accommodation fields, every other category from the staff location and
    sub-category fields.
    """

    full_name: str = Field(min_length=2, max_length=120)
    email: EmailStr
    phone: str = Field(default="", max_length=32)
    staff_location: str = ""
    department: Department
    category: TicketCategory
    accommodation_location: str = ""
    accommodation_issue: str = ""
    sub_category: str = ""
    title: str = Field(min_length=3, max_length=MAX_TITLE_LEN)
    details: str = Field(min_length=5, max_length=MAX_DESCRIPTION_LEN)
    image_path: Path | None = None

    @field_validator(
        "full_name",
        "phone",
        "staff_location",
        "accommodation_location",
        "accommodation_issue",
        "sub_category",
        "title",
        mode="before",
    )
    @classmethod
    def normalize_single_line(cls, value: str | None) -> str:
        return clean_single_line(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return clean_email(value)

    @field_validator("details", mode="before")
    @classmethod
    def normalize_details(cls, value: str) -> str:
        return clean_multiline(value)

    @model_validator(mode="after")
    def check_category_fields(self) -> "TicketCreate":
        if self.is_accommodation:
            if self.accommodation_location and self.accommodation_location not in ACCOMMODATION_LOCATIONS:
                raise ValueError("unknown_accommodation_location")
        elif self.staff_location and self.staff_location not in STAFF_LOCATIONS:
            raise ValueError("unknown_staff_location")
        sub_category = self.resolved_sub_category
        if sub_category and sub_category not in SUB_CATEGORIES[self.category]:
            raise ValueError("unknown_sub_category")
        if self.image_path is not None and not self.image_path.is_file():
            raise ValueError("image_not_found")
        return self

    @property
    def is_accommodation(self) -> bool:
        return self.category == TicketCategory.accommodation

    @property
    def location(self) -> str:
        return self.accommodation_location if self.is_accommodation else self.staff_location

    @property
    def resolved_sub_category(self) -> str:
        return self.accommodation_issue if self.is_accommodation else self.sub_category

    def to_form_fields(self) -> dict[str, str]:
        return {
            "fullName": self.full_name,
            "email": str(self.email),
            "phone": self.phone,
            "location": self.location,
            "department": self.department.value,
            "category": self.category.value,
            "subCategory": self.resolved_sub_category,
            "title": self.title,
            "description": self.details,
        }
