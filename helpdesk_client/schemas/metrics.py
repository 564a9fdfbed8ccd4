"""Dashboard metrics as returned by ``GET /metrics``."""

from __future__ import annotations

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from helpdesk_client.schemas.common import WireModel


class CamelModel(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class GroupCount(CamelModel):
    key: str = Field(default="", alias="_id")
    count: int = 0


class TicketCommentCount(CamelModel):
    ticket_id: str = Field(default="", alias="_id")
    total_comments: int = 0


class TicketMetrics(CamelModel):
    total_tickets: int = 0
    open_tickets: int = 0
    in_progress_tickets: int = 0
    resolved_tickets: int = 0
    closed_tickets: int = 0
    tickets_with_comments: list[TicketCommentCount] = Field(default_factory=list)
    tickets_by_department: list[GroupCount] = Field(default_factory=list)
    tickets_by_category: list[GroupCount] = Field(default_factory=list)


class UserMetrics(CamelModel):
    total_users: int = 0
    total_admins: int = 0
    total_super_admins: int = 0


class DashboardMetrics(CamelModel):
    tickets: TicketMetrics
    users: UserMetrics
