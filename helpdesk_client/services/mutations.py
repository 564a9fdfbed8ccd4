"""Apply server-confirmed ticket changes to a cached ticket list."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from helpdesk_client.models.enums import TicketStatus
from helpdesk_client.schemas.ticket import AssignedUser, Ticket


def _patch(tickets: Sequence[Ticket], ticket_id: str, update: dict[str, Any]) -> list[Ticket]:
    return [ticket.model_copy(update=update) if ticket.id == ticket_id else ticket for ticket in tickets]


def apply_status_change(tickets: Sequence[Ticket], ticket_id: str, status: TicketStatus | str) -> list[Ticket]:
    return _patch(tickets, ticket_id, {"status": TicketStatus(status)})


def apply_assignment(tickets: Sequence[Ticket], ticket_id: str, assignee: AssignedUser | None) -> list[Ticket]:
    return _patch(tickets, ticket_id, {"assigned_to": assignee})
