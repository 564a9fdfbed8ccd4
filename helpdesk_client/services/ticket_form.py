"""Ticket submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core.exceptions import HelpdeskClientException
from helpdesk_client.models.enums import (
    ACCOMMODATION_LOCATIONS,
    STAFF_LOCATIONS,
    SUB_CATEGORIES,
    TicketCategory,
)
from helpdesk_client.schemas.ticket import Ticket, TicketCreate
from helpdesk_client.services.notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    ok: bool
    error: str | None = None
    ticket: Ticket | None = None


def location_options(category: TicketCategory | str) -> tuple[str, ...]:
    if TicketCategory(category) == TicketCategory.accommodation:
        return ACCOMMODATION_LOCATIONS
    return STAFF_LOCATIONS


def sub_category_options(category: TicketCategory | str) -> tuple[str, ...]:
    return SUB_CATEGORIES[TicketCategory(category)]


def _describe_validation_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid ticket details"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "form"
    return f"{field}: {first.get('msg', 'invalid value')}"


def submit_ticket(client: HelpdeskApiClient, notifier: Notifier, **fields: Any) -> SubmitResult:
    try:
        form = TicketCreate(**fields)
    except ValidationError as exc:
        message = _describe_validation_error(exc)
        notifier.error(message)
        return SubmitResult(ok=False, error=message)

    try:
        created = client.create_ticket(form)
    except HelpdeskClientException as exc:
        message = exc.message or "Failed to create ticket"
        notifier.error(message)
        return SubmitResult(ok=False, error=message)

    ticket = created if isinstance(created, Ticket) else None
    logger.info("Ticket submitted: %s", ticket.id if ticket else form.title)
    notifier.success("Ticket submitted")
    return SubmitResult(ok=True, ticket=ticket)
