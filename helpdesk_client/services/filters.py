"""Ticket list filters: date range, department and status."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from helpdesk_client.schemas.common import parse_timestamp
from helpdesk_client.schemas.ticket import Ticket

ALL = "all"
NO_DATE = "—"


def to_iso_date(value: Any) -> str:
    """UTC calendar date as ``YYYY-MM-DD``, or ``NO_DATE`` when unusable."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return NO_DATE
    return parsed.date().isoformat()


def parse_date_bound(value: str | dt.date) -> dt.date:
    """Read a ``YYYY-MM-DD`` bound; zero padding is optional."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def _normalize_bound(value: str | dt.date | None) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""
    return parse_date_bound(value).isoformat()


@dataclass
class TicketFilters:
    start_date: str = ""
    end_date: str = ""
    department: str = ALL
    status: str = ALL

    def __post_init__(self) -> None:
        self.start_date = _normalize_bound(self.start_date)
        self.end_date = _normalize_bound(self.end_date)
        self.department = self.department or ALL
        self.status = self.status or ALL

    @property
    def has_date_bound(self) -> bool:
        return bool(self.start_date or self.end_date)


def matches_date(ticket: Ticket, filters: TicketFilters) -> bool:
    if not filters.has_date_bound:
        return True
    iso = to_iso_date(ticket.created_at)
    if iso == NO_DATE:
        return False
    if filters.start_date and iso < filters.start_date:
        return False
    if filters.end_date and iso > filters.end_date:
        return False
    return True


def matches_department(ticket: Ticket, filters: TicketFilters) -> bool:
    return filters.department == ALL or ticket.department.value == filters.department


def matches_status(ticket: Ticket, filters: TicketFilters) -> bool:
    return filters.status == ALL or ticket.status.value == filters.status


def matches(ticket: Ticket, filters: TicketFilters) -> bool:
    return (
        matches_date(ticket, filters)
        and matches_department(ticket, filters)
        and matches_status(ticket, filters)
    )


def apply_filters(tickets: Iterable[Ticket], filters: TicketFilters) -> list[Ticket]:
    return [ticket for ticket in tickets if matches(ticket, filters)]


def distinct_values(tickets: Iterable[Ticket], attribute: str) -> list[str]:
    """Distinct non-empty values of ``attribute`` in first-seen order."""
    seen: dict[str, None] = {}
    for ticket in tickets:
        value = getattr(ticket, attribute, None)
        text = getattr(value, "value", value)
        if text:
            seen.setdefault(str(text), None)
    return list(seen)
