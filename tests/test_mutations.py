from __future__ import annotations

import logging

from helpdesk_client.core.logging import setup_logging
from helpdesk_client.models.enums import TicketStatus
from helpdesk_client.schemas.ticket import AssignedUser, Ticket
from helpdesk_client.services.mutations import apply_assignment, apply_status_change


def _make_ticket(ticket_id: str, status: str = "Open") -> Ticket:
    return Ticket.model_validate(
        {"_id": ticket_id, "title": f"Ticket {ticket_id}", "department": "IT", "status": status}
    )


def test_status_change_touches_only_the_matching_ticket() -> None:
    tickets = [_make_ticket("t1"), _make_ticket("t2")]
    patched = apply_status_change(tickets, "t1", "Closed")
    assert patched[0].status == TicketStatus.closed
    assert patched[0].title == "Ticket t1"
    assert patched[1] is tickets[1]
    assert tickets[0].status == TicketStatus.open


def test_unknown_ticket_id_leaves_list_unchanged() -> None:
    tickets = [_make_ticket("t1")]
    assert apply_status_change(tickets, "missing", TicketStatus.resolved) == tickets


def test_assignment_replaces_assignee() -> None:
    tickets = [_make_ticket("t1"), _make_ticket("t2")]
    assignee = AssignedUser(id="u5", name="Kemi")
    patched = apply_assignment(tickets, "t2", assignee)
    assert patched[1].assignee_id == "u5"
    assert patched[0].assigned_to is None
    assert apply_assignment(patched, "t2", None)[1].assigned_to is None


def test_setup_logging_quiets_transport_loggers() -> None:
    assert setup_logging("info", force=True) == "INFO"
    assert logging.getLogger("httpx").level == logging.WARNING
    assert setup_logging("debug", force=True) == "DEBUG"
    assert logging.getLogger("httpx").level == logging.DEBUG
