"""View-model behind the ticket list: filtering, visibility and row actions."""

from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from collections.abc import Callable
from typing import Any

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core import rbac
from helpdesk_client.core.exceptions import HelpdeskClientException, PreconditionError
from helpdesk_client.core.sanitize import is_blank
from helpdesk_client.models.enums import SenderType, TicketStatus
from helpdesk_client.schemas.ticket import Ticket, TicketComment
from helpdesk_client.schemas.user import Session
from helpdesk_client.services.comments import append_comment, render_keys, utcnow, validate_comment
from helpdesk_client.services.filters import TicketFilters, apply_filters, distinct_values
from helpdesk_client.services.mutations import apply_status_change
from helpdesk_client.services.notifications import Notifier
from helpdesk_client.services.session import resolve_session

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load tickets"


def sender_label(comment: TicketComment) -> str:
    if comment.sender_type == SenderType.user:
        return "User"
    if comment.sender and comment.sender.name:
        return comment.sender.name
    return "Staff"


class TicketListViewModel:
    """Ticket list state for one mounted view.

    Row state (expand flags, comment lists, in-flight flags) is keyed by
    ticket id and pruned whenever the ticket set is replaced.
    """

    def __init__(
        self,
        client: HelpdeskApiClient,
        notifier: Notifier | None = None,
        *,
        clock: Callable[[], dt.datetime] = utcnow,
    ) -> None:
        self.client = client
        self.notifier = notifier or Notifier()
        self._clock = clock

        self.session: Session | None = None
        self.tickets: list[Ticket] = []
        self.expanded: dict[str, bool] = {}
        self.comments_by_ticket: dict[str, list[TicketComment]] = {}
        self.filters = TicketFilters()

        self.loading = False
        self.load_error: str | None = None
        self.assigning: set[str] = set()
        self.updating_status: set[str] = set()
        self.commenting: set[str] = set()
        self.deleting: set[str] = set()
        self.torn_down = False

    # ------------------------------------------------------------------ lifecycle

    def mount(self) -> Session | None:
        """Resolve the session once, then load tickets. ``None`` means sign in."""
        self.session = resolve_session(self.client)
        if self.session is None:
            return None
        self.load()
        return self.session

    def unmount(self) -> None:
        self.torn_down = True

    def load(self) -> bool:
        """Replace the cached tickets with the server's current list."""
        self.loading = True
        try:
            tickets = self.client.list_tickets()
        except HelpdeskClientException as exc:
            if self.torn_down:
                return False
            logger.warning("Ticket list load failed: %s", exc.message)
            self.tickets = []
            self.expanded = {}
            self.comments_by_ticket = {}
            self.load_error = LOAD_FAILED_MESSAGE
            self.notifier.error(LOAD_FAILED_MESSAGE)
            return False
        finally:
            self.loading = False

        if self.torn_down:
            return False
        ids = {ticket.id for ticket in tickets}
        self.tickets = tickets
        self.expanded = {ticket.id: True for ticket in tickets}
        self.comments_by_ticket = {ticket.id: list(ticket.comments) for ticket in tickets}
        self.assigning &= ids
        self.updating_status &= ids
        self.commenting &= ids
        self.deleting &= ids
        self.load_error = None
        logger.info("Loaded %d tickets", len(tickets))
        return True

    # ------------------------------------------------------------------ derived state

    def toggle(self, ticket_id: str) -> bool:
        self.expanded[ticket_id] = not self.expanded.get(ticket_id, False)
        return self.expanded[ticket_id]

    def set_filters(self, **changes: Any) -> TicketFilters:
        """Replace filter fields; an unreadable date bound keeps the current filters."""
        try:
            self.filters = dataclasses.replace(self.filters, **changes)
        except ValueError as exc:
            self._reject(PreconditionError(str(exc)))
        return self.filters

    def reset_filters(self) -> None:
        self.filters = TicketFilters()

    @property
    def filtered_tickets(self) -> list[Ticket]:
        return apply_filters(self.tickets, self.filters)

    @property
    def visible_tickets(self) -> list[Ticket]:
        return rbac.visible(self.filtered_tickets, self.session)

    @property
    def department_options(self) -> list[str]:
        return distinct_values(self.tickets, "department")

    @property
    def status_options(self) -> list[str]:
        return distinct_values(self.tickets, "status")

    @property
    def display_state(self) -> str:
        if self.loading:
            return "loading"
        if self.load_error:
            return "error"
        if not self.filtered_tickets:
            return "empty"
        if not self.visible_tickets:
            return "none_visible"
        return "ready"

    def find(self, ticket_id: str) -> Ticket | None:
        return next((ticket for ticket in self.tickets if ticket.id == ticket_id), None)

    def comment_rows(self, ticket_id: str) -> list[tuple[str, TicketComment]]:
        comments = self.comments_by_ticket.get(ticket_id, [])
        return list(zip(render_keys(comments), comments))

    def image_url(self, ticket: Ticket) -> str:
        return ticket.image_url(self.client.base_url)

    def can_comment(self, ticket: Ticket) -> bool:
        return rbac.can_comment_ticket(self.session, ticket)

    def can_change_status(self, ticket: Ticket) -> bool:
        return rbac.can_change_status(self.session, ticket)

    def can_assign(self, ticket: Ticket) -> bool:
        return rbac.can_assign_ticket(self.session, ticket)

    # ------------------------------------------------------------------ actions

    def _reject(self, exc: PreconditionError) -> None:
        self.notifier.push(exc.level, exc.message)

    def _check_assignment(self, ticket: Ticket | None, user_id: str) -> None:
        if is_blank(user_id):
            raise PreconditionError("Please select a user")
        if ticket is not None and ticket.assignee_id == user_id:
            raise PreconditionError("Ticket is already assigned to this user", level="info")

    def assign(self, ticket_id: str, user_id: str) -> bool:
        """Assign via the API, then re-fetch the list."""
        ticket = self.find(ticket_id)
        try:
            self._check_assignment(ticket, user_id)
        except PreconditionError as exc:
            self._reject(exc)
            return False

        reassigning = ticket is not None and ticket.assigned_to is not None
        self.assigning.add(ticket_id)
        try:
            self.client.assign_ticket(ticket_id, user_id)
        except HelpdeskClientException as exc:
            if not self.torn_down:
                self.notifier.error(exc.message)
            return False
        finally:
            self.assigning.discard(ticket_id)

        if self.torn_down:
            return False
        logger.info("Ticket %s assigned to %s", ticket_id, user_id)
        self.notifier.success(
            "Ticket reassigned successfully!" if reassigning else "Ticket assigned successfully!"
        )
        self.load()
        return True

    def change_status(self, ticket_id: str, status: TicketStatus | str) -> bool:
        """Change status via the API, then patch the cached ticket."""
        try:
            new_status = TicketStatus(status)
        except ValueError:
            self._reject(PreconditionError(f"Unknown status: {status}"))
            return False

        self.updating_status.add(ticket_id)
        try:
            result = self.client.change_ticket_status(ticket_id, new_status)
        except HelpdeskClientException as exc:
            if not self.torn_down:
                self.notifier.error(exc.message)
            return False
        finally:
            self.updating_status.discard(ticket_id)

        if self.torn_down:
            return False
        self.tickets = apply_status_change(self.tickets, ticket_id, new_status)
        self.notifier.success(result.message or "Status updated")
        logger.info("Ticket %s status -> %s", ticket_id, new_status.value)
        return True

    def fetch_ticket(self, ticket_id: str) -> Ticket | None:
        """Fetch one ticket and refresh its cached row when the list holds it."""
        if is_blank(ticket_id):
            self._reject(PreconditionError("Ticket id is required"))
            return None
        try:
            ticket = self.client.get_ticket(ticket_id)
        except HelpdeskClientException as exc:
            if not self.torn_down:
                self.notifier.error(exc.message)
            return None

        if self.torn_down:
            return None
        if self.find(ticket.id) is not None:
            self.tickets = [ticket if t.id == ticket.id else t for t in self.tickets]
            self.comments_by_ticket[ticket.id] = list(ticket.comments)
        return ticket

    def delete(self, ticket_id: str) -> bool:
        """Delete via the API, then drop the ticket and its row state."""
        if is_blank(ticket_id):
            self._reject(PreconditionError("Ticket id is required"))
            return False
        self.deleting.add(ticket_id)
        try:
            result = self.client.delete_ticket(ticket_id)
        except HelpdeskClientException as exc:
            if not self.torn_down:
                self.notifier.error(exc.message)
            return False
        finally:
            self.deleting.discard(ticket_id)

        if self.torn_down:
            return False
        self.tickets = [ticket for ticket in self.tickets if ticket.id != ticket_id]
        self.expanded.pop(ticket_id, None)
        self.comments_by_ticket.pop(ticket_id, None)
        self.notifier.success(result.message or "Ticket deleted")
        logger.info("Ticket %s deleted", ticket_id)
        return True

    def add_comment(self, ticket_id: str, message: str) -> TicketComment | None:
        """Post a staff comment and append the echoed comment locally."""
        try:
            body = validate_comment(message)
        except PreconditionError as exc:
            self._reject(exc)
            return None

        self.commenting.add(ticket_id)
        try:
            comment = self.client.add_staff_comment(ticket_id, body)
        except HelpdeskClientException as exc:
            if not self.torn_down:
                self.notifier.error(exc.message)
            return None
        finally:
            self.commenting.discard(ticket_id)

        if self.torn_down:
            return None
        updated = append_comment(self.comments_by_ticket.get(ticket_id, []), comment, now=self._clock())
        self.comments_by_ticket[ticket_id] = updated
        self.notifier.success("Comment added")
        return updated[-1]
