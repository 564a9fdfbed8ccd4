"""Public ticket tracking by shareable token (no sign-in)."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core.exceptions import HelpdeskClientException, PreconditionError
from helpdesk_client.core.sanitize import is_blank
from helpdesk_client.models.enums import SenderType, TicketStatus
from helpdesk_client.schemas.ticket import Ticket, TicketComment
from helpdesk_client.services.comments import (
    append_comment,
    reconcile_comments,
    render_keys,
    utcnow,
    validate_comment,
)
from helpdesk_client.services.notifications import Notifier

logger = logging.getLogger(__name__)

STATUS_BADGES: dict[TicketStatus, str] = {
    TicketStatus.open: "default",
    TicketStatus.in_progress: "secondary",
    TicketStatus.resolved: "success",
    TicketStatus.closed: "destructive",
}


def status_badge(status: TicketStatus) -> str:
    return STATUS_BADGES[status]


def tracker_sender_label(comment: TicketComment) -> str:
    if comment.sender_type == SenderType.user:
        return "You"
    if comment.sender and comment.sender.name:
        return comment.sender.name
    return "Staff"


class TrackTicketViewModel:
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
        self.token: str | None = None
        self.ticket: Ticket | None = None
        self.comments: list[TicketComment] = []
        self.loading = False
        self.sending = False
        self.torn_down = False

    def unmount(self) -> None:
        self.torn_down = True

    def load(self, token: str) -> Ticket | None:
        """Fetch the tracked ticket; ``None`` means not found or invalid link."""
        if is_blank(token):
            self.ticket = None
            return None
        self.token = token.strip()
        self.loading = True
        try:
            ticket = self.client.track_ticket(self.token)
        except HelpdeskClientException as exc:
            logger.info("Tracking lookup failed for token: %s", exc.message)
            ticket = None
        finally:
            self.loading = False

        if self.torn_down:
            return None
        self.ticket = ticket
        self.comments = list(ticket.comments) if ticket else []
        return ticket

    def refresh(self) -> Ticket | None:
        """Re-fetch the ticket, keeping local comments the server has not echoed yet."""
        if self.token is None:
            return None
        local = list(self.comments)
        ticket = self.load(self.token)
        if ticket is not None:
            self.comments = reconcile_comments(ticket.comments, local)
        return ticket

    @property
    def display_state(self) -> str:
        if self.loading:
            return "loading"
        if self.ticket is None:
            return "not_found"
        return "ready"

    @property
    def status_badge(self) -> str | None:
        return status_badge(self.ticket.status) if self.ticket else None

    def comment_rows(self) -> list[tuple[str, TicketComment]]:
        return list(zip(render_keys(self.comments), self.comments))

    def add_comment(self, message: str) -> TicketComment | None:
        if self.token is None or self.ticket is None:
            return None
        try:
            body = validate_comment(message)
        except PreconditionError as exc:
            self.notifier.push(exc.level, exc.message)
            return None

        self.sending = True
        try:
            comment = self.client.add_tracker_comment(self.token, body)
        except HelpdeskClientException as exc:
            if not self.torn_down:
                logger.warning("Tracker comment failed: %s", exc.message)
                self.notifier.error("Failed to send comment. Please try again.")
            return None
        finally:
            self.sending = False

        if self.torn_down:
            return None
        self.comments = append_comment(self.comments, comment, now=self._clock())
        return self.comments[-1]
