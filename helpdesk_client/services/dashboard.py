"""Dashboard metrics and the chart series derived from them."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core.exceptions import HelpdeskClientException
from helpdesk_client.models.enums import TicketStatus
from helpdesk_client.schemas.metrics import DashboardMetrics, TicketCommentCount
from helpdesk_client.schemas.user import Session
from helpdesk_client.services.notifications import Notifier
from helpdesk_client.services.session import resolve_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepartmentShare:
    department: str
    count: int
    percent: float

    @property
    def label(self) -> str:
        return f"{self.department}: {self.count} ({self.percent:.1f}%)"


class DashboardViewModel:
    def __init__(self, client: HelpdeskApiClient, notifier: Notifier | None = None) -> None:
        self.client = client
        self.notifier = notifier or Notifier()
        self.session: Session | None = None
        self.metrics: DashboardMetrics | None = None
        self.loading = False
        self.torn_down = False

    def unmount(self) -> None:
        self.torn_down = True

    def mount(self) -> Session | None:
        self.session = resolve_session(self.client)
        if self.session is None:
            return None
        self.load()
        return self.session

    def load(self) -> bool:
        self.loading = True
        try:
            metrics = self.client.get_dashboard_metrics()
        except HelpdeskClientException as exc:
            if not self.torn_down:
                logger.error("Failed to fetch dashboard metrics: %s", exc.message)
                self.notifier.error(exc.message)
            return False
        finally:
            self.loading = False
        if self.torn_down:
            return False
        self.metrics = metrics
        return True

    @property
    def display_state(self) -> str:
        if self.loading:
            return "loading"
        return "ready" if self.metrics is not None else "unavailable"

    def status_series(self) -> list[tuple[str, int]]:
        if self.metrics is None:
            return []
        tickets = self.metrics.tickets
        counts = {
            TicketStatus.open: tickets.open_tickets,
            TicketStatus.in_progress: tickets.in_progress_tickets,
            TicketStatus.resolved: tickets.resolved_tickets,
            TicketStatus.closed: tickets.closed_tickets,
        }
        return [(status.value, counts[status]) for status in TicketStatus]

    def department_shares(self) -> list[DepartmentShare]:
        if self.metrics is None:
            return []
        groups = self.metrics.tickets.tickets_by_department
        total = sum(group.count for group in groups)
        return [
            DepartmentShare(
                department=group.key,
                count=group.count,
                percent=round(group.count / total * 100, 1) if total else 0.0,
            )
            for group in groups
        ]

    def most_commented(self, limit: int | None = None) -> list[TicketCommentCount]:
        if self.metrics is None:
            return []
        rows = sorted(self.metrics.tickets.tickets_with_comments, key=lambda row: row.total_comments, reverse=True)
        return rows[:limit] if limit is not None else rows
