from __future__ import annotations

import datetime as dt

from helpdesk_client.core.exceptions import ApiConnectionError, ApiError, AuthenticationError, NotFoundError
from helpdesk_client.models.enums import NoticeLevel, TicketStatus, UserRole
from helpdesk_client.schemas.common import MessageResponse
from helpdesk_client.schemas.ticket import Ticket, TicketComment
from helpdesk_client.schemas.user import User
from helpdesk_client.services.notifications import Notifier
from helpdesk_client.services.ticket_list import TicketListViewModel, sender_label


def _make_ticket(
    ticket_id: str,
    *,
    assignee_id: str | None = None,
    status: str = "Open",
    department: str = "IT",
    comments: list[dict] | None = None,
) -> Ticket:
    payload = {
        "_id": ticket_id,
        "title": f"Ticket {ticket_id}",
        "description": "Something is broken",
        "created_at": "2026-03-10T09:30:00Z",
        "department": department,
        "status": status,
        "comments": comments or [],
    }
    if assignee_id:
        payload["assignedTo"] = {"_id": assignee_id, "name": f"User {assignee_id}"}
    return Ticket.model_validate(payload)


class FakeClient:
    base_url = "http://helpdesk.test"

    def __init__(self, tickets: list[Ticket], *, role: UserRole = UserRole.admin, identity: str = "a1") -> None:
        self.tickets = tickets
        self.user: User | None = User(id=identity, name="Viewer", email="viewer@example.com", role=role)
        self.calls: list[tuple] = []
        self.fail_list = False
        self.fail_mutation: Exception | None = None
        self.comment_reply: TicketComment | None = None
        self.during_call = None

    def get_user(self) -> User:
        if self.user is None:
            raise AuthenticationError()
        return self.user

    def list_tickets(self) -> list[Ticket]:
        self.calls.append(("list",))
        if self.fail_list:
            raise ApiConnectionError()
        return [ticket.model_copy(deep=True) for ticket in self.tickets]

    def _mutate(self, *call) -> None:
        self.calls.append(call)
        if self.during_call:
            self.during_call()
        if self.fail_mutation:
            raise self.fail_mutation

    def assign_ticket(self, ticket_id: str, user_id: str) -> dict:
        self._mutate("assign", ticket_id, user_id)
        self.tickets = [
            _make_ticket(t.id, assignee_id=user_id) if t.id == ticket_id else t for t in self.tickets
        ]
        return {}

    def change_ticket_status(self, ticket_id: str, status: TicketStatus) -> MessageResponse:
        self._mutate("status", ticket_id, status)
        return MessageResponse(message=f"Status changed to {status.value}")

    def add_staff_comment(self, ticket_id: str, message: str) -> TicketComment:
        self._mutate("comment", ticket_id, message)
        if self.comment_reply is not None:
            return self.comment_reply
        return TicketComment.model_validate(
            {"_id": "new", "senderType": "staff", "message": message, "createdAt": "2026-03-10T10:00:00Z"}
        )

    def get_ticket(self, ticket_id: str) -> Ticket:
        self._mutate("get", ticket_id)
        return _make_ticket(ticket_id, status="Resolved", comments=[{"_id": "c9", "senderType": "user", "message": "fixed?"}])

    def delete_ticket(self, ticket_id: str) -> MessageResponse:
        self._mutate("delete", ticket_id)
        return MessageResponse(message="Ticket deleted")


def _mounted(client: FakeClient) -> TicketListViewModel:
    view = TicketListViewModel(client, Notifier())
    assert view.mount() is not None
    return view


def test_mount_without_session_does_not_fetch() -> None:
    client = FakeClient([_make_ticket("t1")])
    client.user = None
    view = TicketListViewModel(client, Notifier())
    assert view.mount() is None
    assert client.calls == []
    assert view.notifier.notices == []


def test_load_replaces_state_and_expands_everything() -> None:
    client = FakeClient(
        [
            _make_ticket("t1", comments=[{"_id": "c1", "senderType": "user", "message": "help"}]),
            _make_ticket("t2"),
        ]
    )
    view = _mounted(client)
    assert [t.id for t in view.tickets] == ["t1", "t2"]
    assert view.expanded == {"t1": True, "t2": True}
    assert [c.id for c in view.comments_by_ticket["t1"]] == ["c1"]
    assert view.comments_by_ticket["t2"] == []
    assert view.display_state == "ready"


def test_load_twice_is_idempotent() -> None:
    client = FakeClient([_make_ticket("t1", assignee_id="a1"), _make_ticket("t2")])
    view = _mounted(client)
    first = [t.id for t in view.visible_tickets]
    view.load()
    assert [t.id for t in view.visible_tickets] == first


def test_reload_discards_local_comment_state() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    view.add_comment("t1", "local note")
    assert len(view.comments_by_ticket["t1"]) == 1
    view.load()
    assert view.comments_by_ticket["t1"] == []


def test_load_failure_leaves_empty_list_and_error_state() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    client.fail_list = True
    assert view.load() is False
    assert view.tickets == []
    assert view.load_error
    assert view.display_state == "error"
    assert view.notifier.latest().level == NoticeLevel.error


def test_toggle_flips_only_that_row() -> None:
    view = _mounted(FakeClient([_make_ticket("t1"), _make_ticket("t2")]))
    assert view.toggle("t1") is False
    assert view.expanded == {"t1": False, "t2": True}
    assert view.toggle("t1") is True


def test_filters_apply_before_visibility() -> None:
    client = FakeClient(
        [
            _make_ticket("t1", assignee_id="u1", department="IT"),
            _make_ticket("t2", assignee_id="u2", department="IT"),
            _make_ticket("t3", assignee_id="u1", department="HR"),
        ],
        role=UserRole.user,
        identity="u1",
    )
    view = _mounted(client)
    view.set_filters(department="IT")
    assert [t.id for t in view.filtered_tickets] == ["t1", "t2"]
    assert [t.id for t in view.visible_tickets] == ["t1"]
    view.set_filters(department="HR", status="Closed")
    assert view.display_state == "empty"


def test_plain_user_with_nothing_assigned_gets_none_visible_state() -> None:
    client = FakeClient([_make_ticket("t1", assignee_id="u2")], role=UserRole.user, identity="u1")
    view = _mounted(client)
    assert view.display_state == "none_visible"


def test_reassigning_to_current_assignee_skips_network() -> None:
    client = FakeClient([_make_ticket("t1", assignee_id="u1")])
    view = _mounted(client)
    calls_before = list(client.calls)
    assert view.assign("t1", "u1") is False
    assert client.calls == calls_before
    notice = view.notifier.latest()
    assert notice.level == NoticeLevel.info
    assert "already assigned" in notice.message


def test_assign_without_selection_is_rejected_locally() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    assert view.assign("t1", "") is False
    assert ("assign", "t1", "") not in client.calls
    assert view.notifier.latest().level == NoticeLevel.error


def test_assign_refetches_the_list() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    assert view.assign("t1", "u7") is True
    assert client.calls[-2:] == [("assign", "t1", "u7"), ("list",)]
    assert view.find("t1").assignee_id == "u7"
    assert view.notifier.latest().message == "Ticket assigned successfully!"


def test_status_change_patches_only_that_ticket() -> None:
    client = FakeClient([_make_ticket("t1"), _make_ticket("t2")])
    view = _mounted(client)
    before = view.find("t2")
    assert view.change_status("t1", "Resolved") is True
    assert view.find("t1").status == TicketStatus.resolved
    assert view.find("t1").title == "Ticket t1"
    assert view.find("t2") == before
    assert client.calls.count(("list",)) == 1
    assert view.notifier.latest().message == "Status changed to Resolved"


def test_status_change_tracks_in_flight_flag_per_ticket() -> None:
    client = FakeClient([_make_ticket("t1"), _make_ticket("t2")])
    view = _mounted(client)
    seen: list[set[str]] = []
    client.during_call = lambda: seen.append(set(view.updating_status))
    view.change_status("t1", TicketStatus.closed)
    assert seen == [{"t1"}]
    assert view.updating_status == set()


def test_failed_status_change_leaves_state_untouched() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    client.fail_mutation = ApiError("Failed to update status", status_code=500)
    assert view.change_status("t1", "Closed") is False
    assert view.find("t1").status == TicketStatus.open
    assert view.notifier.latest().message == "Failed to update status"
    assert view.updating_status == set()


def test_comment_append_grows_list_by_one() -> None:
    client = FakeClient([_make_ticket("t1", comments=[{"_id": "c1", "senderType": "user", "message": "hi"}])])
    view = _mounted(client)
    before = len(view.comments_by_ticket["t1"])
    added = view.add_comment("t1", "We are on it")
    assert added is not None
    assert len(view.comments_by_ticket["t1"]) == before + 1
    assert view.comments_by_ticket["t1"][-1].message == "We are on it"


def test_comment_without_timestamp_gets_submission_time() -> None:
    client = FakeClient([_make_ticket("t1")])
    client.comment_reply = TicketComment.model_validate({"senderType": "staff", "message": "Done"})
    view = _mounted(client)
    submitted_at = dt.datetime.now(dt.timezone.utc)
    added = view.add_comment("t1", "Done")
    assert added.created_at is not None
    assert added.created_at >= submitted_at
    keys = [key for key, _ in view.comment_rows("t1")]
    assert keys[0].endswith(":0")


def test_blank_comment_sends_nothing() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    assert view.add_comment("t1", "   ") is None
    assert not any(call[0] == "comment" for call in client.calls)
    assert view.notifier.latest().message == "Comment cannot be empty"


def test_failed_comment_keeps_list() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    client.fail_mutation = ApiError("Failed to send reply", status_code=400)
    assert view.add_comment("t1", "hello") is None
    assert view.comments_by_ticket["t1"] == []
    assert view.commenting == set()


def test_response_after_unmount_is_ignored() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    notices_before = len(view.notifier.notices)
    client.during_call = view.unmount
    assert view.add_comment("t1", "late") is None
    assert view.change_status("t1", "Closed") is False
    assert view.comments_by_ticket["t1"] == []
    assert view.find("t1").status == TicketStatus.open
    assert len(view.notifier.notices) == notices_before


def test_action_hints_follow_session() -> None:
    client = FakeClient([_make_ticket("t1", assignee_id="u1"), _make_ticket("t2")], role=UserRole.user, identity="u1")
    view = _mounted(client)
    assigned, unassigned = view.find("t1"), view.find("t2")
    assert view.can_comment(assigned) and view.can_change_status(assigned)
    assert not view.can_comment(unassigned)
    assert not view.can_assign(assigned)


def test_sender_label_and_image_url() -> None:
    staff = TicketComment.model_validate({"senderType": "staff", "sender": {"name": "Ada"}, "message": "x"})
    anonymous_staff = TicketComment.model_validate({"senderType": "staff", "message": "x"})
    user = TicketComment.model_validate({"senderType": "user", "message": "x"})
    assert sender_label(staff) == "Ada"
    assert sender_label(anonymous_staff) == "Staff"
    assert sender_label(user) == "User"

    view = _mounted(FakeClient([]))
    ticket = _make_ticket("t1").model_copy(update={"image": "/uploads/a.png"})
    assert view.image_url(ticket) == "http://helpdesk.test/uploads/a.png"


def test_dropdown_options_and_filter_reset() -> None:
    client = FakeClient(
        [
            _make_ticket("t1", department="IT", status="Open"),
            _make_ticket("t2", department="HR", status="Closed"),
            _make_ticket("t3", department="IT", status="Open"),
        ]
    )
    view = _mounted(client)
    assert view.department_options == ["IT", "HR"]
    assert view.status_options == ["Open", "Closed"]
    view.set_filters(department="HR")
    assert [t.id for t in view.visible_tickets] == ["t2"]
    view.reset_filters()
    assert [t.id for t in view.visible_tickets] == ["t1", "t2", "t3"]


def test_overlong_comment_is_rejected_before_sending() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    assert view.add_comment("t1", "a" * 4001) is None
    assert not any(call[0] == "comment" for call in client.calls)
    notice = view.notifier.latest()
    assert notice.level == NoticeLevel.error
    assert notice.message == "Comment is too long (max 4000 characters)"
    assert view.commenting == set()


def test_control_characters_only_comment_counts_as_empty() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    assert view.add_comment("t1", "\x00\x07") is None
    assert not any(call[0] == "comment" for call in client.calls)
    assert view.notifier.latest().message == "Comment cannot be empty"


def test_comment_is_sent_cleaned() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    view.add_comment("t1", "  on\x00 it  ")
    assert client.calls[-1] == ("comment", "t1", "on it")


def test_unreadable_date_bound_keeps_filters_and_notifies() -> None:
    view = _mounted(FakeClient([_make_ticket("t1")]))
    view.set_filters(start_date="2026-03-01")
    filters = view.set_filters(start_date="yesterday")
    assert filters.start_date == "2026-03-01"
    assert view.notifier.latest().level == NoticeLevel.error
    assert "yesterday" in view.notifier.latest().message


def test_non_padded_date_bound_matches_later_ticket() -> None:
    view = _mounted(FakeClient([_make_ticket("t1")]))
    view.set_filters(start_date="2026-3-5", end_date="2026-3-10")
    assert [t.id for t in view.visible_tickets] == ["t1"]


def test_fetch_ticket_refreshes_cached_row() -> None:
    client = FakeClient([_make_ticket("t1"), _make_ticket("t2")])
    view = _mounted(client)
    ticket = view.fetch_ticket("t1")
    assert ticket.status == TicketStatus.resolved
    assert view.find("t1").status == TicketStatus.resolved
    assert [c.id for c in view.comments_by_ticket["t1"]] == ["c9"]
    assert view.find("t2").status == TicketStatus.open


def test_fetch_missing_ticket_pushes_error() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    client.fail_mutation = NotFoundError("Ticket not found")
    assert view.fetch_ticket("t404") is None
    assert view.notifier.latest().message == "Ticket not found"
    assert view.fetch_ticket("  ") is None
    assert view.notifier.latest().message == "Ticket id is required"


def test_delete_drops_ticket_and_row_state() -> None:
    client = FakeClient([_make_ticket("t1"), _make_ticket("t2")])
    view = _mounted(client)
    seen: list[set[str]] = []
    client.during_call = lambda: seen.append(set(view.deleting))
    assert view.delete("t1") is True
    assert seen == [{"t1"}]
    assert [t.id for t in view.tickets] == ["t2"]
    assert "t1" not in view.expanded
    assert "t1" not in view.comments_by_ticket
    assert view.notifier.latest().message == "Ticket deleted"


def test_failed_delete_keeps_ticket() -> None:
    client = FakeClient([_make_ticket("t1")])
    view = _mounted(client)
    client.fail_mutation = ApiError("Failed to delete ticket", status_code=500)
    assert view.delete("t1") is False
    assert view.find("t1") is not None
    assert view.deleting == set()
    assert view.notifier.latest().message == "Failed to delete ticket"
