"""Command line front end for the helpdesk API.

Usage examples:

    kam-helpdesk login --email admin@example.com --password secret
    kam-helpdesk tickets --department IT --status Open --start 2026-01-01
    kam-helpdesk status TICKET_ID "In Progress"
    kam-helpdesk comment TICKET_ID "Technician is on the way"
    kam-helpdesk show TICKET_ID
    kam-helpdesk track TRACKING_TOKEN
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from collections.abc import Sequence

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core.config import settings
from helpdesk_client.core.exceptions import HelpdeskClientException, InvalidConfigurationError
from helpdesk_client.core.logging import setup_logging
from helpdesk_client.models.enums import Department, TicketCategory, TicketStatus, UserRole
from helpdesk_client.schemas.ticket import Ticket
from helpdesk_client.services import auth
from helpdesk_client.services.dashboard import DashboardViewModel
from helpdesk_client.services.filters import ALL, parse_date_bound, to_iso_date
from helpdesk_client.services.notifications import Notifier
from helpdesk_client.services.session import resolve_session
from helpdesk_client.services.ticket_form import submit_ticket
from helpdesk_client.services.ticket_list import TicketListViewModel, sender_label
from helpdesk_client.services.tracking import TrackTicketViewModel, tracker_sender_label
from helpdesk_client.services.users import UserAdminViewModel

SIGN_IN_REQUIRED = "Sign in required (run `kam-helpdesk login`)."


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="kam-helpdesk", description=f"{settings.APP_NAME} command line client")
    parser.add_argument("--api-url", default="", help="Override the API base URL (else API_URL)")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (default: LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Sign in and keep the session")
    login.add_argument("--email", required=True)
    login.add_argument("--password", default="", help="Prompted for when omitted")

    sub.add_parser("logout", help="End the session")
    sub.add_parser("whoami", help="Show the signed-in user")

    forgot = sub.add_parser("forgot-password", help="Send a password reset link")
    forgot.add_argument("--email", required=True)

    tickets = sub.add_parser("tickets", help="List tickets visible to you")
    tickets.add_argument("--start", type=parse_date_bound, default=None, help="Created on or after (YYYY-MM-DD)")
    tickets.add_argument("--end", type=parse_date_bound, default=None, help="Created on or before (YYYY-MM-DD)")
    tickets.add_argument("--department", default=ALL, choices=[ALL, *(d.value for d in Department)])
    tickets.add_argument("--status", default=ALL, choices=[ALL, *(s.value for s in TicketStatus)])
    tickets.add_argument("--comments", action="store_true", help="Print each ticket's comments")

    assign = sub.add_parser("assign", help="Assign a ticket to a user")
    assign.add_argument("ticket_id")
    assign.add_argument("user_id")

    status = sub.add_parser("status", help="Change a ticket's status")
    status.add_argument("ticket_id")
    status.add_argument("status", choices=[s.value for s in TicketStatus])

    comment = sub.add_parser("comment", help="Add a staff comment to a ticket")
    comment.add_argument("ticket_id")
    comment.add_argument("message")

    show = sub.add_parser("show", help="Show one ticket with its comments")
    show.add_argument("ticket_id")

    delete = sub.add_parser("delete", help="Delete a ticket")
    delete.add_argument("ticket_id")

    by_email = sub.add_parser("tickets-by-email", help="List tickets submitted from an email address")
    by_email.add_argument("email")

    sub.add_parser("ticket-metrics", help="Print the raw ticket metrics as JSON")

    track = sub.add_parser("track", help="Show a ticket by its tracking token")
    track.add_argument("token")

    track_comment = sub.add_parser("track-comment", help="Comment on a tracked ticket")
    track_comment.add_argument("token")
    track_comment.add_argument("message")

    sub.add_parser("users", help="List users and their roles")

    promote = sub.add_parser("promote", help="Change a user's role")
    promote.add_argument("user_id")
    promote.add_argument("role", choices=[r.value for r in UserRole])

    create_user = sub.add_parser("create-user", help="Register a new user")
    create_user.add_argument("--name", required=True)
    create_user.add_argument("--email", required=True)
    create_user.add_argument("--password", default="")
    create_user.add_argument("--role", default=UserRole.user.value, choices=[UserRole.user.value, UserRole.admin.value])

    sub.add_parser("dashboard", help="Show helpdesk metrics")

    create = sub.add_parser("create-ticket", help="Submit a new ticket")
    create.add_argument("--full-name", required=True)
    create.add_argument("--email", required=True)
    create.add_argument("--phone", default="")
    create.add_argument("--department", required=True, choices=[d.value for d in Department])
    create.add_argument("--category", required=True, choices=[c.value for c in TicketCategory])
    create.add_argument("--location", default="", help="Staff or accommodation location")
    create.add_argument("--sub-category", default="", help="Sub-category or accommodation issue")
    create.add_argument("--title", required=True)
    create.add_argument("--details", required=True)
    create.add_argument("--image", default=None, help="Path to an image to attach")

    return parser.parse_args(argv)


def _print_notices(notifier: Notifier) -> None:
    for notice in notifier.drain():
        stream = sys.stderr if notice.level.value == "error" else sys.stdout
        print(f"[{notice.level.value}] {notice.message}", file=stream)


def _print_ticket_row(ticket: Ticket) -> None:
    assignee = ticket.assigned_to.name if ticket.assigned_to else "unassigned"
    print(f"{ticket.id}  {to_iso_date(ticket.created_at)}  {ticket.department.value:<12} "
          f"{ticket.status.value:<11} {assignee:<20} {ticket.title}")


def _cmd_tickets(client: HelpdeskApiClient, notifier: Notifier, args: argparse.Namespace) -> int:
    view = TicketListViewModel(client, notifier)
    if view.mount() is None:
        print(SIGN_IN_REQUIRED, file=sys.stderr)
        return 1
    view.set_filters(start_date=args.start, end_date=args.end, department=args.department, status=args.status)
    state = view.display_state
    if state == "error":
        return 1
    if state == "empty":
        print("No tickets match the current filters.")
        return 0
    if state == "none_visible":
        print("No tickets assigned to you.")
        return 0
    for ticket in view.visible_tickets:
        _print_ticket_row(ticket)
        if args.comments:
            for _key, item in view.comment_rows(ticket.id):
                print(f"    - {sender_label(item)}: {item.message}")
    return 0


def _cmd_show(view: TicketListViewModel, args: argparse.Namespace) -> int:
    ticket = view.fetch_ticket(args.ticket_id)
    if ticket is None:
        return 1
    _print_ticket_row(ticket)
    print(ticket.description)
    if ticket.image:
        print(f"Image: {view.image_url(ticket)}")
    if not ticket.comments:
        print("No comments yet.")
    for item in ticket.comments:
        print(f"  - {sender_label(item)}: {item.message}")
    return 0


def _cmd_tickets_by_email(client: HelpdeskApiClient, notifier: Notifier, args: argparse.Namespace) -> int:
    try:
        tickets = client.list_tickets_by_email(args.email)
    except HelpdeskClientException as exc:
        notifier.error(exc.message)
        return 1
    except ValueError:
        notifier.error("Email is required")
        return 1
    if not tickets:
        print("No tickets found for this email.")
    for ticket in tickets:
        _print_ticket_row(ticket)
    return 0


def _cmd_ticket_metrics(client: HelpdeskApiClient, notifier: Notifier) -> int:
    if resolve_session(client) is None:
        print(SIGN_IN_REQUIRED, file=sys.stderr)
        return 1
    try:
        metrics = client.get_ticket_metrics()
    except HelpdeskClientException as exc:
        notifier.error(exc.message)
        return 1
    print(json.dumps(metrics, indent=2, sort_keys=True))
    return 0


def _cmd_track(client: HelpdeskApiClient, notifier: Notifier, args: argparse.Namespace) -> int:
    view = TrackTicketViewModel(client, notifier)
    ticket = view.load(args.token)
    if ticket is None:
        print("Ticket not found or link is invalid.", file=sys.stderr)
        return 1
    print(f"{ticket.title} [{ticket.status.value}] {ticket.department.value}")
    print(ticket.description)
    if ticket.assigned_to:
        print(f"Assigned to: {ticket.assigned_to.name} {ticket.assigned_to.email or ''}".rstrip())
    if not view.comments:
        print("No comments yet.")
    for _key, item in view.comment_rows():
        print(f"  - {tracker_sender_label(item)}: {item.message}")
    return 0


def _cmd_users(client: HelpdeskApiClient, notifier: Notifier) -> int:
    view = UserAdminViewModel(client, notifier)
    if view.mount() is None:
        print(SIGN_IN_REQUIRED, file=sys.stderr)
        return 1
    if not view.session.is_admin:
        print("Administrator role required.", file=sys.stderr)
        return 1
    if notifier.has_errors():
        return 1
    if not view.users:
        print("No users found")
    for user in view.users:
        note = "" if view.can_modify(user) else "  (cannot modify)"
        print(f"{user.id}  {user.name:<24} {user.email:<32} {user.role.value}{note}")
    return 0


def _cmd_dashboard(client: HelpdeskApiClient, notifier: Notifier) -> int:
    view = DashboardViewModel(client, notifier)
    if view.mount() is None:
        print(SIGN_IN_REQUIRED, file=sys.stderr)
        return 1
    if view.metrics is None:
        return 1
    tickets, users = view.metrics.tickets, view.metrics.users
    print(f"Total tickets: {tickets.total_tickets}")
    for name, count in view.status_series():
        print(f"  {name:<12} {count}")
    print("By department:")
    for share in view.department_shares():
        print(f"  {share.label}")
    print("Most commented:")
    for row in view.most_commented(limit=10):
        print(f"  {row.ticket_id}  {row.total_comments}")
    print(f"Users: {users.total_users}  admins: {users.total_admins}  super admins: {users.total_super_admins}")
    return 0


def run(args: argparse.Namespace, client: HelpdeskApiClient, notifier: Notifier) -> int:
    command = args.command
    if command == "login":
        password = args.password or getpass.getpass("Password: ")
        return 0 if auth.login(client, notifier, email=args.email, password=password) else 1
    if command == "logout":
        return 0 if auth.logout(client, notifier) else 1
    if command == "forgot-password":
        return 0 if auth.request_password_reset(client, notifier, email=args.email) else 1
    if command == "whoami":
        session = resolve_session(client) if client.has_credentials else None
        if session is None:
            print(SIGN_IN_REQUIRED, file=sys.stderr)
            return 1
        print(f"{session.name} <{session.email}> role={session.role.value}")
        return 0
    if command == "tickets":
        return _cmd_tickets(client, notifier, args)
    if command in {"assign", "status", "comment", "show", "delete"}:
        view = TicketListViewModel(client, notifier)
        if view.mount() is None:
            print(SIGN_IN_REQUIRED, file=sys.stderr)
            return 1
        if command == "show":
            return _cmd_show(view, args)
        if command == "assign":
            ok = view.assign(args.ticket_id, args.user_id)
        elif command == "status":
            ok = view.change_status(args.ticket_id, args.status)
        elif command == "delete":
            ok = view.delete(args.ticket_id)
        else:
            ok = view.add_comment(args.ticket_id, args.message) is not None
        return 0 if ok or not notifier.has_errors() else 1
    if command == "tickets-by-email":
        return _cmd_tickets_by_email(client, notifier, args)
    if command == "ticket-metrics":
        return _cmd_ticket_metrics(client, notifier)
    if command == "track":
        return _cmd_track(client, notifier, args)
    if command == "track-comment":
        view = TrackTicketViewModel(client, notifier)
        if view.load(args.token) is None:
            print("Ticket not found or link is invalid.", file=sys.stderr)
            return 1
        return 0 if view.add_comment(args.message) is not None else 1
    if command == "users":
        return _cmd_users(client, notifier)
    if command == "promote":
        view = UserAdminViewModel(client, notifier)
        if view.mount() is None:
            print(SIGN_IN_REQUIRED, file=sys.stderr)
            return 1
        if UserRole(args.role) not in view.role_choices:
            print(f"Your role cannot grant {args.role}.", file=sys.stderr)
            return 1
        return 0 if view.promote(args.user_id, args.role) else 1
    if command == "create-user":
        password = args.password or getpass.getpass("Password: ")
        view = UserAdminViewModel(client, notifier)
        created = view.create_user(name=args.name, email=args.email, password=password, role=args.role)
        return 0 if created is not None else 1
    if command == "dashboard":
        return _cmd_dashboard(client, notifier)
    if command == "create-ticket":
        accommodation = args.category == TicketCategory.accommodation.value
        result = submit_ticket(
            client,
            notifier,
            full_name=args.full_name,
            email=args.email,
            phone=args.phone,
            department=args.department,
            category=args.category,
            staff_location="" if accommodation else args.location,
            accommodation_location=args.location if accommodation else "",
            sub_category="" if accommodation else args.sub_category,
            accommodation_issue=args.sub_category if accommodation else "",
            title=args.title,
            details=args.details,
            image_path=args.image,
        )
        return 0 if result.ok else 1
    raise ValueError(f"unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    try:
        client = HelpdeskApiClient(base_url=args.api_url or None)
    except InvalidConfigurationError as exc:
        print(f"Configuration error: {exc.message}", file=sys.stderr)
        return 2
    notifier = Notifier()
    try:
        code = run(args, client, notifier)
    finally:
        _print_notices(notifier)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
