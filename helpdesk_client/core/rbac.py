"""Role-aware display rules for tickets and users.

These decide what a view shows and which controls it offers. They are not a
security boundary: the API enforces authorization on every request.
"""

from __future__ import annotations

from collections.abc import Iterable

from helpdesk_client.models.enums import UserRole
from helpdesk_client.schemas.ticket import Ticket
from helpdesk_client.schemas.user import Session

# Roles a super-admin may hand out; admins may only promote to admin.
ROLE_GRANTS: dict[UserRole, tuple[UserRole, ...]] = {
    UserRole.super_admin: (UserRole.user, UserRole.admin, UserRole.super_admin),
    UserRole.admin: (UserRole.admin,),
    UserRole.user: (),
}

# Roles selectable on the "create user" form.
CREATABLE_ROLES: tuple[UserRole, ...] = (UserRole.user, UserRole.admin)


def is_assignee(session: Session | None, ticket: Ticket) -> bool:
    if session is None or ticket.assigned_to is None:
        return False
    return ticket.assigned_to.id == session.identity


def can_view_ticket(session: Session | None, ticket: Ticket) -> bool:
    if session is None:
        return False
    return session.is_admin or is_assignee(session, ticket)


def can_comment_ticket(session: Session | None, ticket: Ticket) -> bool:
    return can_view_ticket(session, ticket)


def can_change_status(session: Session | None, ticket: Ticket) -> bool:
    return can_view_ticket(session, ticket)


def can_assign_ticket(session: Session | None, ticket: Ticket | None = None) -> bool:
    return session is not None and session.is_super_admin


def can_manage_users(session: Session | None) -> bool:
    return session is not None and session.is_admin


def can_modify_user_role(target_role: UserRole) -> bool:
    return target_role != UserRole.super_admin


def assignable_roles(session: Session | None) -> tuple[UserRole, ...]:
    if session is None:
        return ()
    return ROLE_GRANTS.get(session.role, ())


def visible(tickets: Iterable[Ticket], session: Session | None) -> list[Ticket]:
    """Narrow an already filtered ticket list to what this session may see."""
    if session is None:
        return []
    if session.is_admin:
        return list(tickets)
    return [ticket for ticket in tickets if is_assignee(session, ticket)]
