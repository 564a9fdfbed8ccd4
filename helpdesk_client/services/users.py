"""User listing, role changes and account creation for administrators."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core import rbac
from helpdesk_client.core.exceptions import HelpdeskClientException, PreconditionError
from helpdesk_client.models.enums import UserRole
from helpdesk_client.schemas.user import RegisterData, Session, User
from helpdesk_client.services.notifications import Notifier
from helpdesk_client.services.session import resolve_session

logger = logging.getLogger(__name__)

ROLE_BADGES: dict[UserRole, str] = {
    UserRole.super_admin: "destructive",
    UserRole.admin: "default",
    UserRole.user: "secondary",
}


def role_badge(role: UserRole) -> str:
    return ROLE_BADGES[role]


class UserAdminViewModel:
    def __init__(self, client: HelpdeskApiClient, notifier: Notifier | None = None) -> None:
        self.client = client
        self.notifier = notifier or Notifier()
        self.session: Session | None = None
        self.users: list[User] = []
        self.loading = False
        self.updating: set[str] = set()
        self.creating = False
        self.torn_down = False

    def unmount(self) -> None:
        self.torn_down = True

    def mount(self) -> Session | None:
        """Resolve the session; users are only fetched for administrators."""
        self.session = resolve_session(self.client)
        if rbac.can_manage_users(self.session):
            self.load()
        return self.session

    @property
    def role_choices(self) -> tuple[UserRole, ...]:
        return rbac.assignable_roles(self.session)

    def load(self) -> bool:
        self.loading = True
        try:
            users = self.client.list_users()
        except HelpdeskClientException as exc:
            if not self.torn_down:
                logger.warning("User list load failed: %s", exc.message)
                self.notifier.error("Failed to load users")
            return False
        finally:
            self.loading = False
        if self.torn_down:
            return False
        self.users = users
        self.updating &= {user.id for user in users}
        return True

    def find(self, user_id: str) -> User | None:
        return next((user for user in self.users if user.id == user_id), None)

    def can_modify(self, user: User) -> bool:
        return rbac.can_modify_user_role(user.role)

    def assignable_users(self) -> list[User]:
        """Users offered in the ticket assignment picker."""
        return list(self.users)

    def promote(self, user_id: str, role: UserRole | str) -> bool:
        try:
            new_role = UserRole(role)
        except ValueError:
            self.notifier.error(f"Unknown role: {role}")
            return False
        target = self.find(user_id)
        if target is not None and not self.can_modify(target):
            exc = PreconditionError("Cannot modify a super admin")
            self.notifier.push(exc.level, exc.message)
            return False

        self.updating.add(user_id)
        try:
            self.client.promote_user_role(user_id, new_role)
        except HelpdeskClientException as exc:
            if not self.torn_down:
                self.notifier.error(exc.message or "Failed to update role")
            return False
        finally:
            self.updating.discard(user_id)

        if self.torn_down:
            return False
        logger.info("User %s role -> %s", user_id, new_role.value)
        self.notifier.success("User role updated")
        self.load()
        return True

    def create_user(self, *, name: str, email: str, password: str, role: UserRole | str = UserRole.user) -> User | None:
        """Register a new account. Super-admin cannot be granted here."""
        try:
            requested_role = UserRole(role)
        except ValueError:
            self.notifier.error(f"Unknown role: {role}")
            return None
        if requested_role not in rbac.CREATABLE_ROLES:
            exc = PreconditionError("Super Admin role cannot be assigned here.")
            self.notifier.push(exc.level, exc.message)
            return None
        try:
            data = RegisterData(name=name, email=email, password=password)
        except ValidationError as exc:
            field = exc.errors()[0]["loc"][0] if exc.errors() else "input"
            self.notifier.error(f"Invalid {field}")
            return None

        self.creating = True
        try:
            user = self.client.register(data)
        except HelpdeskClientException as exc:
            self.notifier.error(exc.message or "Failed to create user")
            return None
        finally:
            self.creating = False

        logger.info("User created: %s", user.email)
        self.notifier.success("User created successfully")
        # registration always yields a plain user; elevate afterwards
        if requested_role != UserRole.user and user.role != requested_role:
            try:
                self.client.promote_user_role(user.id, requested_role)
            except HelpdeskClientException as exc:
                self.notifier.error(exc.message or "Failed to update role")
                return user
            user = user.model_copy(update={"role": requested_role})
        return user
