"""Helpdesk REST API client with retries and dual cookie/bearer auth."""

from __future__ import annotations

import logging
import mimetypes
import time
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from helpdesk_client.core.config import settings
from helpdesk_client.core.exceptions import (
    ApiConnectionError,
    ApiError,
    AuthenticationError,
    InvalidConfigurationError,
    NotFoundError,
    ResponseShapeError,
)
from helpdesk_client.core.sanitize import path_segment
from helpdesk_client.core.storage import TOKEN_KEY, LocalStorage
from helpdesk_client.models.enums import TicketStatus, UserRole
from helpdesk_client.schemas.common import MessageResponse
from helpdesk_client.schemas.metrics import DashboardMetrics
from helpdesk_client.schemas.ticket import CommentCreate, CommentResponse, Ticket, TicketComment, TicketCreate
from helpdesk_client.schemas.user import (
    LoginData,
    LoginResponse,
    PromoteRoleResponse,
    RegisterData,
    User,
    UsersResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}
# POSTs create records server-side and are never replayed.
RETRYABLE_METHODS = {"GET", "PUT", "DELETE"}

_TICKET_LIST = TypeAdapter(list[Ticket])


def error_message(response: httpx.Response, fallback: str) -> str:
    """Prefer the body's ``message`` field, else the caller's fallback text."""
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return fallback


class HelpdeskApiClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        storage: LocalStorage | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).strip().rstrip("/")
        if not self.base_url.startswith(("http://", "https://")):
            raise InvalidConfigurationError(f"API URL must be http(s): {self.base_url!r}", setting="API_URL")
        self.storage = storage if storage is not None else LocalStorage()
        self.transport = transport
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.max_retries = max(max_retries or settings.HTTP_MAX_RETRIES, 1)
        self.backoff = settings.HTTP_RETRY_BACKOFF_SECONDS
        self.cookies = httpx.Cookies()
        self._sleep = sleep

    @property
    def has_credentials(self) -> bool:
        """True when a bearer token or the auth cookie is held locally."""
        if self.storage.get(TOKEN_KEY):
            return True
        return any(cookie.name == settings.AUTH_COOKIE_NAME for cookie in self.cookies.jar)

    # ------------------------------------------------------------------ transport

    def _headers(self, *, auth: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if auth:
            token = self.storage.get(TOKEN_KEY)
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def _raise_for_status(self, response: httpx.Response, *, fallback: str, use_server_message: bool) -> None:
        if response.is_success:
            return
        message = error_message(response, fallback) if use_server_message else fallback
        status = response.status_code
        logger.warning("API %s %s failed (status=%s): %s", response.request.method, response.request.url, status, message)
        if status in {401, 403}:
            raise AuthenticationError(message, status_code=status)
        if status == 404:
            raise NotFoundError(message, details={"url": str(response.request.url)})
        raise ApiError(message, status_code=status)

    def _request(
        self,
        method: str,
        path: str,
        *,
        fallback_message: str,
        auth: bool = True,
        use_server_message: bool = True,
        **kwargs: Any,
    ) -> Any:
        url = f"{self.base_url}/api{path}"
        method = method.upper()
        attempts = self.max_retries if method in RETRYABLE_METHODS else 1
        backoff = self.backoff
        with httpx.Client(
            timeout=self.timeout,
            headers=self._headers(auth=auth),
            cookies=self.cookies if auth else None,
            transport=self.transport,
        ) as client:
            for attempt in range(1, attempts + 1):
                try:
                    response = client.request(method, url, **kwargs)
                except httpx.HTTPError as exc:
                    if attempt >= attempts:
                        logger.error("API %s %s unreachable: %s", method, url, exc)
                        raise ApiConnectionError(url=url) from exc
                    self._sleep(backoff)
                    backoff *= 2
                    continue

                if response.status_code in RETRYABLE_STATUS and attempt < attempts:
                    self._sleep(backoff)
                    backoff *= 2
                    continue

                if auth:
                    self.cookies.update(response.cookies)
                self._raise_for_status(response, fallback=fallback_message, use_server_message=use_server_message)
                if not response.content:
                    return {}
                try:
                    return response.json()
                except ValueError as exc:
                    raise ResponseShapeError(path=path) from exc

    @staticmethod
    def _parse(model: type[ModelT], data: Any, path: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.warning("Unexpected payload from %s: %s", path, exc.errors()[:3])
            raise ResponseShapeError(path=path) from exc

    @staticmethod
    def _parse_tickets(data: Any, path: str) -> list[Ticket]:
        try:
            return _TICKET_LIST.validate_python(data)
        except ValidationError as exc:
            logger.warning("Unexpected ticket list from %s: %s", path, exc.errors()[:3])
            raise ResponseShapeError(path=path) from exc

    # ------------------------------------------------------------------ auth

    def register(self, data: RegisterData) -> User:
        payload = self._request(
            "POST",
            "/register",
            json=data.model_dump(mode="json"),
            fallback_message="Failed to create user",
        )
        return self._parse(User, payload, "/register")

    def login(self, data: LoginData) -> LoginResponse:
        payload = self._request(
            "POST",
            "/login",
            json=data.model_dump(mode="json"),
            fallback_message="Login failed",
        )
        result = self._parse(LoginResponse, payload, "/login")
        if result.token:
            self.storage.set(TOKEN_KEY, result.token)
        return result

    def logout(self) -> MessageResponse:
        try:
            payload = self._request("POST", "/logout", json={}, fallback_message="Logout failed")
        finally:
            self.storage.remove(TOKEN_KEY)
            self.cookies = httpx.Cookies()
        return self._parse(MessageResponse, payload, "/logout")

    def get_user(self) -> User:
        payload = self._request("GET", "/user", fallback_message="Not authenticated")
        return self._parse(User, payload, "/user")

    def list_users(self) -> list[User]:
        payload = self._request(
            "GET",
            "/users",
            fallback_message="Failed to fetch users",
            use_server_message=False,
        )
        if not isinstance(payload, dict):
            return []
        return self._parse(UsersResponse, payload, "/users").users

    def forgot_password(self, email: str) -> MessageResponse:
        payload = self._request(
            "POST",
            "/forgot-password",
            auth=False,
            json={"email": email},
            fallback_message="Failed to send reset email",
        )
        return self._parse(MessageResponse, payload, "/forgot-password")

    def reset_password(self, token: str, password: str) -> MessageResponse:
        path = f"/reset-password/{path_segment(token)}"
        payload = self._request(
            "POST",
            path,
            auth=False,
            json={"password": password},
            fallback_message="Failed to reset password",
        )
        return self._parse(MessageResponse, payload, path)

    def promote_user_role(self, user_id: str, role: UserRole) -> PromoteRoleResponse:
        path = f"/promote/{path_segment(user_id)}"
        payload = self._request(
            "PUT",
            path,
            json={"role": UserRole(role).value},
            fallback_message="Failed to promote user",
        )
        return self._parse(PromoteRoleResponse, payload, path)

    # ------------------------------------------------------------------ tickets

    def create_ticket(self, form: TicketCreate) -> Ticket | dict[str, Any]:
        # Plain fields go in as filename-less parts so the body is always multipart.
        parts: list[tuple[str, tuple[str | None, Any, str | None]]] = [
            (name, (None, value, None)) for name, value in form.to_form_fields().items()
        ]
        handle = None
        if form.image_path is not None:
            mime = mimetypes.guess_type(form.image_path.name)[0] or "application/octet-stream"
            handle = form.image_path.open("rb")
            parts.append(("image", (form.image_path.name, handle, mime)))
        try:
            payload = self._request(
                "POST",
                "/tickets",
                files=parts,
                fallback_message="Failed to create ticket",
            )
        finally:
            if handle is not None:
                handle.close()
        # Some deployments answer with {"message", "ticket"} instead of the ticket.
        if isinstance(payload, dict) and isinstance(payload.get("ticket"), dict):
            payload = payload["ticket"]
        try:
            return Ticket.model_validate(payload)
        except ValidationError:
            return payload if isinstance(payload, dict) else {}

    def list_tickets(self) -> list[Ticket]:
        payload = self._request(
            "GET",
            "/tickets",
            fallback_message="Failed to fetch tickets",
            use_server_message=False,
        )
        return self._parse_tickets(payload, "/tickets")

    def get_ticket(self, ticket_id: str) -> Ticket:
        path = f"/tickets/{path_segment(ticket_id)}"
        payload = self._request("GET", path, fallback_message="Ticket not found", use_server_message=False)
        return self._parse(Ticket, payload, path)

    def list_tickets_by_email(self, email: str) -> list[Ticket]:
        path = f"/tickets/email/{path_segment(email)}"
        payload = self._request("GET", path, fallback_message="Failed to fetch tickets", use_server_message=False)
        return self._parse_tickets(payload, path)

    def assign_ticket(self, ticket_id: str, user_id: str) -> dict[str, Any]:
        payload = self._request(
            "PUT",
            f"/tickets/assign/{path_segment(ticket_id)}",
            json={"userId": user_id},
            fallback_message="Failed to assign ticket",
            use_server_message=False,
        )
        return payload if isinstance(payload, dict) else {}

    def change_ticket_status(self, ticket_id: str, status: TicketStatus) -> MessageResponse:
        path = f"/tickets/status/{path_segment(ticket_id)}"
        payload = self._request(
            "PUT",
            path,
            json={"status": TicketStatus(status).value},
            fallback_message="Failed to update status",
            use_server_message=False,
        )
        return self._parse(MessageResponse, payload, path)

    def delete_ticket(self, ticket_id: str) -> MessageResponse:
        path = f"/tickets/{path_segment(ticket_id)}"
        payload = self._request("DELETE", path, fallback_message="Failed to delete ticket", use_server_message=False)
        return self._parse(MessageResponse, payload, path)

    def get_ticket_metrics(self) -> dict[str, Any]:
        payload = self._request(
            "GET",
            "/tickets/metrics",
            fallback_message="Failed to fetch metrics",
            use_server_message=False,
        )
        return payload if isinstance(payload, dict) else {}

    def add_staff_comment(self, ticket_id: str, message: str) -> TicketComment:
        path = f"/tickets/{path_segment(ticket_id)}/comment"
        body = CommentCreate(message=message)
        payload = self._request("POST", path, json=body.model_dump(), fallback_message="Failed to send reply")
        return self._parse(CommentResponse, payload, path).comment

    def add_tracker_comment(self, tracking_token: str, message: str) -> TicketComment:
        path = f"/tickets/track/{path_segment(tracking_token)}/comment"
        body = CommentCreate(message=message)
        payload = self._request(
            "POST",
            path,
            auth=False,
            json=body.model_dump(),
            fallback_message="Failed to add comment",
        )
        return self._parse(CommentResponse, payload, path).comment

    def track_ticket(self, tracking_token: str) -> Ticket:
        path = f"/tickets/track/{path_segment(tracking_token)}"
        payload = self._request(
            "GET",
            path,
            auth=False,
            fallback_message="Ticket not found or link is invalid.",
            use_server_message=False,
        )
        return self._parse(Ticket, payload, path)

    def get_dashboard_metrics(self) -> DashboardMetrics:
        payload = self._request("GET", "/metrics", fallback_message="Failed to fetch dashboard metrics")
        return self._parse(DashboardMetrics, payload, "/metrics")
