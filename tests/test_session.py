from __future__ import annotations

import httpx

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core.exceptions import ApiConnectionError, AuthenticationError
from helpdesk_client.core.storage import MemoryStorage
from helpdesk_client.models.enums import UserRole
from helpdesk_client.schemas.user import User
from helpdesk_client.services.session import resolve_session


class _StubUserSource:
    def __init__(self, result):
        self.result = result

    def get_user(self) -> User:
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_user_payload_becomes_session() -> None:
    user = User.model_validate({"_id": "u1", "name": "Amal", "email": "amal@example.com", "role": "admin"})
    session = resolve_session(_StubUserSource(user))
    assert session is not None
    assert session.identity == "u1"
    assert session.role == UserRole.admin
    assert session.is_admin


def test_auth_and_transport_failures_mean_signed_out() -> None:
    assert resolve_session(_StubUserSource(AuthenticationError())) is None
    assert resolve_session(_StubUserSource(ApiConnectionError(url="http://helpdesk.test/api/user"))) is None


def test_resolver_over_http() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/user"
        if request.headers.get("Authorization") != "Bearer tkn":
            return httpx.Response(401, json={"message": "Unauthorized"})
        return httpx.Response(200, json={"_id": "u9", "name": "Sami", "email": "s@example.com", "role": "user"})

    signed_in = HelpdeskApiClient(
        base_url="http://helpdesk.test",
        storage=MemoryStorage({"token": "tkn"}),
        transport=httpx.MockTransport(handler),
    )
    signed_out = HelpdeskApiClient(
        base_url="http://helpdesk.test",
        storage=MemoryStorage(),
        transport=httpx.MockTransport(handler),
    )

    session = resolve_session(signed_in)
    assert session is not None and session.identity == "u9" and not session.is_admin
    assert resolve_session(signed_out) is None


def test_malformed_user_payload_means_signed_out() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"name": "missing id and role"})

    client = HelpdeskApiClient(
        base_url="http://helpdesk.test",
        storage=MemoryStorage(),
        transport=httpx.MockTransport(handler),
    )
    assert resolve_session(client) is None
