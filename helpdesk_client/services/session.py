"""Resolve the current viewer's session from the API."""

from __future__ import annotations

import logging
from typing import Protocol

from helpdesk_client.core.exceptions import HelpdeskClientException
from helpdesk_client.schemas.user import Session, User

logger = logging.getLogger(__name__)


class CurrentUserSource(Protocol):
    def get_user(self) -> User: ...


def resolve_session(client: CurrentUserSource) -> Session | None:
    """Return the session, or ``None`` when the viewer must sign in.

    Every failure (transport, non-2xx, malformed body) maps to ``None``.
    """
    try:
        user = client.get_user()
    except HelpdeskClientException as exc:
        logger.debug("No session: %s", exc.message)
        return None
    except ValueError as exc:
        logger.debug("No session, unusable user payload: %s", exc)
        return None
    return Session.from_user(user)
