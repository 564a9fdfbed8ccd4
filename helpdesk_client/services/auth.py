"""Sign-in, sign-out and password reset flows."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from helpdesk_client.api.client import HelpdeskApiClient
from helpdesk_client.core.exceptions import HelpdeskClientException
from helpdesk_client.core.sanitize import clean_email, is_blank
from helpdesk_client.schemas.user import LoginData
from helpdesk_client.services.notifications import Notifier

logger = logging.getLogger(__name__)


def login(client: HelpdeskApiClient, notifier: Notifier, *, email: str, password: str) -> bool:
    try:
        data = LoginData(email=email, password=password)
    except ValidationError:
        notifier.error("Enter a valid email and password")
        return False
    try:
        result = client.login(data)
    except HelpdeskClientException as exc:
        notifier.error(exc.message or "Login failed")
        return False
    logger.info("Signed in as %s", data.email)
    notifier.success(result.message or "Logged in")
    return True


def logout(client: HelpdeskApiClient, notifier: Notifier) -> bool:
    try:
        result = client.logout()
    except HelpdeskClientException as exc:
        logger.error("Logout failed: %s", exc.message)
        notifier.error(exc.message)
        return False
    notifier.success(result.message or "Logged out")
    return True


def request_password_reset(client: HelpdeskApiClient, notifier: Notifier, *, email: str) -> bool:
    address = clean_email(email)
    if not address:
        notifier.error("Email is required")
        return False
    try:
        result = client.forgot_password(address)
    except HelpdeskClientException as exc:
        notifier.error(exc.message or "Failed to send reset email")
        return False
    notifier.success(result.message or "Password reset email sent")
    return True


def reset_password(client: HelpdeskApiClient, notifier: Notifier, *, token: str, password: str) -> bool:
    if is_blank(token) or is_blank(password):
        notifier.error("Reset token and new password are required")
        return False
    try:
        result = client.reset_password(token, password)
    except HelpdeskClientException as exc:
        notifier.error(exc.message or "Failed to reset password")
        return False
    notifier.success(result.message or "Password updated")
    return True
