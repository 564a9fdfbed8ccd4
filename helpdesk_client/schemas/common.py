"""Shared pieces for the wire schemas."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    """Base for payloads read from the API: wire aliases in, snake_case out."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def parse_timestamp(value: Any) -> dt.datetime | None:
    """Parse an API timestamp into an aware UTC datetime, ``None`` when unusable."""
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        parsed = dt.datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        normalized = value.strip()
        if not normalized:
            return None
        parsed = None
        for candidate in (normalized.replace("Z", "+00:00"), normalized):
            try:
                parsed = dt.datetime.fromisoformat(candidate)
                break
            except ValueError:
                continue
        if parsed is None:
            logger.warning("Could not parse API timestamp: %s", value)
            return None
    else:
        logger.warning("Ignoring non-string timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


class MessageResponse(WireModel):
    message: str = ""
