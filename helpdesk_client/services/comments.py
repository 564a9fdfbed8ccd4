"""Comment list maintenance: local append, render keys and refresh merge."""

from __future__ import annotations

import datetime as dt
from collections import Counter
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from helpdesk_client.core.exceptions import PreconditionError
from helpdesk_client.core.sanitize import clean_multiline
from helpdesk_client.schemas.ticket import MAX_COMMENT_LEN, CommentCreate, CommentResponse, TicketComment


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def unwrap_comment(payload: Any) -> TicketComment:
    """Read a comment endpoint body, enveloped or bare."""
    return CommentResponse.model_validate(payload).comment


def validate_comment(message: str) -> str:
    """Clean a comment body, raising ``PreconditionError`` when it cannot be sent."""
    if not clean_multiline(message):
        raise PreconditionError("Comment cannot be empty")
    try:
        return CommentCreate(message=message).message
    except ValidationError as exc:
        if any(error["type"] == "string_too_long" for error in exc.errors()):
            raise PreconditionError(f"Comment is too long (max {MAX_COMMENT_LEN} characters)") from exc
        raise PreconditionError("Comment cannot be empty") from exc


def stamp_comment(comment: TicketComment, *, now: dt.datetime | None = None) -> TicketComment:
    """Give an echoed comment the client's time when the server sent none."""
    if comment.created_at is not None:
        return comment
    return comment.model_copy(update={"created_at": now or utcnow()})


def append_comment(
    comments: Sequence[TicketComment],
    comment: TicketComment,
    *,
    now: dt.datetime | None = None,
) -> list[TicketComment]:
    return [*comments, stamp_comment(comment, now=now)]


def comment_key(comment: TicketComment, position: int) -> str:
    if comment.id:
        return comment.id
    stamp = comment.created_at.isoformat() if comment.created_at else ""
    return f"{stamp}:{position}"


def render_keys(comments: Sequence[TicketComment]) -> list[str]:
    return [comment_key(comment, index) for index, comment in enumerate(comments)]


def _echo_signature(comment: TicketComment) -> tuple[str | None, str]:
    sender_type = comment.sender_type.value if comment.sender_type else None
    return sender_type, comment.message.strip()


def reconcile_comments(
    server: Sequence[TicketComment],
    local: Sequence[TicketComment],
) -> list[TicketComment]:
    """Merge a freshly fetched comment list with locally appended entries.

    Server order wins. A local entry survives only if the server does not
    already carry it, matched by identity, or for identity-less entries by
    sender type and message text.
    """
    merged = list(server)
    server_ids = {comment.id for comment in server if comment.id}
    local_ids = {comment.id for comment in local if comment.id}
    # server entries not already claimed by a local entry with the same id
    unclaimed = Counter(
        _echo_signature(comment) for comment in server if not comment.id or comment.id not in local_ids
    )

    for comment in local:
        if comment.id:
            if comment.id not in server_ids:
                merged.append(comment)
            continue
        signature = _echo_signature(comment)
        if unclaimed[signature] > 0:
            unclaimed[signature] -= 1
            continue
        merged.append(comment)
    return merged
