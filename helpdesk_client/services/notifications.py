"""Transient user-facing notices (success / error / info)."""

from __future__ import annotations

import datetime as dt
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque

from helpdesk_client.models.enums import NoticeLevel

logger = logging.getLogger(__name__)

MAX_NOTICES = 50


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str
    created_at: dt.datetime = field(default_factory=utcnow)


class Notifier:
    def __init__(self, *, max_notices: int = MAX_NOTICES) -> None:
        self._queue: Deque[Notice] = deque(maxlen=max_notices)

    def push(self, level: NoticeLevel | str, message: str) -> Notice:
        notice = Notice(level=NoticeLevel(level), message=message)
        self._queue.append(notice)
        logger.debug("notice %s: %s", notice.level.value, message)
        return notice

    def success(self, message: str) -> Notice:
        return self.push(NoticeLevel.success, message)

    def error(self, message: str) -> Notice:
        return self.push(NoticeLevel.error, message)

    def info(self, message: str) -> Notice:
        return self.push(NoticeLevel.info, message)

    @property
    def notices(self) -> list[Notice]:
        return list(self._queue)

    def latest(self) -> Notice | None:
        return self._queue[-1] if self._queue else None

    def has_errors(self) -> bool:
        return any(notice.level == NoticeLevel.error for notice in self._queue)

    def drain(self) -> list[Notice]:
        drained = list(self._queue)
        self._queue.clear()
        return drained
