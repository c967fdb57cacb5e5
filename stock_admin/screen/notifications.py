from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from stock_admin.config import get_config


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    expires_at: float


class NotificationSlot:
    """Single auto-dismissing message; a new message replaces the current one."""

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else get_config().notification_ttl_seconds
        self._clock = clock
        self._current: Optional[Notification] = None

    def show(self, kind: NotificationKind, message: str) -> Notification:
        self._current = Notification(kind=kind, message=message, expires_at=self._clock() + self.ttl_seconds)
        return self._current

    def success(self, message: str) -> Notification:
        return self.show(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.show(NotificationKind.ERROR, message)

    def current(self) -> Optional[Notification]:
        if self._current is not None and self._clock() >= self._current.expires_at:
            self._current = None
        return self._current

    def close(self) -> None:
        self._current = None
