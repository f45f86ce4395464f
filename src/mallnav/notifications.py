"""Transient pop-up messages (toasts)."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from collections import deque
from typing import Callable, Deque, List, Optional
import logging

from mallnav.core.tasks import CooperativeTask, TaskPriority, TaskScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A message and how long it stays on screen."""

    message: str
    duration_s: float


class NotificationChannel(ABC):
    """Shows a message for at least ``duration_s`` seconds, then clears it.

    ``show`` never blocks the caller.
    """

    @abstractmethod
    def show(self, message: str, duration_s: float) -> None:
        ...


class _ToastTask(CooperativeTask):
    priority = TaskPriority.NOTIFICATION

    def __init__(self, notification: Notification, on_expire: Callable[[], None]):
        super().__init__("toast")
        self.notification = notification
        self._on_expire = on_expire
        self._elapsed_ms = 0.0

    def advance(self, delta_ms: float) -> bool:
        self._elapsed_ms += delta_ms
        return self._elapsed_ms >= self.notification.duration_s * 1000.0

    def on_finish(self) -> None:
        self._on_expire()


class ToastNotifier(NotificationChannel):
    """Single-slot toast driven by the frame tick.

    A new message replaces the one on screen and restarts the timer.
    """

    def __init__(self, scheduler: TaskScheduler, history_limit: int = 50):
        self._scheduler = scheduler
        self._current: Optional[Notification] = None
        self._shown: Deque[Notification] = deque(maxlen=history_limit)
        self._shown_count = 0
        self._on_show: List[Callable[[Notification], None]] = []
        self._on_clear: List[Callable[[], None]] = []

    @property
    def current(self) -> Optional[Notification]:
        """The visible notification, if any."""
        return self._current

    @property
    def is_visible(self) -> bool:
        return self._current is not None

    @property
    def history(self) -> List[Notification]:
        """Most recent notifications, oldest first."""
        return list(self._shown)

    @property
    def shown_count(self) -> int:
        """Notifications shown since creation, including ones dropped from history."""
        return self._shown_count

    def show(self, message: str, duration_s: float) -> None:
        if duration_s <= 0:
            raise ValueError("duration_s must be positive")
        notification = Notification(message=message, duration_s=duration_s)
        self._current = notification
        self._shown.append(notification)
        self._shown_count += 1
        # Replaces any toast still counting down
        self._scheduler.schedule(_ToastTask(notification, self._expire), group="notifications")
        logger.info(f"Toast: {message} ({duration_s:g}s)")

        for callback in self._on_show:
            callback(notification)

    def clear(self) -> None:
        """Hide the current toast early."""
        self._scheduler.cancel("toast")
        self._expire()

    def on_show(self, callback: Callable[[Notification], None]) -> None:
        self._on_show.append(callback)

    def on_clear(self, callback: Callable[[], None]) -> None:
        self._on_clear.append(callback)

    def _expire(self) -> None:
        if self._current is None:
            return
        self._current = None
        for callback in self._on_clear:
            callback()
