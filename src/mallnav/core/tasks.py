"""Cooperative task scheduler driven by the frame tick.

Timed scans, the scanner indicator loop and toast expiry all run as
cooperative tasks: each one is stepped once per tick and never blocks.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional
from enum import Enum, auto
import logging

logger = logging.getLogger(__name__)


class TaskPriority(Enum):
    """Step order within a tick. Higher values step first."""

    NOTIFICATION = 10
    ANIMATION = 50
    TIMER = 100


class TaskState(Enum):
    """Lifecycle of a cooperative task."""

    PENDING = auto()
    RUNNING = auto()
    FINISHED = auto()
    CANCELLED = auto()


class CooperativeTask(ABC):
    """A unit of work that advances one tick at a time.

    Subclasses implement ``advance``; the base class owns the state
    bookkeeping so that cancel/finish are idempotent and mutually
    exclusive.
    """

    priority: TaskPriority = TaskPriority.TIMER

    def __init__(self, name: str, priority: Optional[TaskPriority] = None):
        self.name = name
        if priority is not None:
            self.priority = priority
        self._state = TaskState.PENDING

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def is_active(self) -> bool:
        """True while the task still wants ticks."""
        return self._state in (TaskState.PENDING, TaskState.RUNNING)

    @property
    def is_cancelled(self) -> bool:
        return self._state == TaskState.CANCELLED

    @property
    def is_finished(self) -> bool:
        return self._state == TaskState.FINISHED

    def step(self, delta_ms: float) -> None:
        """Advance the task by one tick."""
        if not self.is_active:
            return
        self._state = TaskState.RUNNING
        if self.advance(delta_ms):
            # State flips before the hook so a cancel issued from inside
            # on_finish is a no-op.
            self._state = TaskState.FINISHED
            self.on_finish()

    def cancel(self) -> bool:
        """Cancel the task.

        Returns:
            True if the task was active and is now cancelled
        """
        if not self.is_active:
            return False
        self._state = TaskState.CANCELLED
        self.on_cancel()
        return True

    @abstractmethod
    def advance(self, delta_ms: float) -> bool:
        """Do one tick of work. Return True when the task is done."""

    def on_finish(self) -> None:
        """Called once on natural completion."""

    def on_cancel(self) -> None:
        """Called once on cancellation."""


class TaskScheduler:
    """Runs cooperative tasks on the frame tick.

    Tasks are registered by name and optionally grouped, so everything that
    belongs to one page can be stopped at once when that page is left.
    """

    def __init__(self):
        self._tasks: Dict[str, CooperativeTask] = {}
        self._groups: Dict[str, List[str]] = {"default": []}
        self._task_groups: Dict[str, str] = {}
        self._on_task_end: List[Callable[[CooperativeTask], None]] = []
        self._elapsed_ms = 0.0

        logger.debug("TaskScheduler initialized")

    def schedule(self, task: CooperativeTask, group: str = "default") -> str:
        """Register a task to be stepped from the next tick on.

        A running task with the same name is cancelled and replaced.

        Args:
            task: The task to run
            group: Group name for batch cancellation

        Returns:
            The task name
        """
        if task.name in self._tasks:
            self.cancel(task.name)

        self._tasks[task.name] = task
        self._groups.setdefault(group, []).append(task.name)
        self._task_groups[task.name] = group

        logger.debug(f"Task scheduled: {task.name} (priority={task.priority.name}, group={group})")
        return task.name

    def cancel(self, name: str) -> bool:
        """Cancel and remove a task by name.

        Returns:
            True if the task was found
        """
        task = self._tasks.get(name)
        if task is None:
            return False

        task.cancel()
        self._remove(name)
        logger.debug(f"Task cancelled: {name}")
        return True

    def stop_group(self, group: str) -> int:
        """Cancel every task in a group.

        Returns:
            Number of tasks cancelled
        """
        names = list(self._groups.get(group, []))
        count = 0
        for name in names:
            if self.cancel(name):
                count += 1
        if count:
            logger.debug(f"Stopped {count} task(s) in group {group}")
        return count

    def stop_all(self) -> int:
        names = list(self._tasks.keys())
        for name in names:
            self.cancel(name)
        return len(names)

    def update(self, delta_ms: float) -> None:
        """Step every active task once, highest priority first.

        Args:
            delta_ms: Time elapsed since last tick in milliseconds
        """
        if delta_ms < 0:
            raise ValueError("delta_ms must be non-negative")
        self._elapsed_ms += delta_ms

        # sorted() is stable, so insertion order holds within a priority
        ordered = sorted(
            self._tasks.values(),
            key=lambda task: task.priority.value,
            reverse=True,
        )
        for task in ordered:
            # A task earlier in this tick may have cancelled or replaced it
            if self._tasks.get(task.name) is not task or not task.is_active:
                continue
            task.step(delta_ms)

        for name in [n for n, t in self._tasks.items() if not t.is_active]:
            self._remove(name)

    def get(self, name: str) -> Optional[CooperativeTask]:
        return self._tasks.get(name)

    def has_task(self, name: str) -> bool:
        return name in self._tasks

    def is_running(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and task.is_active

    def get_tasks_in_group(self, group: str) -> List[str]:
        return list(self._groups.get(group, []))

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    @property
    def elapsed_ms(self) -> float:
        """Total tick time seen by this scheduler."""
        return self._elapsed_ms

    def on_task_end(self, callback: Callable[[CooperativeTask], None]) -> None:
        """Register a callback for tasks leaving the scheduler."""
        self._on_task_end.append(callback)

    def _remove(self, name: str) -> None:
        task = self._tasks.pop(name, None)
        group = self._task_groups.pop(name, None)
        if group is not None and name in self._groups.get(group, []):
            self._groups[group].remove(name)
        if task is None:
            return
        for callback in self._on_task_end:
            try:
                callback(task)
            except Exception as e:
                logger.error(f"Error in task end callback: {e}")
