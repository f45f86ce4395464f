"""Core framework components for MALLNAV."""

from .state import Page, PageContext, PageStateMachine
from .events import EventBus, Event, EventType
from .tasks import CooperativeTask, TaskPriority, TaskScheduler, TaskState

__all__ = [
    "Page",
    "PageContext",
    "PageStateMachine",
    "EventBus",
    "Event",
    "EventType",
    "CooperativeTask",
    "TaskPriority",
    "TaskScheduler",
    "TaskState",
]
