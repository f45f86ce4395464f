"""
Event bus for MALLNAV.

Carries user input actions from the presentation layer to the flow
controller, frame ticks from the runner, and flow notifications back out.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Awaitable
from enum import Enum, auto
import asyncio
import logging
import time
from collections import defaultdict

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Built-in event types."""
    # User input actions
    SELECT_DESTINATION = auto()
    CONFIRM = auto()
    CANCEL = auto()
    NAVIGATION_ENDED = auto()

    # Flow events
    PAGE_CHANGED = auto()
    SCAN_STARTED = auto()
    SCAN_COMPLETED = auto()
    SCAN_CANCELLED = auto()
    HANDOFF_PUBLISHED = auto()
    NOTIFICATION = auto()

    # Navigation subsystem events
    LOCALIZED = auto()
    NAVIGATION_STARTED = auto()
    ARRIVED = auto()

    # System events
    TICK = auto()  # Frame tick
    SHUTDOWN = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: Event type (EventType enum or custom string)
        data: Event payload
        source: Component that emitted the event
        timestamp: When event was created
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.monotonic)


SyncHandler = Callable[[Event], None]
AsyncHandler = Callable[[Event], Awaitable[None]]
Handler = SyncHandler | AsyncHandler


class EventBus:
    """
    Central event bus for component communication.

    Supports both synchronous and asynchronous handlers.
    Events can be emitted immediately or queued for the next frame.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._event_history: list[Event] = []
        self._history_limit = history_limit

    def subscribe(
        self,
        event_type: EventType | str,
        handler: Handler
    ) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Args:
            event_type: Type of event to listen for
            handler: Callback function (sync or async)

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type}")

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Handler unsubscribed from {event_type}")

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to all events. Returns unsubscribe function."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """
        Emit an event immediately (synchronous handlers only).

        For async handlers, use emit_async or queue_event.
        """
        if event.type != EventType.TICK:
            self._add_to_history(event)
        self._dispatch_sync(event)

    async def emit_async(self, event: Event) -> None:
        """Emit an event and await all handlers (sync and async)."""
        self._add_to_history(event)
        await self._dispatch_async(event)

    def queue_event(self, event: Event) -> None:
        """Queue an event for the next process_queue() call."""
        self._queue.put_nowait(event)

    async def process_queue(self) -> None:
        """Process all queued events."""
        while not self._queue.empty():
            event = self._queue.get_nowait()
            self._add_to_history(event)
            await self._dispatch_async(event)
            self._queue.task_done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def _handlers_for(self, event: Event) -> list[Handler]:
        return list(self._handlers.get(event.type, [])) + list(self._global_handlers)

    def _dispatch_sync(self, event: Event) -> None:
        """Dispatch event to synchronous handlers only."""
        for handler in self._handlers_for(event):
            if asyncio.iscoroutinefunction(handler):
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type}: {e}")

    async def _dispatch_async(self, event: Event) -> None:
        """Dispatch event to all handlers (sync and async)."""
        tasks = []
        for handler in self._handlers_for(event):
            if asyncio.iscoroutinefunction(handler):
                tasks.append(asyncio.create_task(handler(event)))
            else:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(f"Error in sync handler for {event.type}: {e}")

        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error(f"Error in async handler: {result}")

    def _add_to_history(self, event: Event) -> None:
        """Add event to history, maintaining limit."""
        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

    def get_history(
        self,
        event_type: EventType | str | None = None,
        limit: int = 10
    ) -> list[Event]:
        """Get recent events from history."""
        history = self._event_history
        if event_type is not None:
            history = [e for e in history if e.type == event_type]
        return history[-limit:]

    def clear_history(self) -> None:
        self._event_history.clear()


# Convenience constructors for the input boundary
def select_destination_event(destination_id: int, source: str = "menu") -> Event:
    """Create a destination selection event."""
    return Event(
        EventType.SELECT_DESTINATION,
        data={"destination_id": destination_id},
        source=source,
    )


def confirm_event(source: str = "menu") -> Event:
    """Create a GO / get-started event."""
    return Event(EventType.CONFIRM, source=source)


def cancel_event(source: str = "menu") -> Event:
    """Create a go-back event."""
    return Event(EventType.CANCEL, source=source)


def navigation_ended_event(reason: str = "stopped", source: str = "navigation") -> Event:
    """Create the event the navigation subsystem sends when it is done."""
    return Event(EventType.NAVIGATION_ENDED, data={"reason": reason}, source=source)


def tick_event(delta: float, frame: int) -> Event:
    """Create a frame tick event (delta in seconds)."""
    return Event(EventType.TICK, data={"delta": delta, "frame": frame})
